"""Integration tests for CommandEngine over real table files."""

from __future__ import annotations

from pathlib import Path

import pytest

from tabdb.adapters.outbound import TabFileStorage
from tabdb.application import Catalog, CommandEngine
from tabdb.infrastructure.metrics import MetricsRegistry

MARKBOOK = [
    "CREATE DATABASE markbook;",
    "USE markbook;",
    "CREATE TABLE marks (name, mark, pass);",
    "INSERT INTO marks VALUES ('Simon', 65, TRUE);",
    "INSERT INTO marks VALUES ('Sion', 55, TRUE);",
    "INSERT INTO marks VALUES ('Rob', 35, FALSE);",
    "INSERT INTO marks VALUES ('Chris', 20, FALSE);",
    "CREATE TABLE coursework (task, submission);",
    "INSERT INTO coursework VALUES ('OXO', 3);",
    "INSERT INTO coursework VALUES ('DB', 1);",
    "INSERT INTO coursework VALUES ('OXO', 4);",
    "INSERT INTO coursework VALUES ('STAG', 2);",
]


def run_all(engine: CommandEngine, commands: list[str], session_id: str | None = None) -> None:
    for command in commands:
        response = engine.handle_command(command, session_id)
        assert response.startswith("[OK]"), f"{command} -> {response}"


@pytest.fixture
def markbook(engine: CommandEngine) -> CommandEngine:
    run_all(engine, MARKBOOK)
    return engine


@pytest.mark.integration
class TestBasicScenario:
    """End-to-end statement handling."""

    def test_create_insert_select(self, engine: CommandEngine) -> None:
        run_all(
            engine,
            [
                "CREATE DATABASE d;",
                "USE d;",
                "CREATE TABLE t (a, b);",
                "INSERT INTO t VALUES (1, 2);",
            ],
        )
        assert engine.handle_command("SELECT * FROM t;") == "[OK]\nid\ta\tb\n1\t1\t2"

    def test_missing_table(self, markbook: CommandEngine) -> None:
        assert markbook.handle_command("SELECT * FROM nosuchtable;").startswith("[ERROR]")

    def test_update_id_rejected(self, markbook: CommandEngine) -> None:
        assert markbook.handle_command("UPDATE marks SET id=5 WHERE mark==65;").startswith("[ERROR]")
        assert "1\tSimon\t65\tTRUE" in markbook.handle_command("SELECT * FROM marks;")

    def test_mutations_return_bare_ok(self, markbook: CommandEngine) -> None:
        assert markbook.handle_command("INSERT INTO marks VALUES ('Dora', 70, TRUE);") == "[OK]"

    def test_empty_command(self, engine: CommandEngine) -> None:
        assert engine.handle_command("") == "[ERROR] Empty command"
        assert engine.handle_command("   ") == "[ERROR] Empty command"

    def test_missing_terminator(self, markbook: CommandEngine) -> None:
        assert markbook.handle_command("SELECT * FROM marks").startswith("[ERROR]")

    def test_no_database_selected(self, engine: CommandEngine) -> None:
        response = engine.handle_command("CREATE TABLE t (a);")
        assert response.startswith("[ERROR] No database selected")

    def test_select_with_no_matches_returns_header(self, markbook: CommandEngine) -> None:
        response = markbook.handle_command("SELECT name FROM marks WHERE mark > 100;")
        assert response == "[OK]\nname"

    def test_keywords_case_insensitive(self, markbook: CommandEngine) -> None:
        response = markbook.handle_command("select NAME from MARKS where Mark >= 55;")
        assert response == "[OK]\nname\nSimon\nSion"


@pytest.mark.integration
class TestMarkbookScenario:
    """The classic marks/coursework walkthrough."""

    def test_select_all(self, markbook: CommandEngine) -> None:
        response = markbook.handle_command("SELECT * FROM marks;")
        assert response.splitlines() == [
            "[OK]",
            "id\tname\tmark\tpass",
            "1\tSimon\t65\tTRUE",
            "2\tSion\t55\tTRUE",
            "3\tRob\t35\tFALSE",
            "4\tChris\t20\tFALSE",
        ]

    def test_join(self, markbook: CommandEngine) -> None:
        response = markbook.handle_command("JOIN coursework AND marks ON submission AND id;")
        assert response.splitlines() == [
            "[OK]",
            "id\tcoursework.task\tcoursework.submission\tmarks.name\tmarks.mark\tmarks.pass",
            "1\tOXO\t3\tRob\t35\tFALSE",
            "2\tDB\t1\tSimon\t65\tTRUE",
            "3\tOXO\t4\tChris\t20\tFALSE",
            "4\tSTAG\t2\tSion\t55\tTRUE",
        ]

    def test_join_unknown_column(self, markbook: CommandEngine) -> None:
        response = markbook.handle_command("JOIN coursework AND marks ON height AND id;")
        assert response.startswith("[ERROR]")

    def test_update_then_select(self, markbook: CommandEngine) -> None:
        assert markbook.handle_command("UPDATE marks SET mark = 38 WHERE name == 'Chris';") == "[OK]"
        response = markbook.handle_command("SELECT * FROM marks WHERE name == 'Chris';")
        assert "Chris\t38\tFALSE" in response

    def test_delete(self, markbook: CommandEngine) -> None:
        markbook.handle_command("DELETE FROM marks WHERE name == 'Sion';")
        assert "Sion" not in markbook.handle_command("SELECT * FROM marks;")

    def test_compound_condition(self, markbook: CommandEngine) -> None:
        markbook.handle_command("UPDATE marks SET mark = 38 WHERE name == 'Chris';")
        response = markbook.handle_command("SELECT * FROM marks WHERE (pass == FALSE) AND (mark > 35);")
        assert response.splitlines()[2:] == ["4\tChris\t38\tFALSE"]

    def test_like(self, markbook: CommandEngine) -> None:
        response = markbook.handle_command("SELECT * FROM marks WHERE name LIKE 'i';")
        lines = response.splitlines()
        assert "1\tSimon\t65\tTRUE" in lines
        assert "4\tChris\t20\tFALSE" in lines
        assert not any("Rob" in line for line in lines)

    def test_alter_add_and_drop(self, markbook: CommandEngine) -> None:
        markbook.handle_command("ALTER TABLE marks ADD age;")
        assert "id\tname\tmark\tpass\tage" in markbook.handle_command("SELECT * FROM marks;")
        markbook.handle_command("ALTER TABLE marks DROP COLUMN pass;")
        markbook.handle_command("UPDATE marks SET age = 35 WHERE name == 'Simon';")
        response = markbook.handle_command("SELECT * FROM marks;")
        assert "id\tname\tmark\tage" in response
        assert "1\tSimon\t65\t35" in response
        assert "2\tSion\t55\tNULL" in response

    def test_error_cases(self, markbook: CommandEngine) -> None:
        for command in [
            "SELECT * FROM crew;",
            "SELECT height FROM marks WHERE name == 'Chris';",
            "ALTER TABLE marks DROP id;",
            "ALTER TABLE marks ADD ID;",
            "update marks set id=3 where mark==65;",
            "INSERT INTO marks VALUES ('Dora', 70);",
            "CREATE TABLE marks (a);",
            "CREATE DATABASE markbook;",
            "USE nowhere;",
            "SELECT * FROM marks WHERE name > 3;",
            "SELECT * FROM marks WHERE mark > 'high';",
            "SELECT * FROM marks WHERE (mark > 3;",
        ]:
            response = markbook.handle_command(command)
            assert response.startswith("[ERROR] "), command
            assert "\n" not in response, command

    def test_condition_on_dropped_column(self, markbook: CommandEngine) -> None:
        markbook.handle_command("ALTER TABLE marks DROP pass;")
        assert markbook.handle_command("SELECT * FROM marks where pass == NULL;").startswith("[ERROR]")

    def test_string_with_statement_text_is_data(self, markbook: CommandEngine) -> None:
        response = markbook.handle_command(
            "INSERT INTO coursework VALUES ('STAG); drop database markbook;', 2);"
        )
        assert response == "[OK]"
        assert "STAG); drop database markbook;" in markbook.handle_command("SELECT * FROM coursework;")
        assert markbook.handle_command("USE markbook;") == "[OK]"

    def test_ids_never_reused(self, markbook: CommandEngine) -> None:
        markbook.handle_command("DELETE FROM marks WHERE name == 'Chris';")
        markbook.handle_command("INSERT INTO marks VALUES ('Dora', 70, TRUE);")
        assert "5\tDora\t70\tTRUE" in markbook.handle_command("SELECT * FROM marks;")

    def test_drop_table_and_database(self, markbook: CommandEngine, storage: TabFileStorage) -> None:
        assert markbook.handle_command("DROP TABLE marks;") == "[OK]"
        assert not storage.table_path("markbook", "marks").exists()
        assert markbook.handle_command("DROP DATABASE markbook;") == "[OK]"
        assert not storage.database_path("markbook").exists()
        assert markbook.handle_command("SELECT * FROM coursework;").startswith(
            "[ERROR] No database selected"
        )


@pytest.mark.integration
class TestPersistence:
    """Data written by one engine is visible to a fresh one."""

    def test_reload(
        self, markbook: CommandEngine, storage: TabFileStorage, metrics_registry: MetricsRegistry
    ) -> None:
        markbook.handle_command("UPDATE marks SET mark = 65.10 WHERE name == 'Simon';")
        before = markbook.handle_command("SELECT * FROM marks;")

        fresh = CommandEngine(Catalog(storage, metrics=metrics_registry), metrics=metrics_registry)
        assert fresh.handle_command("USE markbook;") == "[OK]"
        assert fresh.handle_command("SELECT * FROM marks;") == before
        assert "65.10" in before

    def test_reload_keeps_query_results_for_retyped_values(
        self, engine: CommandEngine, storage: TabFileStorage, metrics_registry: MetricsRegistry
    ) -> None:
        run_all(
            engine,
            [
                "CREATE DATABASE d;",
                "USE d;",
                "CREATE TABLE t (name, n, flag);",
                "INSERT INTO t VALUES ('NULL', '+5', 'TRUE');",
            ],
        )
        queries = [
            "SELECT * FROM t;",
            "SELECT * FROM t WHERE name == 'NULL';",
            "SELECT * FROM t WHERE name == NULL;",
            "SELECT * FROM t WHERE n == 5;",
            "SELECT * FROM t WHERE flag == TRUE;",
        ]
        before = [engine.handle_command(query) for query in queries]
        assert before[0] == "[OK]\nid\tname\tn\tflag\n1\tNULL\t+5\tTRUE"

        fresh = CommandEngine(Catalog(storage, metrics=metrics_registry), metrics=metrics_registry)
        assert fresh.handle_command("USE d;") == "[OK]"
        assert [fresh.handle_command(query) for query in queries] == before

    def test_id_only_table(self, engine: CommandEngine) -> None:
        run_all(engine, ["CREATE DATABASE d;", "USE d;", "CREATE TABLE ids;", "INSERT INTO ids VALUES ();"])
        assert engine.handle_command("SELECT * FROM ids;") == "[OK]\nid\n1"
        assert engine.handle_command("INSERT INTO ids VALUES (1);").startswith("[ERROR]")

    def test_file_layout(self, markbook: CommandEngine, test_config) -> None:
        path: Path = test_config.storage.data_dir / "markbook" / "marks.tab"
        lines = path.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "id\tname\tmark\tpass"
        assert lines[1] == "1\tSimon\t65\tTRUE"

    def test_append_mode(self, storage: TabFileStorage, metrics_registry: MetricsRegistry) -> None:
        engine = CommandEngine(
            Catalog(storage, insert_mode="append", metrics=metrics_registry), metrics=metrics_registry
        )
        run_all(engine, MARKBOOK)
        path = storage.table_path("markbook", "marks")
        assert path.read_text(encoding="utf-8").count("\n") == 5

    def test_next_id_restored_after_reload(
        self, markbook: CommandEngine, storage: TabFileStorage, metrics_registry: MetricsRegistry
    ) -> None:
        fresh = CommandEngine(Catalog(storage, metrics=metrics_registry), metrics=metrics_registry)
        fresh.handle_command("USE markbook;")
        fresh.handle_command("INSERT INTO marks VALUES ('Dora', 70, TRUE);")
        assert "5\tDora" in fresh.handle_command("SELECT * FROM marks;")


@pytest.mark.integration
class TestSessions:
    """Per-session database selection."""

    def test_sessions_select_independently(self, markbook: CommandEngine) -> None:
        other = markbook.create_session()
        assert markbook.handle_command("SELECT * FROM marks;", other).startswith("[ERROR]")
        markbook.handle_command("CREATE DATABASE second;", other)
        markbook.handle_command("USE second;", other)
        assert markbook.handle_command("SELECT * FROM marks;").startswith("[OK]")

    def test_drop_clears_other_sessions(self, markbook: CommandEngine) -> None:
        other = markbook.create_session()
        markbook.handle_command("USE markbook;", other)
        markbook.handle_command("DROP DATABASE markbook;")
        response = markbook.handle_command("SELECT * FROM marks;", other)
        assert response.startswith("[ERROR] No database selected")

    def test_unknown_session(self, engine: CommandEngine) -> None:
        assert engine.handle_command("USE x;", "missing").startswith("[ERROR] Session not found")

    def test_close_session(self, engine: CommandEngine) -> None:
        session_id = engine.create_session()
        assert engine.close_session(session_id) is True
        assert engine.close_session(session_id) is False

    def test_stats_and_metrics(self, markbook: CommandEngine, metrics_registry: MetricsRegistry) -> None:
        markbook.handle_command("SELECT * FROM crew;")
        stats = markbook.get_stats()
        assert stats["databases_resident"] == ["markbook"]
        assert stats["databases"] == ["markbook"]
        assert stats["commands"] == {"ok": len(MARKBOOK), "failed": 1}
        registry = metrics_registry.registry
        assert registry.get_sample_value(
            "tabdb_commands_total", {"statement": "insert", "status": "ok"}
        ) == 8.0
        assert registry.get_sample_value(
            "tabdb_commands_total", {"statement": "select", "status": "error"}
        ) == 1.0
