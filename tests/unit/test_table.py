"""Unit tests for the Table and Database entities."""

from __future__ import annotations

import pytest

from tabdb.adapters.inbound import CommandParser
from tabdb.domain.entities import Database, Table
from tabdb.domain.errors import (
    DuplicateColumnError,
    DuplicateTableError,
    InvalidNameError,
    InvalidValueError,
    ReservedColumnError,
    UnknownColumnError,
    UnknownTableError,
    ValueCountError,
)
from tabdb.domain.value_objects import Value


def where(text: str):
    return CommandParser().parse_condition(text)


@pytest.fixture
def marks() -> Table:
    table = Table.create("marks", ["name", "mark", "pass"])
    table.insert([Value.string("Simon"), Value.number("65"), Value.boolean(True)])
    table.insert([Value.string("Sion"), Value.number("55"), Value.boolean(True)])
    table.insert([Value.string("Rob"), Value.number("35"), Value.boolean(False)])
    table.insert([Value.string("Chris"), Value.number("20"), Value.boolean(False)])
    return table


@pytest.mark.unit
class TestTableSchema:
    """Tests for table creation and column changes."""

    def test_create_installs_id(self) -> None:
        table = Table.create("t", ["a", "b"])
        assert table.columns == ("id", "a", "b")
        assert len(table) == 0
        assert table.next_id == 1

    def test_create_without_columns(self) -> None:
        assert Table.create("t").columns == ("id",)

    def test_create_rejects_id(self) -> None:
        with pytest.raises(ReservedColumnError):
            Table.create("t", ["ID", "a"])

    def test_create_rejects_duplicates_case_insensitive(self) -> None:
        with pytest.raises(DuplicateColumnError):
            Table.create("t", ["name", "Name"])

    def test_create_rejects_bad_name(self) -> None:
        with pytest.raises(InvalidNameError):
            Table.create("t", ["first name"])

    def test_add_column_fills_null(self, marks: Table) -> None:
        marks.add_column("age")
        assert marks.columns[-1] == "age"
        assert all(row[-1].is_null for row in marks.rows)
        assert all(len(row) == marks.column_count for row in marks.rows)

    def test_add_column_rejects_id(self, marks: Table) -> None:
        with pytest.raises(ReservedColumnError):
            marks.add_column("id")
        assert marks.columns == ("id", "name", "mark", "pass")

    def test_add_existing_column(self, marks: Table) -> None:
        with pytest.raises(DuplicateColumnError):
            marks.add_column("MARK")

    def test_drop_column(self, marks: Table) -> None:
        marks.drop_column("Mark")
        assert marks.columns == ("id", "name", "pass")
        assert marks.rows[0] == (Value.number(1), Value.string("Simon"), Value.boolean(True))

    def test_drop_id_rejected(self, marks: Table) -> None:
        with pytest.raises(ReservedColumnError):
            marks.drop_column("id")
        assert marks.column_count == 4

    def test_drop_missing_column(self, marks: Table) -> None:
        with pytest.raises(UnknownColumnError):
            marks.drop_column("height")


@pytest.mark.unit
class TestTableRows:
    """Tests for row insertion, selection, update and delete."""

    def test_insert_assigns_increasing_ids(self, marks: Table) -> None:
        assert [Table.row_id(row) for row in marks.rows] == [1, 2, 3, 4]
        assert marks.next_id == 5

    def test_insert_wrong_arity(self, marks: Table) -> None:
        with pytest.raises(ValueCountError):
            marks.insert([Value.string("Dora")])
        assert len(marks) == 4
        assert marks.next_id == 5

    def test_insert_rejects_tab(self, marks: Table) -> None:
        with pytest.raises(InvalidValueError):
            marks.insert([Value.string("a\tb"), Value.number(1), Value.boolean(True)])

    def test_insert_stores_values_as_written_to_disk(self) -> None:
        table = Table.create("t", ["name", "n", "flag"])
        row = table.insert([Value.string("NULL"), Value.string("+5"), Value.string("TRUE")])
        assert row[1].is_null
        assert row[2] == Value.number("+5")
        assert row[2].render() == "+5"
        assert row[3] == Value.boolean(True)

    def test_update_stores_values_as_written_to_disk(self, marks: Table) -> None:
        marks.update(where("name == 'Chris'"), [("name", Value.string("NULL"))])
        assert marks.rows[3][1].is_null

    def test_insert_into_id_only_table(self) -> None:
        table = Table.create("t", [])
        row = table.insert([])
        assert row == (Value.number(1),)

    def test_ids_not_reused_after_delete(self, marks: Table) -> None:
        marks.delete(where("name == 'Chris'"))
        row = marks.insert([Value.string("Dora"), Value.number("70"), Value.boolean(True)])
        assert Table.row_id(row) == 5

    def test_select_all(self, marks: Table) -> None:
        assert marks.select(None) == marks.rows

    def test_select_where(self, marks: Table) -> None:
        rows = marks.select(where("mark > 35"))
        assert [row[1].text for row in rows] == ["Simon", "Sion"]

    def test_update(self, marks: Table) -> None:
        count = marks.update(where("name == 'Chris'"), [("mark", Value.number("38"))])
        assert count == 1
        assert marks.rows[3][2] == Value.number("38")

    def test_update_rejects_id(self, marks: Table) -> None:
        before = marks.rows
        with pytest.raises(ReservedColumnError):
            marks.update(where("name == 'Chris'"), [("mark", Value.number(1)), ("id", Value.number(3))])
        assert marks.rows == before

    def test_update_rejects_unknown_column(self, marks: Table) -> None:
        with pytest.raises(UnknownColumnError):
            marks.update(None, [("height", Value.number(3))])

    def test_update_rejects_duplicate_target(self, marks: Table) -> None:
        with pytest.raises(DuplicateColumnError):
            marks.update(None, [("mark", Value.number(3)), ("Mark", Value.number(4))])

    def test_update_matches_collected_first(self, marks: Table) -> None:
        count = marks.update(where("mark < 60"), [("mark", Value.number("99"))])
        assert count == 3
        assert [row[2].text for row in marks.rows] == ["65", "99", "99", "99"]

    def test_delete(self, marks: Table) -> None:
        assert marks.delete(where("pass == FALSE")) == 2
        assert [Table.row_id(row) for row in marks.rows] == [1, 2]

    def test_delete_all(self, marks: Table) -> None:
        assert marks.delete(None) == 4
        assert len(marks) == 0
        assert marks.next_id == 5

    def test_project(self, marks: Table) -> None:
        header, rows = marks.project(marks.rows[:1], ["NAME", "id"])
        assert header == ["name", "id"]
        assert rows == [(Value.string("Simon"), Value.number(1))]

    def test_project_unknown_column(self, marks: Table) -> None:
        with pytest.raises(UnknownColumnError):
            marks.project(marks.rows, ["height"])


@pytest.mark.unit
class TestDatabase:
    """Tests for the Database entity."""

    def test_add_and_get(self) -> None:
        db = Database("school")
        table = Table.create("marks", ["name"])
        db.add_table(table)
        assert "MARKS" in db
        assert db.get_table("Marks") is table
        assert db.table_names() == ["marks"]

    def test_duplicate_table(self) -> None:
        db = Database("school", [Table.create("marks")])
        with pytest.raises(DuplicateTableError):
            db.add_table(Table.create("marks"))

    def test_remove(self) -> None:
        db = Database("school", [Table.create("marks")])
        db.remove_table("marks")
        assert len(db) == 0
        with pytest.raises(UnknownTableError):
            db.get_table("marks")
