"""Statement executor.

Interprets statement plans against the Catalog for one session and builds
the tagged textual response.

Response format:
    [OK]                              (statements without a result set)
    [OK]\\n<header>\\n<row>\\n<row>...   (SELECT and JOIN)
    [ERROR] <message>                 (built by the CommandEngine)

Header and rows are tab-separated.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from tabdb.adapters.inbound.command_parser import (
    AlterAction,
    AlterTablePlan,
    CreateDatabasePlan,
    CreateTablePlan,
    DeletePlan,
    DropDatabasePlan,
    DropTablePlan,
    InsertPlan,
    JoinPlan,
    SelectPlan,
    StatementPlan,
    StatementType,
    UpdatePlan,
    UsePlan,
)
from tabdb.application.catalog import Catalog
from tabdb.application.session import SessionState
from tabdb.domain.services import Row, equi_join

OK_TAG = "[OK]"
ERROR_TAG = "[ERROR]"
FIELD_SEPARATOR = "\t"


@dataclass
class ExecutionResult:
    """Result of executing one statement."""

    statement_type: StatementType
    columns: list[str] = field(default_factory=list)
    rows: list[Row] = field(default_factory=list)
    affected_rows: int = 0
    message: str = ""

    @property
    def has_result_set(self) -> bool:
        return self.statement_type in (StatementType.SELECT, StatementType.JOIN)

    def row_texts(self) -> list[list[str]]:
        return [[value.render() for value in row] for row in self.rows]

    def render(self) -> str:
        """Format the protocol response."""
        if not self.has_result_set:
            return OK_TAG
        lines = [OK_TAG, FIELD_SEPARATOR.join(self.columns)]
        lines.extend(FIELD_SEPARATOR.join(fields) for fields in self.row_texts())
        return "\n".join(lines)


class QueryExecutor:
    """Executes statement plans.

    Example:
        >>> executor = QueryExecutor(catalog)
        >>> result = executor.execute(SelectPlan("marks"), session)
        >>> print(result.render())
    """

    def __init__(self, catalog: Catalog) -> None:
        self._catalog = catalog

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    def execute(self, plan: StatementPlan, session: SessionState) -> ExecutionResult:
        """Execute a plan for a session.

        Raises:
            TabDBError: Any domain failure; nothing is changed when raised
                before persistence.
        """
        if isinstance(plan, UsePlan):
            return self._execute_use(plan, session)
        elif isinstance(plan, CreateDatabasePlan):
            self._catalog.create_database(plan.database)
            return ExecutionResult(plan.statement_type, message=f"Created database {plan.database}")
        elif isinstance(plan, DropDatabasePlan):
            self._catalog.drop_database(plan.database)
            if session.database == plan.database:
                session.database = None
            return ExecutionResult(plan.statement_type, message=f"Dropped database {plan.database}")
        elif isinstance(plan, CreateTablePlan):
            database = session.require_database()
            self._catalog.create_table(database, plan.table, plan.columns)
            return ExecutionResult(plan.statement_type, message=f"Created table {plan.table}")
        elif isinstance(plan, DropTablePlan):
            database = session.require_database()
            self._catalog.drop_table(database, plan.table)
            return ExecutionResult(plan.statement_type, message=f"Dropped table {plan.table}")
        elif isinstance(plan, AlterTablePlan):
            return self._execute_alter(plan, session)
        elif isinstance(plan, InsertPlan):
            return self._execute_insert(plan, session)
        elif isinstance(plan, SelectPlan):
            return self._execute_select(plan, session)
        elif isinstance(plan, UpdatePlan):
            return self._execute_update(plan, session)
        elif isinstance(plan, DeletePlan):
            return self._execute_delete(plan, session)
        elif isinstance(plan, JoinPlan):
            return self._execute_join(plan, session)
        raise TypeError(f"Unsupported plan type: {type(plan).__name__}")

    def _execute_use(self, plan: UsePlan, session: SessionState) -> ExecutionResult:
        self._catalog.use_database(plan.database)
        session.database = plan.database
        return ExecutionResult(plan.statement_type, message=f"Using database {plan.database}")

    def _execute_alter(self, plan: AlterTablePlan, session: SessionState) -> ExecutionResult:
        database = session.require_database()
        table = self._catalog.get_table(database, plan.table)
        if plan.action is AlterAction.ADD:
            table.add_column(plan.column)
        else:
            table.drop_column(plan.column)
        self._catalog.persist(database, table)
        return ExecutionResult(
            plan.statement_type,
            message=f"{plan.action.value} column {plan.column} on {plan.table}",
        )

    def _execute_insert(self, plan: InsertPlan, session: SessionState) -> ExecutionResult:
        database = session.require_database()
        table = self._catalog.get_table(database, plan.table)
        row = table.insert(plan.values)
        self._catalog.persist_insert(database, table, row)
        return ExecutionResult(plan.statement_type, affected_rows=1, message="Inserted 1 row")

    def _execute_select(self, plan: SelectPlan, session: SessionState) -> ExecutionResult:
        database = session.require_database()
        table = self._catalog.get_table(database, plan.table)
        matches = table.select(plan.condition)
        columns, rows = table.project(matches, plan.columns)
        return ExecutionResult(plan.statement_type, columns=columns, rows=rows)

    def _execute_update(self, plan: UpdatePlan, session: SessionState) -> ExecutionResult:
        database = session.require_database()
        table = self._catalog.get_table(database, plan.table)
        updated = table.update(plan.condition, plan.assignments)
        if updated:
            self._catalog.persist(database, table)
        return ExecutionResult(
            plan.statement_type, affected_rows=updated, message=f"Updated {updated} rows"
        )

    def _execute_delete(self, plan: DeletePlan, session: SessionState) -> ExecutionResult:
        database = session.require_database()
        table = self._catalog.get_table(database, plan.table)
        deleted = table.delete(plan.condition)
        if deleted:
            self._catalog.persist(database, table)
        return ExecutionResult(
            plan.statement_type, affected_rows=deleted, message=f"Deleted {deleted} rows"
        )

    def _execute_join(self, plan: JoinPlan, session: SessionState) -> ExecutionResult:
        database = session.require_database()
        left = self._catalog.get_table(database, plan.left_table)
        right = self._catalog.get_table(database, plan.right_table)
        joined = equi_join(left, right, plan.left_column, plan.right_column)
        return ExecutionResult(plan.statement_type, columns=joined.columns, rows=joined.rows)
