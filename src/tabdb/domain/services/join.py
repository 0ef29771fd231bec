"""Two-table inner equi-join.

Nested loop over every (left row, right row) pair in table order; each
pair whose join fields are equal (Value.equals, so 3 matches 3.0) yields
one result row. Result rows get fresh ids 1..N in match order, followed by
the non-id fields of the left row and then of the right row. Result column
names are qualified as ``<table>.<column>``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tabdb.domain.services.condition import Row
from tabdb.domain.value_objects import ID_COLUMN, Value

if TYPE_CHECKING:
    from tabdb.domain.entities.table import Table


@dataclass
class JoinResult:
    """Header and rows produced by a join."""

    columns: list[str] = field(default_factory=list)
    rows: list[Row] = field(default_factory=list)


def qualified_columns(table: Table) -> list[str]:
    """Non-id columns of a table, qualified with the table name."""
    return [f"{table.name}.{column}" for column in table.columns[1:]]


def equi_join(left: Table, right: Table, left_column: str, right_column: str) -> JoinResult:
    """Inner-join two tables on ``left.left_column == right.right_column``.

    Args:
        left: Outer table (A).
        right: Inner table (B).
        left_column: Join column of A (may be ``id``).
        right_column: Join column of B (may be ``id``).

    Returns:
        The joined header and rows.

    Raises:
        UnknownColumnError: If either join column does not exist.
    """
    left_index = left.column_index(left_column)
    right_index = right.column_index(right_column)

    result = JoinResult(
        columns=[ID_COLUMN, *qualified_columns(left), *qualified_columns(right)],
    )
    right_rows = right.rows
    for left_row in left.rows:
        key = left_row[left_index]
        for right_row in right_rows:
            if key.equals(right_row[right_index]):
                row_id = Value.number(len(result.rows) + 1)
                result.rows.append((row_id, *left_row[1:], *right_row[1:]))
    return result
