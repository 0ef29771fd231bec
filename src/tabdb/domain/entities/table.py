"""Table entity: schema plus rows for one table.

A table holds an ordered column list whose first entry is always the
reserved ``id`` column, and an ordered list of fixed-arity rows. Each row
is a tuple of Values; field 0 is the row id, drawn from a monotonically
increasing counter that deletions never rewind.

Every mutating method validates its whole input before touching any row,
so a rejected operation leaves the table unchanged. Persistence is not the
table's concern; callers write the table back through a TableStorage.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from tabdb.domain.errors import (
    DuplicateColumnError,
    InvalidValueError,
    ReservedColumnError,
    ValueCountError,
)
from tabdb.domain.services.condition import Condition, Row, bind_condition
from tabdb.domain.value_objects import (
    ID_COLUMN,
    Value,
    column_index,
    find_column,
    is_id_column,
    validate_name,
)


def _stored(value: Value) -> Value:
    """Return ``value`` as it will read back from a table file."""
    if any(ch in value.text for ch in "\t\r\n"):
        raise InvalidValueError(f"Values cannot contain tabs or line breaks: {value.text!r}")
    return Value.from_field(value.render())


class Table:
    """In-memory table.

    Attributes:
        name: Table name (lower case).
        columns: Column names in order, ``id`` first.
        rows: Rows in insertion order.
        next_id: Id the next inserted row will receive.

    Example:
        >>> table = Table.create("marks", ["name", "mark"])
        >>> row = table.insert([Value.string("Simon"), Value.number("65")])
        >>> table.columns
        ('id', 'name', 'mark')
    """

    def __init__(
        self,
        name: str,
        columns: Sequence[str],
        rows: Iterable[Row] = (),
        next_id: int = 1,
    ) -> None:
        self._name = name
        self._columns = list(columns)
        self._rows = [tuple(row) for row in rows]
        self._next_id = next_id

    @classmethod
    def create(cls, name: str, columns: Sequence[str] = ()) -> Table:
        """Create an empty table with ``id`` followed by the given columns.

        Raises:
            ReservedColumnError: If ``id`` is among the columns.
            DuplicateColumnError: If a column name repeats (case-insensitive).
            InvalidNameError: If a column name is not a plain identifier.
        """
        user_columns: list[str] = []
        for column in columns:
            validate_name(column, "column")
            if is_id_column(column):
                raise ReservedColumnError("create")
            if find_column(user_columns, column) >= 0:
                raise DuplicateColumnError(column)
            user_columns.append(column)
        return cls(name, [ID_COLUMN, *user_columns])

    @property
    def name(self) -> str:
        return self._name

    @property
    def columns(self) -> tuple[str, ...]:
        return tuple(self._columns)

    @property
    def rows(self) -> list[Row]:
        return list(self._rows)

    @property
    def next_id(self) -> int:
        return self._next_id

    @property
    def column_count(self) -> int:
        return len(self._columns)

    def __len__(self) -> int:
        return len(self._rows)

    def __repr__(self) -> str:
        return f"Table({self._name!r}, columns={self._columns!r}, rows={len(self._rows)})"

    def column_index(self, name: str) -> int:
        """Resolve a column name (case-insensitive) to its position."""
        return column_index(self._columns, name, self._name)

    @staticmethod
    def row_id(row: Row) -> int:
        return int(row[0].text)

    # Schema changes

    def add_column(self, name: str) -> None:
        """Append a column; existing rows get NULL in it."""
        validate_name(name, "column")
        if is_id_column(name):
            raise ReservedColumnError("add")
        if find_column(self._columns, name) >= 0:
            raise DuplicateColumnError(name)
        self._columns.append(name)
        self._rows = [(*row, Value.null()) for row in self._rows]

    def drop_column(self, name: str) -> None:
        """Remove a column and its field from every row."""
        if is_id_column(name):
            raise ReservedColumnError("drop")
        index = self.column_index(name)
        del self._columns[index]
        self._rows = [row[:index] + row[index + 1 :] for row in self._rows]

    # Row changes

    def insert(self, values: Sequence[Value]) -> Row:
        """Append a row with the next id followed by ``values``.

        Raises:
            ValueCountError: If ``values`` does not cover every non-id column.
            InvalidValueError: If a value cannot be stored.
        """
        if len(values) != self.column_count - 1:
            raise ValueCountError(self.column_count - 1, len(values))
        stored = [_stored(value) for value in values]
        row: Row = (Value.number(self._next_id), *stored)
        self._rows.append(row)
        self._next_id += 1
        return row

    def select(self, condition: Condition | None = None) -> list[Row]:
        """Return matching rows in table order."""
        predicate = bind_condition(condition, self._columns)
        return [row for row in self._rows if predicate(row)]

    def update(
        self,
        condition: Condition | None,
        assignments: Sequence[tuple[str, Value]],
    ) -> int:
        """Apply ``column = value`` assignments to every matching row.

        Returns:
            The number of rows updated.

        Raises:
            ReservedColumnError: If an assignment targets ``id``.
            UnknownColumnError: If an assignment targets a missing column.
            DuplicateColumnError: If two assignments target the same column.
        """
        targets: list[tuple[int, Value]] = []
        seen: set[int] = set()
        for name, value in assignments:
            if is_id_column(name):
                raise ReservedColumnError("update")
            index = self.column_index(name)
            if index in seen:
                raise DuplicateColumnError(name)
            value = _stored(value)
            seen.add(index)
            targets.append((index, value))

        predicate = bind_condition(condition, self._columns)
        matches = [predicate(row) for row in self._rows]

        updated = 0
        for position, matched in enumerate(matches):
            if not matched:
                continue
            fields = list(self._rows[position])
            for index, value in targets:
                fields[index] = value
            self._rows[position] = tuple(fields)
            updated += 1
        return updated

    def delete(self, condition: Condition | None = None) -> int:
        """Remove every matching row. Ids are never renumbered.

        Returns:
            The number of rows deleted.
        """
        predicate = bind_condition(condition, self._columns)
        keep = [row for row in self._rows if not predicate(row)]
        deleted = len(self._rows) - len(keep)
        self._rows = keep
        return deleted

    def project(
        self,
        rows: Sequence[Row],
        names: Sequence[str] | None = None,
    ) -> tuple[list[str], list[Row]]:
        """Project rows onto a column list (None means every column).

        Returns:
            The header (stored display names) and the projected rows.
        """
        if names is None:
            return list(self._columns), list(rows)
        indexes = [self.column_index(name) for name in names]
        header = [self._columns[i] for i in indexes]
        return header, [tuple(row[i] for i in indexes) for row in rows]
