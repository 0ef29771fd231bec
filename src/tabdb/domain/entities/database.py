"""Database entity: a named collection of tables."""

from __future__ import annotations

from typing import Iterator

from tabdb.domain.entities.table import Table
from tabdb.domain.errors import DuplicateTableError, UnknownTableError


class Database:
    """In-memory database.

    Table names are unique within a database and looked up
    case-insensitively.
    """

    def __init__(self, name: str, tables: list[Table] | None = None) -> None:
        self._name = name
        self._tables: dict[str, Table] = {}
        for table in tables or []:
            self.add_table(table)

    @property
    def name(self) -> str:
        return self._name

    def table_names(self) -> list[str]:
        return sorted(self._tables)

    def __contains__(self, table_name: str) -> bool:
        return table_name.lower() in self._tables

    def __iter__(self) -> Iterator[Table]:
        return iter(self._tables.values())

    def __len__(self) -> int:
        return len(self._tables)

    def get_table(self, table_name: str) -> Table:
        """Look up a table.

        Raises:
            UnknownTableError: If the table does not exist.
        """
        table = self._tables.get(table_name.lower())
        if table is None:
            raise UnknownTableError(table_name.lower())
        return table

    def add_table(self, table: Table) -> None:
        """Register a table.

        Raises:
            DuplicateTableError: If a table with that name exists.
        """
        key = table.name.lower()
        if key in self._tables:
            raise DuplicateTableError(key)
        self._tables[key] = table

    def remove_table(self, table_name: str) -> Table:
        """Evict a table and return it.

        Raises:
            UnknownTableError: If the table does not exist.
        """
        table = self.get_table(table_name)
        del self._tables[table_name.lower()]
        return table
