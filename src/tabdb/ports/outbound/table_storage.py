"""Table Storage port for database directories and table files.

This outbound port defines the contract for durable table storage.
The engine keeps tables in memory and writes each one back in full after
every mutating statement.

The table storage is responsible for:
- Creating, listing and removing database locations
- Loading a table's columns and rows
- Persisting a table (whole rewrite, or a single-row append)
- Removing a table's backing file
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol

from tabdb.domain.entities import Table
from tabdb.domain.services import Row


class TableStorage(Protocol):
    """Protocol for durable table storage.

    Thread Safety:
        Implementations are not required to be thread-safe. The command
        engine serializes every statement under a global lock.
    """

    @abstractmethod
    def database_exists(self, database: str) -> bool:
        """Return True if the database's backing location exists."""
        ...

    @abstractmethod
    def create_database(self, database: str) -> None:
        """Create an empty backing location for a database.

        Raises:
            DuplicateDatabaseError: If the location already exists.
            StorageError: If it cannot be created.
        """
        ...

    @abstractmethod
    def drop_database(self, database: str) -> None:
        """Recursively remove a database's backing location.

        Raises:
            UnknownDatabaseError: If the location does not exist.
            StorageError: If it cannot be removed.
        """
        ...

    @abstractmethod
    def list_databases(self) -> list[str]:
        """Return the names of all stored databases."""
        ...

    @abstractmethod
    def list_tables(self, database: str) -> list[str]:
        """Return the names of all tables stored for a database."""
        ...

    @abstractmethod
    def load_table(self, database: str, table: str) -> Table:
        """Load one table.

        Raises:
            TableLoadError: If the stored table is inconsistent.
            StorageError: If it cannot be read.
        """
        ...

    @abstractmethod
    def save_table(self, database: str, table: Table) -> None:
        """Rewrite a table's backing file from its in-memory state.

        Raises:
            StorageError: If the write fails.
        """
        ...

    @abstractmethod
    def append_row(self, database: str, table: Table, row: Row) -> None:
        """Append a single row to an existing table file.

        Raises:
            StorageError: If the write fails.
        """
        ...

    @abstractmethod
    def delete_table(self, database: str, table: str) -> None:
        """Remove a table's backing file if it exists."""
        ...
