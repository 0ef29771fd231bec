"""Database catalog.

Process-wide registry of databases. A database becomes resident the first
time it is used: every table file in its directory is loaded at once.
Every schema or data change is written through the TableStorage before
(or, for row changes, right after) it is visible to other statements.

Thread Safety:
    Not thread-safe. The CommandEngine serializes all access.
"""

from __future__ import annotations

from typing import Literal, Sequence

from tabdb.domain.entities import Database, Table
from tabdb.domain.errors import DuplicateDatabaseError, DuplicateTableError, UnknownDatabaseError
from tabdb.domain.services import Row
from tabdb.infrastructure.logging import get_logger
from tabdb.infrastructure.metrics import MetricsRegistry, get_metrics
from tabdb.ports.outbound import TableStorage

InsertMode = Literal["rewrite", "append"]

logger = get_logger(__name__)


class Catalog:
    """Registry of resident databases backed by a TableStorage."""

    def __init__(
        self,
        storage: TableStorage,
        insert_mode: InsertMode = "rewrite",
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._storage = storage
        self._insert_mode = insert_mode
        self._metrics = metrics or get_metrics()
        self._databases: dict[str, Database] = {}

    @property
    def storage(self) -> TableStorage:
        return self._storage

    @property
    def insert_mode(self) -> InsertMode:
        return self._insert_mode

    def resident_databases(self) -> list[str]:
        return sorted(self._databases)

    def list_databases(self) -> list[str]:
        return self._storage.list_databases()

    # Databases

    def use_database(self, name: str) -> Database:
        """Make a database resident and return it.

        Raises:
            UnknownDatabaseError: If its backing directory does not exist.
            TableLoadError: If one of its tables is inconsistent.
        """
        if not self._storage.database_exists(name):
            self._evict(name)
            raise UnknownDatabaseError(name)
        return self._load(name)

    def get_database(self, name: str) -> Database:
        """Return a database, loading it if needed."""
        database = self._databases.get(name)
        if database is not None:
            return database
        return self.use_database(name)

    def create_database(self, name: str) -> Database:
        """Create an empty database.

        Raises:
            DuplicateDatabaseError: If it already exists in memory or on disk.
        """
        if name in self._databases or self._storage.database_exists(name):
            raise DuplicateDatabaseError(name)
        self._storage.create_database(name)
        database = Database(name)
        self._databases[name] = database
        self._update_resident()
        return database

    def drop_database(self, name: str) -> None:
        """Remove a database directory and evict it.

        Raises:
            UnknownDatabaseError: If it does not exist.
        """
        if not self._storage.database_exists(name):
            self._evict(name)
            raise UnknownDatabaseError(name)
        self._storage.drop_database(name)
        self._evict(name)

    # Tables

    def get_table(self, database: str, table: str) -> Table:
        """Look up a table in a database.

        Raises:
            UnknownTableError: If the table does not exist.
        """
        return self.get_database(database).get_table(table)

    def create_table(self, database: str, table: str, columns: Sequence[str] = ()) -> Table:
        """Create a table and write its (header-only) file.

        Raises:
            DuplicateTableError: If the table exists.
            ReservedColumnError, DuplicateColumnError, InvalidNameError:
                If the column list is invalid.
        """
        db = self.get_database(database)
        if table in db:
            raise DuplicateTableError(table)
        created = Table.create(table, columns)
        self._storage.save_table(database, created)
        db.add_table(created)
        logger.info("table_created", database=database, table=table, columns=list(created.columns))
        return created

    def drop_table(self, database: str, table: str) -> None:
        """Remove a table's file and evict it.

        Raises:
            UnknownTableError: If the table does not exist.
        """
        db = self.get_database(database)
        db.get_table(table)
        self._storage.delete_table(database, table)
        db.remove_table(table)
        logger.info("table_dropped", database=database, table=table)

    def persist(self, database: str, table: Table) -> None:
        """Rewrite a table's file after a change."""
        self._storage.save_table(database, table)

    def persist_insert(self, database: str, table: Table, row: Row) -> None:
        """Persist a freshly inserted row according to the insert mode."""
        if self._insert_mode == "append":
            self._storage.append_row(database, table, row)
        else:
            self._storage.save_table(database, table)

    def _load(self, name: str) -> Database:
        database = self._databases.get(name)
        if database is not None:
            return database
        tables = [self._storage.load_table(name, table) for table in self._storage.list_tables(name)]
        database = Database(name, tables)
        self._databases[name] = database
        self._update_resident()
        logger.info("database_loaded", database=name, tables=database.table_names())
        return database

    def _evict(self, name: str) -> None:
        if self._databases.pop(name, None) is not None:
            self._update_resident()

    def _update_resident(self) -> None:
        self._metrics.databases_resident.set(len(self._databases))
