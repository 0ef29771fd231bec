"""Tab-separated file storage.

This adapter implements the TableStorage protocol on a plain directory
tree: one directory per database, one UTF-8 text file per table.

File Format:
    - Line 1: column names joined by TAB, ``id`` first
    - Line 2+: one row per line, fields joined by TAB, in table order
    - Every line ends with LF; fields never contain TAB, CR or LF

Full rewrites go to a temporary file in the same directory which is then
renamed over the table file, so a crash mid-write leaves the previous
version intact.
"""

from __future__ import annotations

import os
import shutil
import tempfile
import time
from pathlib import Path

from tabdb.domain.entities import Table
from tabdb.domain.errors import (
    DuplicateDatabaseError,
    StorageError,
    TableLoadError,
    UnknownDatabaseError,
)
from tabdb.domain.services import Row
from tabdb.domain.value_objects import ID_COLUMN, Value, find_column
from tabdb.infrastructure.logging import get_logger
from tabdb.infrastructure.metrics import MetricsRegistry, get_metrics

FIELD_SEPARATOR = "\t"
LINE_TERMINATOR = "\n"

logger = get_logger(__name__)


def encode_row(row: Row) -> str:
    """Render one row as a line, terminator included."""
    return FIELD_SEPARATOR.join(value.render() for value in row) + LINE_TERMINATOR


def encode_table(table: Table) -> str:
    """Render a whole table file."""
    lines = [FIELD_SEPARATOR.join(table.columns) + LINE_TERMINATOR]
    lines.extend(encode_row(row) for row in table.rows)
    return "".join(lines)


def decode_table(name: str, text: str, source: str = "<memory>") -> Table:
    """Parse a table file.

    The next row id is restored as one more than the largest stored id.

    Raises:
        TableLoadError: If the header or any row is malformed.
    """
    lines = text.split(LINE_TERMINATOR)
    if lines and lines[-1] == "":
        lines.pop()
    if not lines or not lines[0]:
        raise TableLoadError(source, "missing header line")

    columns = lines[0].split(FIELD_SEPARATOR)
    if columns[0].lower() != ID_COLUMN:
        raise TableLoadError(source, f"first column must be '{ID_COLUMN}', found '{columns[0]}'")
    for position, column in enumerate(columns):
        if not column or find_column(columns[:position], column) >= 0:
            raise TableLoadError(source, f"bad or repeated column name '{column}'")

    rows: list[Row] = []
    seen_ids: set[int] = set()
    for line_number, line in enumerate(lines[1:], start=2):
        fields = line.rstrip("\r").split(FIELD_SEPARATOR)
        if len(fields) != len(columns):
            raise TableLoadError(
                source,
                f"line {line_number} has {len(fields)} fields, header has {len(columns)}",
            )
        raw_id = fields[0]
        if not (raw_id.isascii() and raw_id.isdigit()):
            raise TableLoadError(source, f"line {line_number} has non-integer id '{raw_id}'")
        row_id = int(raw_id)
        if row_id in seen_ids:
            raise TableLoadError(source, f"line {line_number} repeats id {row_id}")
        seen_ids.add(row_id)
        rows.append((Value.number(row_id), *(Value.from_field(field) for field in fields[1:])))

    next_id = max(seen_ids) + 1 if seen_ids else 1
    return Table(name, columns, rows, next_id=next_id)


class TabFileStorage:
    """Directory-per-database, file-per-table implementation of TableStorage.

    Attributes:
        root: Directory holding one subdirectory per database.
        suffix: Table file extension.
    """

    def __init__(
        self,
        root: str | Path,
        suffix: str = ".tab",
        fsync: bool = False,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the storage.

        Args:
            root: Storage root; created if missing.
            suffix: Table file extension, dot included.
            fsync: Flush each rewritten file to disk before renaming it.
            metrics: Metrics registry (default: the global one).

        Raises:
            StorageError: If the root cannot be created.
        """
        self._root = Path(root)
        self._suffix = suffix
        self._fsync = fsync
        self._metrics = metrics or get_metrics()
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create storage root {self._root}: {e}") from e

    @property
    def root(self) -> Path:
        return self._root

    @property
    def suffix(self) -> str:
        return self._suffix

    def database_path(self, database: str) -> Path:
        return self._root / database

    def table_path(self, database: str, table: str) -> Path:
        return self._root / database / f"{table}{self._suffix}"

    # Databases

    def database_exists(self, database: str) -> bool:
        return self.database_path(database).is_dir()

    def create_database(self, database: str) -> None:
        path = self.database_path(database)
        if path.exists():
            raise DuplicateDatabaseError(database)
        try:
            path.mkdir(parents=True)
        except OSError as e:
            raise StorageError(f"Cannot create database directory {path}: {e}") from e
        logger.info("database_created", database=database, path=str(path))

    def drop_database(self, database: str) -> None:
        path = self.database_path(database)
        if not path.is_dir():
            raise UnknownDatabaseError(database)
        try:
            shutil.rmtree(path)
        except OSError as e:
            raise StorageError(f"Cannot remove database directory {path}: {e}") from e
        logger.info("database_dropped", database=database)

    def list_databases(self) -> list[str]:
        return sorted(entry.name for entry in self._root.iterdir() if entry.is_dir())

    def list_tables(self, database: str) -> list[str]:
        path = self.database_path(database)
        if not path.is_dir():
            raise UnknownDatabaseError(database)
        return sorted(
            entry.name[: -len(self._suffix)]
            for entry in path.iterdir()
            if entry.is_file() and entry.name.endswith(self._suffix)
        )

    # Tables

    def load_table(self, database: str, table: str) -> Table:
        path = self.table_path(database, table)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Cannot read table file {path}: {e}") from e
        loaded = decode_table(table, text, str(path))
        self._metrics.tables_loaded_total.inc()
        logger.debug("table_loaded", database=database, table=table, rows=len(loaded))
        return loaded

    def save_table(self, database: str, table: Table) -> None:
        path = self.table_path(database, table.name)
        start = time.perf_counter()
        fd, temp_name = tempfile.mkstemp(prefix=f".{table.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
                handle.write(encode_table(table))
                handle.flush()
                if self._fsync:
                    os.fsync(handle.fileno())
            os.replace(temp_name, path)
        except OSError as e:
            Path(temp_name).unlink(missing_ok=True)
            raise StorageError(f"Cannot write table file {path}: {e}") from e
        self._record_persist("rewrite", start)
        logger.debug("table_saved", database=database, table=table.name, rows=len(table))

    def append_row(self, database: str, table: Table, row: Row) -> None:
        path = self.table_path(database, table.name)
        if not path.is_file():
            raise StorageError(f"Cannot append to missing table file {path}")
        start = time.perf_counter()
        try:
            with path.open("a", encoding="utf-8", newline="") as handle:
                handle.write(encode_row(row))
                handle.flush()
                if self._fsync:
                    os.fsync(handle.fileno())
        except OSError as e:
            raise StorageError(f"Cannot append to table file {path}: {e}") from e
        self._record_persist("append", start)

    def delete_table(self, database: str, table: str) -> None:
        path = self.table_path(database, table)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot remove table file {path}: {e}") from e

    def _record_persist(self, mode: str, start: float) -> None:
        self._metrics.table_persists_total.labels(mode=mode).inc()
        self._metrics.table_persist_latency_seconds.observe(time.perf_counter() - start)
