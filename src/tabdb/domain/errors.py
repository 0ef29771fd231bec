"""Error taxonomy for the command engine.

Every failure a single statement can produce derives from TabDBError so the
command boundary can turn it into an ``[ERROR] <message>`` response:

- protocol: CommandSyntaxError
- semantic: unknown/duplicate names, reserved identifiers, arity mismatches
- condition: ConditionError
- storage: StorageError, TableLoadError
"""

from __future__ import annotations


class TabDBError(Exception):
    """Base class for all recoverable engine errors."""

    pass


# Protocol errors


class CommandSyntaxError(TabDBError):
    """Malformed command: missing terminator, unknown statement, bad operands."""

    pass


# Semantic errors


class NoDatabaseSelectedError(TabDBError):
    """A table was referenced before any database was selected."""

    def __init__(self) -> None:
        super().__init__("No database selected. Use 'USE <name>;' first")


class UnknownSessionError(TabDBError):
    """The session id is not open."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class UnknownDatabaseError(TabDBError):
    """The named database does not exist."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Database does not exist: {name}")
        self.name = name


class DuplicateDatabaseError(TabDBError):
    """The named database already exists."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Database already exists: {name}")
        self.name = name


class UnknownTableError(TabDBError):
    """The named table does not exist in the selected database."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Table does not exist: {name}")
        self.name = name


class DuplicateTableError(TabDBError):
    """The named table already exists in the selected database."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Table already exists: {name}")
        self.name = name


class UnknownColumnError(TabDBError):
    """The named column does not exist in the table."""

    def __init__(self, name: str, table: str | None = None) -> None:
        where = f" in table {table}" if table else ""
        super().__init__(f"Column does not exist{where}: {name}")
        self.name = name


class DuplicateColumnError(TabDBError):
    """The named column already exists in the table."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Column already exists: {name}")
        self.name = name


class ReservedColumnError(TabDBError):
    """An operation tried to add, drop or update the ``id`` column."""

    def __init__(self, action: str) -> None:
        super().__init__(f"Cannot {action} the reserved 'id' column")


class InvalidNameError(TabDBError):
    """A database, table or column name is not a plain identifier."""

    pass


class ValueCountError(TabDBError):
    """INSERT supplied the wrong number of values."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Expected {expected} values but got {actual}")
        self.expected = expected
        self.actual = actual


class InvalidValueError(TabDBError):
    """A value cannot be stored (e.g. it contains a tab or newline)."""

    pass


# Condition errors


class ConditionError(TabDBError):
    """Malformed WHERE expression or a type-mismatched comparison."""

    pass


# Storage errors


class StorageError(TabDBError):
    """Backing file or directory could not be read or written."""

    pass


class TableLoadError(StorageError):
    """A table file is inconsistent and cannot be loaded."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot load table file {path}: {reason}")
        self.path = path
        self.reason = reason
