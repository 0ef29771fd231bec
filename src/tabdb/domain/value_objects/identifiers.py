"""Names and naming rules for databases, tables and columns.

Database and table names double as directory and file names, so they are
normalized to lower case. Column names keep their display case but are
compared case-insensitively.
"""

from __future__ import annotations

import re
from typing import NewType, Sequence

from tabdb.domain.errors import InvalidNameError, UnknownColumnError


DatabaseName = NewType("DatabaseName", str)
"""Lower-cased database name. Also the name of its storage directory."""

TableName = NewType("TableName", str)
"""Lower-cased table name. Also the stem of its ``.tab`` file."""

ID_COLUMN = "id"
"""Reserved column 0 of every table."""

NAME_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")

# Words with a meaning in the command grammar; never valid as names.
KEYWORDS = frozenset(
    {
        "USE",
        "CREATE",
        "DATABASE",
        "TABLE",
        "DROP",
        "ALTER",
        "ADD",
        "COLUMN",
        "INSERT",
        "INTO",
        "VALUES",
        "SELECT",
        "FROM",
        "WHERE",
        "UPDATE",
        "SET",
        "DELETE",
        "JOIN",
        "ON",
        "AND",
        "OR",
        "LIKE",
        "TRUE",
        "FALSE",
        "NULL",
    }
)


def is_keyword(word: str) -> bool:
    """Check whether a word is a reserved command keyword."""
    return word.upper() in KEYWORDS


def is_id_column(name: str) -> bool:
    """Check whether a column name refers to the reserved ``id`` column."""
    return name.lower() == ID_COLUMN


def validate_name(name: str, kind: str) -> str:
    """Validate a database, table or column name.

    Args:
        name: The candidate name.
        kind: What is being named ("database", "table", "column"),
            used in the error message.

    Returns:
        The name unchanged.

    Raises:
        InvalidNameError: If the name is empty, not alphanumeric, or a keyword.
    """
    if not name or not NAME_PATTERN.fullmatch(name):
        raise InvalidNameError(f"Invalid {kind} name: {name!r}")
    if is_keyword(name):
        raise InvalidNameError(f"Keyword cannot be used as a {kind} name: {name}")
    return name


def database_name(name: str) -> DatabaseName:
    """Validate and normalize a database name."""
    return DatabaseName(validate_name(name, "database").lower())


def table_name(name: str) -> TableName:
    """Validate and normalize a table name."""
    return TableName(validate_name(name, "table").lower())


def find_column(columns: Sequence[str], name: str) -> int:
    """Return the position of a column, matching case-insensitively, or -1."""
    wanted = name.lower()
    for index, column in enumerate(columns):
        if column.lower() == wanted:
            return index
    return -1


def column_index(columns: Sequence[str], name: str, table: str | None = None) -> int:
    """Resolve a column name to its position.

    Raises:
        UnknownColumnError: If no column matches.
    """
    index = find_column(columns, name)
    if index < 0:
        raise UnknownColumnError(name, table)
    return index
