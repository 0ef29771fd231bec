"""Value objects for the tabdb domain.

Value objects are immutable types that represent domain concepts.
They have no identity - two value objects with the same attributes are equal.

Exports:
    Values:
        - Value: Typed cell value (number, boolean, string, NULL)
        - ValueKind: Enumeration of value kinds
        - parse_literal: Parse a literal token into a Value

    Identifiers:
        - DatabaseName, TableName: Normalized (lower-case) names
        - ID_COLUMN: The reserved ``id`` column
        - validate_name, database_name, table_name: Naming rules
"""

from tabdb.domain.value_objects.identifiers import (
    ID_COLUMN,
    KEYWORDS,
    DatabaseName,
    TableName,
    column_index,
    database_name,
    find_column,
    is_id_column,
    is_keyword,
    table_name,
    validate_name,
)
from tabdb.domain.value_objects.value import (
    NUMBER_PATTERN,
    Value,
    ValueKind,
    parse_literal,
)

__all__ = [
    # Values
    "Value",
    "ValueKind",
    "NUMBER_PATTERN",
    "parse_literal",
    # Identifiers
    "DatabaseName",
    "TableName",
    "ID_COLUMN",
    "KEYWORDS",
    "database_name",
    "table_name",
    "validate_name",
    "is_id_column",
    "is_keyword",
    "find_column",
    "column_index",
]
