"""Domain entities for tabdb.

Entities are objects with identity that have a lifecycle. Unlike value objects,
two entities with the same attributes may not be equal if they have different
identities.

Exports:
    - Table: Schema plus rows of one table
    - Database: Named collection of tables
"""

from tabdb.domain.entities.database import Database
from tabdb.domain.entities.table import Table

__all__ = [
    "Table",
    "Database",
]
