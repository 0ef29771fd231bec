"""Domain services for tabdb.

Exports:
    Conditions:
        - Condition, Comparison, LogicalCondition: WHERE expression tree
        - ComparisonOp, LogicalOp: Operators
        - Predicate, Row: Bound row predicate and row type
        - bind_condition, match_all: Binding helpers

    Join:
        - equi_join: Nested-loop inner equi-join of two tables
        - JoinResult: Header and rows of a join
"""

from tabdb.domain.services.condition import (
    Comparison,
    ComparisonOp,
    Condition,
    LogicalCondition,
    LogicalOp,
    Predicate,
    Row,
    bind_condition,
    match_all,
)
from tabdb.domain.services.join import JoinResult, equi_join, qualified_columns

__all__ = [
    # Conditions
    "Condition",
    "Comparison",
    "LogicalCondition",
    "ComparisonOp",
    "LogicalOp",
    "Predicate",
    "Row",
    "bind_condition",
    "match_all",
    # Join
    "equi_join",
    "JoinResult",
    "qualified_columns",
]
