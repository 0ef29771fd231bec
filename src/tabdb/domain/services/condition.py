"""WHERE-clause conditions.

A Condition is a small expression tree produced by the command parser:

    Comparison:        <column> <op> <literal>
    LogicalCondition:  AND / OR over two or more sub-conditions

Conditions are evaluated in two steps. ``bind`` resolves every column name
against a table's column list once per statement and returns a Predicate,
a plain callable that is then applied to each row. Unknown columns and
non-numeric literals under ordering comparators fail at bind time, so a
statement is rejected even when the table has no rows.

Example:
    >>> cond = Comparison("mark", ComparisonOp.GT, Value.number("35"))
    >>> predicate = cond.bind(["id", "name", "mark"])
    >>> predicate((Value.number("1"), Value.string("Rob"), Value.number("40")))
    True
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence

from tabdb.domain.errors import ConditionError
from tabdb.domain.value_objects import Value, column_index


Row = tuple[Value, ...]
Predicate = Callable[[Row], bool]


class ComparisonOp(Enum):
    """Comparison operators for predicates."""

    EQ = "=="
    NE = "!="
    GT = ">"
    LT = "<"
    GE = ">="
    LE = "<="
    LIKE = "LIKE"

    @property
    def is_ordering(self) -> bool:
        return self in (ComparisonOp.GT, ComparisonOp.LT, ComparisonOp.GE, ComparisonOp.LE)


class LogicalOp(Enum):
    """Logical operators for combining predicates."""

    AND = "AND"
    OR = "OR"


class Condition(ABC):
    """Base class for condition nodes."""

    @abstractmethod
    def bind(self, columns: Sequence[str]) -> Predicate:
        """Resolve column names and return a row predicate.

        Raises:
            UnknownColumnError: If a referenced column does not exist.
            ConditionError: If a comparison can never be evaluated.
        """

    @abstractmethod
    def __str__(self) -> str:
        pass


def _ordering(index: int, literal: Value, test: Callable[[int], bool]) -> Predicate:
    def predicate(row: Row) -> bool:
        result = row[index].compare(literal)
        return result is not None and test(result)

    return predicate


@dataclass(frozen=True)
class Comparison(Condition):
    """Comparison of one column against a literal (e.g. ``mark > 35``)."""

    column: str
    op: ComparisonOp
    literal: Value

    def bind(self, columns: Sequence[str]) -> Predicate:
        index = column_index(columns, self.column)
        literal = self.literal

        if self.op.is_ordering and not literal.is_null and literal.as_number() is None:
            raise ConditionError(
                f"Operator {self.op.value} needs a numeric operand, got {literal.text}"
            )

        if self.op is ComparisonOp.EQ:
            return lambda row: row[index].equals(literal)
        if self.op is ComparisonOp.NE:
            return lambda row: not row[index].equals(literal)
        if self.op is ComparisonOp.LIKE:
            return lambda row: row[index].contains(literal)
        if self.op is ComparisonOp.GT:
            return _ordering(index, literal, lambda r: r > 0)
        if self.op is ComparisonOp.LT:
            return _ordering(index, literal, lambda r: r < 0)
        if self.op is ComparisonOp.GE:
            return _ordering(index, literal, lambda r: r >= 0)
        return _ordering(index, literal, lambda r: r <= 0)

    def __str__(self) -> str:
        return f"{self.column} {self.op.value} {self.literal.text}"


@dataclass(frozen=True)
class LogicalCondition(Condition):
    """AND / OR over sub-conditions, evaluated left to right with short-circuit."""

    op: LogicalOp
    operands: tuple[Condition, ...]

    def bind(self, columns: Sequence[str]) -> Predicate:
        predicates = [operand.bind(columns) for operand in self.operands]
        if self.op is LogicalOp.AND:
            return lambda row: all(p(row) for p in predicates)
        return lambda row: any(p(row) for p in predicates)

    def __str__(self) -> str:
        op_str = f" {self.op.value} "
        return f"({op_str.join(str(o) for o in self.operands)})"


def match_all(row: Row) -> bool:
    """Predicate used when a statement has no WHERE clause."""
    return True


def bind_condition(condition: Condition | None, columns: Sequence[str]) -> Predicate:
    """Bind an optional condition; a missing condition matches every row."""
    if condition is None:
        return match_all
    return condition.bind(columns)
