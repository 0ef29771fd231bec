"""Typed literal values.

Every cell of a table is a Value: a number, a boolean, a string or NULL.
Values are stored as plain text, so a Value keeps its canonical rendering
and derives numeric meaning from it when a comparison needs one.

Comparison rules:
    - NULL equals only NULL; it never satisfies an ordering comparator.
    - Two numeric values compare numerically (65 == 65.0).
    - Anything else compares by exact rendered text.
    - Ordering comparators require both sides to be numeric.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from tabdb.domain.errors import ConditionError


NUMBER_PATTERN = re.compile(r"^[+-]?\d+(\.\d+)?$")


class ValueKind(Enum):
    """Kinds of literal values."""

    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING = "string"
    NULL = "null"


def _to_number(text: str) -> int | float:
    if "." in text:
        return float(text)
    return int(text)


@dataclass(frozen=True, slots=True)
class Value:
    """An immutable typed value.

    Attributes:
        kind: The value's kind.
        text: Canonical rendering, exactly what is written to disk and
            returned to clients.

    Example:
        >>> Value.number("65.10").render()
        '65.10'
        >>> Value.number("65.10").equals(Value.number("65.1"))
        True
        >>> Value.boolean(False).render()
        'FALSE'
    """

    kind: ValueKind
    text: str

    @classmethod
    def null(cls) -> Value:
        return cls(ValueKind.NULL, "NULL")

    @classmethod
    def boolean(cls, flag: bool) -> Value:
        return cls(ValueKind.BOOLEAN, "TRUE" if flag else "FALSE")

    @classmethod
    def number(cls, number: int | float | str) -> Value:
        """Create a numeric value.

        Strings keep their text exactly as written, so a number renders
        the same before and after a reload.

        Raises:
            ValueError: If a string argument is not an integer or decimal.
        """
        if isinstance(number, str):
            if not NUMBER_PATTERN.fullmatch(number):
                raise ValueError(f"Not a number: {number!r}")
            return cls(ValueKind.NUMBER, number)
        if isinstance(number, bool):
            raise ValueError("Booleans are not numbers")
        return cls(ValueKind.NUMBER, repr(number) if isinstance(number, float) else str(number))

    @classmethod
    def string(cls, text: str) -> Value:
        return cls(ValueKind.STRING, text)

    @classmethod
    def from_field(cls, text: str) -> Value:
        """Re-type a field read back from a table file."""
        if text == "NULL":
            return cls.null()
        if text in ("TRUE", "FALSE"):
            return cls.boolean(text == "TRUE")
        if NUMBER_PATTERN.fullmatch(text):
            return cls.number(text)
        return cls.string(text)

    @property
    def is_null(self) -> bool:
        return self.kind is ValueKind.NULL

    def as_number(self) -> int | float | None:
        """Return the numeric meaning of this value, or None if it has none.

        Strings spelled like numbers are numeric too: a quoted '65' and a
        bare 65 are indistinguishable once written to disk.
        """
        if self.kind is ValueKind.NUMBER:
            return _to_number(self.text)
        if self.kind is ValueKind.STRING and NUMBER_PATTERN.fullmatch(self.text):
            return _to_number(self.text)
        return None

    def render(self) -> str:
        return self.text

    def __str__(self) -> str:
        return self.text

    def equals(self, other: Value) -> bool:
        """Equality as used by ``==``, ``!=`` and JOIN."""
        if self.is_null or other.is_null:
            return self.is_null and other.is_null
        left, right = self.as_number(), other.as_number()
        if left is not None and right is not None:
            return left == right
        return self.text == other.text

    def compare(self, other: Value) -> int | None:
        """Three-way numeric comparison for ordering comparators.

        Returns:
            -1, 0 or 1; None if either side is NULL.

        Raises:
            ConditionError: If either side is non-numeric.
        """
        if self.is_null or other.is_null:
            return None
        left, right = self.as_number(), other.as_number()
        if left is None or right is None:
            bad = self if left is None else other
            raise ConditionError(f"Cannot order non-numeric value: {bad.text}")
        return (left > right) - (left < right)

    def contains(self, other: Value) -> bool:
        """Substring containment as used by ``LIKE``."""
        if self.is_null or other.is_null:
            return False
        return other.text in self.text


def parse_literal(token: str) -> Value:
    """Parse a literal token into a typed Value.

    Args:
        token: Raw token text, quotes included for string literals.

    Returns:
        NUMBER for integer/decimal tokens, BOOLEAN for TRUE/FALSE, NULL for
        NULL (all case-insensitive), STRING with quotes stripped for quoted
        text, and a bare STRING for anything else.
    """
    if len(token) >= 2 and token[0] == "'" and token[-1] == "'":
        return Value.string(token[1:-1])
    if NUMBER_PATTERN.fullmatch(token):
        return Value.number(token)
    upper = token.upper()
    if upper in ("TRUE", "FALSE"):
        return Value.boolean(upper == "TRUE")
    if upper == "NULL":
        return Value.null()
    return Value.string(token)
