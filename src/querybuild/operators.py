from __future__ import annotations

from enum import IntEnum

UNKNOWN = "UNKNOWN"


class Operator(IntEnum):
    """Filter operators. The integer values are part of the wire format."""

    # Comparison
    EQ = 0
    NE = 1
    GT = 2
    GE = 3
    LT = 4
    LE = 5

    # Pattern / set / range
    LIKE = 6
    IN = 7
    BETWEEN = 8
    NOT_IN = 9

    # Null checks
    IS_NULL = 10
    NOT_NULL = 11

    # String matching
    STARTS_WITH = 12
    ENDS_WITH = 13
    CONTAINS = 14
    NOT_LIKE = 15
    REGEXP = 16
    NOT_REGEXP = 17

    # Array relationships
    OVERLAP = 18
    ARRAY_CONTAINS = 19
    ARRAY_CONTAINED = 20

    def __str__(self) -> str:
        return self.name


class AggregationOp(IntEnum):
    """Aggregate functions available to ``Aggregation`` clauses."""

    COUNT = 1
    SUM = 2
    AVG = 3
    MAX = 4
    MIN = 5

    def __str__(self) -> str:
        return self.name


# Operators that take no value; case-insensitivity does not apply to them.
VALUELESS_OPERATORS = frozenset({Operator.IS_NULL, Operator.NOT_NULL})

ARRAY_OPERATORS = frozenset(
    {Operator.OVERLAP, Operator.ARRAY_CONTAINS, Operator.ARRAY_CONTAINED}
)


def operator_name(op: Operator | int) -> str:
    """Stable diagnostic name of *op*; ``"UNKNOWN"`` for non-members."""
    try:
        return Operator(op).name
    except ValueError:
        return UNKNOWN


def aggregation_name(op: AggregationOp | int) -> str:
    try:
        return AggregationOp(op).name
    except ValueError:
        return UNKNOWN


def coerce_enum(enum_cls: type[IntEnum], value: object) -> object:
    """
    Accept an enum member, its integer value or its (case-insensitive) name.

    Anything else is returned untouched so pydantic reports the error.
    """
    if isinstance(value, str):
        key = value.strip().upper()
        if key in enum_cls.__members__:
            return enum_cls[key]
        if key.lstrip("-").isdigit():
            return int(key)
    return value
