"""
String matching operators.

Patterns are built around the bound value; wildcard characters inside the
value are not escaped and keep their ``LIKE`` meaning.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from ...operators import Operator
from ..strategy import FilterOperator

if TYPE_CHECKING:
    from sqlalchemy.sql.elements import ColumnElement

# operator -> (pattern template, negated)
_PATTERNS: dict[Operator, tuple[str, bool]] = {
    Operator.LIKE: ("%{}%", False),
    Operator.NOT_LIKE: ("%{}%", True),
    Operator.CONTAINS: ("%{}%", False),
    Operator.STARTS_WITH: ("{}%", False),
    Operator.ENDS_WITH: ("%{}", False),
}


class PatternOperator(FilterOperator):
    """``column [NOT] LIKE :pattern`` with the value placed in a template."""

    def __init__(self, operator: Operator) -> None:
        self.operator = operator
        self._template, self._negate = _PATTERNS[operator]

    def apply(self, column: Any, value: str) -> ColumnElement[bool]:
        pattern = self._template.format(value)
        expr = column.not_like(pattern) if self._negate else column.like(pattern)
        return cast("ColumnElement[bool]", expr)


class RegexpOperator(FilterOperator):
    """Dialect-aware regular expression match (``REGEXP``, ``~`` ...)."""

    def __init__(self, *, negate: bool = False) -> None:
        self.operator = Operator.NOT_REGEXP if negate else Operator.REGEXP
        self._negate = negate

    def apply(self, column: Any, value: str) -> ColumnElement[bool]:
        expr = column.regexp_match(value)
        return cast("ColumnElement[bool]", ~expr if self._negate else expr)


def pattern_operators() -> list[FilterOperator]:
    return [
        *(PatternOperator(op) for op in _PATTERNS),
        RegexpOperator(),
        RegexpOperator(negate=True),
    ]
