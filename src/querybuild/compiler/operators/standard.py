"""Comparisons: ``=``, ``!=``, ``>``, ``>=``, ``<``, ``<=``."""

from __future__ import annotations

from operator import eq, ge, gt, le, lt, ne
from typing import TYPE_CHECKING, Any, cast

from ...operators import Operator
from ..strategy import FilterOperator

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.sql.elements import ColumnElement

_COMPARISONS: dict[Operator, Callable[[Any, Any], Any]] = {
    Operator.EQ: eq,
    Operator.NE: ne,
    Operator.GT: gt,
    Operator.GE: ge,
    Operator.LT: lt,
    Operator.LE: le,
}


class ComparisonOperator(FilterOperator):
    """``column <cmp> :value`` using the column's own comparison operator."""

    def __init__(self, operator: Operator) -> None:
        self.operator = operator
        self._compare = _COMPARISONS[operator]

    def apply(self, column: Any, value: str) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", self._compare(column, value))


def comparison_operators() -> list[ComparisonOperator]:
    return [ComparisonOperator(op) for op in _COMPARISONS]
