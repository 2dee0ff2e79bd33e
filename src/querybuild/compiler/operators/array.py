"""Array relationship operators.

These render the PostgreSQL array operators (``&&``, ``@>``, ``<@``).  The
operand is bound as-is; other backends reject them at execution time.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from ...operators import Operator
from ..strategy import FilterOperator

if TYPE_CHECKING:
    from sqlalchemy.sql.elements import ColumnElement

_SYMBOLS = {
    Operator.OVERLAP: "&&",
    Operator.ARRAY_CONTAINS: "@>",
    Operator.ARRAY_CONTAINED: "<@",
}


class ArrayOperator(FilterOperator):
    def __init__(self, operator: Operator) -> None:
        self.operator = operator
        self._symbol = _SYMBOLS[operator]

    def apply(self, column: Any, value: str) -> ColumnElement[bool]:
        expr = column.op(self._symbol, is_comparison=True)(value)
        return cast("ColumnElement[bool]", expr)


def array_operators() -> list[ArrayOperator]:
    return [ArrayOperator(op) for op in _SYMBOLS]
