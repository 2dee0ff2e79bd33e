"""``IS NULL`` / ``IS NOT NULL``."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from ...operators import Operator
from ..strategy import FilterOperator

if TYPE_CHECKING:
    from sqlalchemy.sql.elements import ColumnElement


class NullCheckOperator(FilterOperator):
    """Null test; the request value is ignored."""

    def __init__(self, *, negate: bool = False) -> None:
        self.operator = Operator.NOT_NULL if negate else Operator.IS_NULL
        self._negate = negate

    def apply(self, column: Any, _value: str) -> ColumnElement[bool]:
        expr = column.is_not(None) if self._negate else column.is_(None)
        return cast("ColumnElement[bool]", expr)
