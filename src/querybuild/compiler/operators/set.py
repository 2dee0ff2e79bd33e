"""Operators over separator-joined operands: in, not_in, between."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, cast

from ...operators import Operator
from ..strategy import FilterOperator

if TYPE_CHECKING:
    from sqlalchemy.sql.elements import ColumnElement

logger = logging.getLogger(__name__)


class _SplittingOperator(FilterOperator):
    def __init__(self, separator: str) -> None:
        self.separator = separator

    def split(self, value: str) -> list[str]:
        # Empty segments are kept: "a,,b" -> ["a", "", "b"].
        return value.split(self.separator)


class MembershipOperator(_SplittingOperator):
    """``column [NOT] IN (:v1, :v2, ...)``"""

    def __init__(self, separator: str = ",", *, negate: bool = False) -> None:
        super().__init__(separator)
        self.operator = Operator.NOT_IN if negate else Operator.IN
        self._negate = negate

    def apply(self, column: Any, value: str) -> ColumnElement[bool]:
        values = self.split(value)
        expr = column.not_in(values) if self._negate else column.in_(values)
        return cast("ColumnElement[bool]", expr)


class BetweenOperator(_SplittingOperator):
    """``column BETWEEN low AND high``; anything but two operands is dropped."""

    operator = Operator.BETWEEN

    def apply(self, column: Any, value: str) -> ColumnElement[bool] | None:
        bounds = self.split(value)
        if len(bounds) != 2:
            logger.debug(
                "Dropping BETWEEN on %s: expected 2 operands, got %d",
                column,
                len(bounds),
            )
            return None
        low, high = bounds
        return cast("ColumnElement[bool]", column.between(low, high))
