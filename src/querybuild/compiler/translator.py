"""OperatorTranslator: (column, operator, value, nocase) -> predicate."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import func

from ..operators import ARRAY_OPERATORS, VALUELESS_OPERATORS, Operator
from .operators import DEFAULT_OPERATOR_REGISTRY

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement

    from .strategy import OperatorRegistry


class OperatorTranslator:
    """
    Translate one filter into a SQLAlchemy boolean expression.

    Case-insensitive matching lowers both the column (``lower(col)``) and
    the operand before delegating to the operator strategy.  It is not
    applied to null checks, which have no operand, nor to array operators.
    Operands are always bound parameters.
    """

    def __init__(self, registry: OperatorRegistry | None = None) -> None:
        self._registry = (
            registry if registry is not None else DEFAULT_OPERATOR_REGISTRY
        )

    @property
    def registry(self) -> OperatorRegistry:
        return self._registry

    def translate(
        self,
        column: Any,
        op: Operator,
        value: str = "",
        *,
        nocase: bool = False,
    ) -> ColumnElement[bool] | None:
        """
        Build the predicate for ``column <op> value``.

        Returns ``None`` when the operand cannot form a predicate (e.g. a
        ``BETWEEN`` without exactly two bounds).

        Raises:
            OperatorNotSupportedError: If no strategy handles *op*.
        """
        if nocase and op not in VALUELESS_OPERATORS and op not in ARRAY_OPERATORS:
            column = func.lower(column)
            value = value.lower()
        return self._registry.apply(op, column, value)
