"""
Filter operator strategies.

Each :class:`~querybuild.operators.Operator` is compiled by one
``FilterOperator``; the ``OperatorRegistry`` routes a filter to the strategy
registered for its operator.  Registering a second strategy for the same
operator replaces the first, which is how callers override a built-in.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from ..exceptions import OperatorNotSupportedError
from ..operators import operator_name

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement

    from ..operators import Operator

logger = logging.getLogger(__name__)


class FilterOperator(ABC):
    """
    Compiles one operator into a SQLAlchemy boolean expression.

    Subclasses set ``operator`` (usually in ``__init__``) and implement
    :meth:`apply`.
    """

    operator: Operator

    @abstractmethod
    def apply(self, column: Any, value: str) -> ColumnElement[bool] | None:
        """
        Build the predicate for ``column <operator> value``.

        *column* may already be wrapped in ``lower()``; *value* is the raw
        string operand from the request.  ``None`` drops the clause.
        """
        ...


class OperatorRegistry:
    """Routes each :class:`Operator` to the strategy that compiles it."""

    def __init__(self, *strategies: FilterOperator) -> None:
        self._strategies: dict[Operator, FilterOperator] = {}
        self.register(*strategies)

    def register(self, *strategies: FilterOperator) -> None:
        for strategy in strategies:
            previous = self._strategies.get(strategy.operator)
            if previous is not None:
                logger.debug(
                    "%s now compiled by %s (was %s)",
                    operator_name(strategy.operator),
                    type(strategy).__name__,
                    type(previous).__name__,
                )
            self._strategies[strategy.operator] = strategy

    def unregister(self, operator: Operator) -> None:
        self._strategies.pop(operator, None)

    def __contains__(self, operator: object) -> bool:
        return operator in self._strategies

    @property
    def supported_operators(self) -> frozenset[Operator]:
        return frozenset(self._strategies)

    def apply(
        self, operator: Operator, column: Any, value: str
    ) -> ColumnElement[bool] | None:
        """
        Compile ``column <operator> value`` with the registered strategy.

        Raises:
            OperatorNotSupportedError: If nothing compiles *operator*.
        """
        strategy = self._strategies.get(operator)
        if strategy is None:
            raise OperatorNotSupportedError(operator_name(operator))
        return strategy.apply(column, value)
