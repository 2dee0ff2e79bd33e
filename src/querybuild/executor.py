"""
QueryExecutor: runs compiled plans against a SQLAlchemy ``Session`` or
``Connection`` supplied by the caller.

The caller owns the bind's lifecycle and transactions.  Backend failures are
SQLAlchemy's own exceptions and propagate unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, TypeVar, overload

from pydantic import BaseModel

from .exceptions import NotFoundError

if TYPE_CHECKING:
    from sqlalchemy import Select
    from sqlalchemy.engine import Connection, Dialect, RowMapping
    from sqlalchemy.orm import Session

    from .plan import QueryPlan

logger = logging.getLogger(__name__)

R = TypeVar("R")
ResultType = Callable[..., R]


class QueryExecutor:
    """
    Execute plans and materialise their rows.

    Rows are returned as ``RowMapping`` objects keyed by column name or
    label.  With a ``result_type`` each row is converted: pydantic models
    through ``model_validate``, any other callable through keyword
    arguments.
    """

    def __init__(self, bind: Session | Connection) -> None:
        self._bind = bind

    @property
    def bind(self) -> Session | Connection:
        return self._bind

    @property
    def dialect(self) -> Dialect | None:
        """Dialect of the underlying engine, when one can be determined."""
        dialect = getattr(self._bind, "dialect", None)
        if dialect is not None:
            return dialect  # type: ignore[no-any-return]
        get_bind = getattr(self._bind, "get_bind", None)
        if get_bind is None:
            return None
        return get_bind().dialect  # type: ignore[no-any-return]

    def _execute(self, stmt: Select[Any]) -> Any:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Executing: %s", stmt.compile(dialect=self.dialect)
            )
        return self._bind.execute(stmt)

    @overload
    def find_all(self, plan: QueryPlan) -> list[RowMapping]: ...

    @overload
    def find_all(self, plan: QueryPlan, result_type: ResultType[R]) -> list[R]: ...

    def find_all(
        self, plan: QueryPlan, result_type: ResultType[Any] | None = None
    ) -> list[Any]:
        """
        Every row of *plan*.

        Raises:
            CompilationError: If the plan carries validation errors.
        """
        plan.raise_for_errors()
        rows = self._execute(plan.statement).mappings().all()
        return [_materialise(row, result_type) for row in rows]

    @overload
    def find_one(self, plan: QueryPlan) -> RowMapping: ...

    @overload
    def find_one(self, plan: QueryPlan, result_type: ResultType[R]) -> R: ...

    def find_one(
        self, plan: QueryPlan, result_type: ResultType[Any] | None = None
    ) -> Any:
        """
        First row of *plan*.

        Raises:
            CompilationError: If the plan carries validation errors.
            NotFoundError: If the plan matches no row.
        """
        plan.raise_for_errors()
        row = self._execute(plan.statement.limit(1)).mappings().first()
        if row is None:
            raise NotFoundError(
                f"No {plan.catalog.entity_name} matches the request"
            )
        return _materialise(row, result_type)

    def count(self, plan: QueryPlan) -> int:
        """
        Number of rows *plan* yields without ORDER BY, LIMIT and OFFSET.

        Raises:
            CompilationError: If the plan carries validation errors.
        """
        plan.raise_for_errors()
        return int(self._execute(plan.count_statement()).scalar_one())


def _materialise(row: Mapping[str, Any], result_type: ResultType[Any] | None) -> Any:
    if result_type is None:
        return row
    if isinstance(result_type, type) and issubclass(result_type, BaseModel):
        return result_type.model_validate(dict(row))
    return result_type(**row)
