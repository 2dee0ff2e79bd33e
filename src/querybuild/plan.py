"""QueryPlan: the compiled, not-yet-executed form of a request."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select

from .exceptions import CompilationError
from .utils import extract_tables_from_statement

if TYPE_CHECKING:
    from sqlalchemy import Select
    from sqlalchemy.engine import Dialect
    from sqlalchemy.sql.expression import FromClause

    from .catalog import FieldCatalog
    from .exceptions import RequestValidationError
    from .models import Pagination


@dataclass
class QueryPlan:
    """
    Accumulated query state for one request.

    Attributes:
        statement: The SQLAlchemy ``Select`` built so far.
        catalog: Catalog of the entity the plan was compiled for.
        from_clause: FROM tree grown by explicit joins and the sub-query.
        errors: Validation errors recorded during compilation.  A plan with
            errors must not be executed.
        pagination: The request's pagination block, if any.
        dialect: Dialect used by :attr:`sql`; the default string dialect
            when ``None``.
    """

    statement: Select[Any]
    catalog: FieldCatalog
    from_clause: FromClause
    errors: list[RequestValidationError] = field(default_factory=list)
    pagination: Pagination | None = None
    dialect: Dialect | None = None

    def add_error(self, error: RequestValidationError) -> None:
        self.errors.append(error)

    def extend_errors(self, errors: list[RequestValidationError]) -> None:
        self.errors.extend(errors)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def raise_for_errors(self) -> None:
        """
        Raises:
            CompilationError: If any error was recorded.
        """
        if self.errors:
            raise CompilationError(self.errors)

    def count_statement(self) -> Select[Any]:
        """``SELECT count(*)`` over this plan, ignoring ordering and paging."""
        inner = self.statement.order_by(None).limit(None).offset(None)
        return select(func.count()).select_from(inner.subquery())

    def render(self, dialect: Dialect | None = None) -> str:
        """Render the statement as SQL text with bind placeholders."""
        return str(self.statement.compile(dialect=dialect or self.dialect))

    @property
    def sql(self) -> str:
        return self.render()

    def tables(self) -> list[str]:
        return extract_tables_from_statement(self.statement)

    def __str__(self) -> str:
        return self.sql
