"""
QueryBuilder: compiler and executor bound to one entity.

Usage::

    builder = QueryBuilder(session, UserRecord)
    builder.register_scope(
        ScopeCategory.FILTER,
        "adults",
        lambda stmt: stmt.where(literal_column("age") >= 18),
    )

    request = FilterRequest(
        filters=[Filter(field="status", op=Operator.EQ, value="active")],
        custom_filter=CustomFilter(scope="adults"),
        page=Pagination(page=1, page_size=20),
    )
    users = builder.find_all(request)
    print(request.page.total)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import Table

from .catalog import FieldCatalog
from .compiler import RequestCompiler
from .config import DEFAULT_CONFIG
from .executor import QueryExecutor
from .scopes import ScopeRegistry

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping

    from sqlalchemy.engine import Connection
    from sqlalchemy.orm import Session

    from .config import CompilerConfig
    from .executor import ResultType
    from .models import FilterRequest
    from .plan import QueryPlan
    from .scopes import ScopeCategory, ScopeFunc


class QueryBuilder:
    """
    Facade over :class:`RequestCompiler` and :class:`QueryExecutor`.

    Args:
        bind: ``Session`` or ``Connection`` to execute against.  ``None``
            gives a compile-only builder: :meth:`build` works, the
            ``find_*`` methods raise, and pagination totals stay at 0.
        entity: A declarative model class, a Core ``Table`` or a ready
            :class:`FieldCatalog`.
        registry: Scope registry; a private one is created when omitted.
        config: Compiler settings.
        related: Catalogs for sub-query tables, by table name.
        include: Restrict the catalog to these fields.
        exclude: Remove these fields from the catalog.
    """

    def __init__(
        self,
        bind: Session | Connection | None,
        entity: type[Any] | Table | FieldCatalog,
        *,
        registry: ScopeRegistry | None = None,
        config: CompilerConfig | None = None,
        related: Mapping[str, FieldCatalog] | None = None,
        include: Collection[str] | None = None,
        exclude: Collection[str] | None = None,
    ) -> None:
        self._catalog = _catalog_for(entity, include, exclude)
        self._registry = registry if registry is not None else ScopeRegistry()
        self._config = config or DEFAULT_CONFIG
        self._executor = QueryExecutor(bind) if bind is not None else None
        self._compiler = RequestCompiler(
            self._catalog,
            self._registry,
            executor=self._executor,
            config=self._config,
            related=related,
            dialect=self._executor.dialect if self._executor else None,
        )

    @property
    def catalog(self) -> FieldCatalog:
        return self._catalog

    @property
    def registry(self) -> ScopeRegistry:
        return self._registry

    @property
    def compiler(self) -> RequestCompiler:
        return self._compiler

    @property
    def executor(self) -> QueryExecutor | None:
        return self._executor

    def register_scope(
        self, category: ScopeCategory | str, name: str, scope: ScopeFunc
    ) -> None:
        self._registry.register(category, name, scope)

    def build(self, request: FilterRequest) -> QueryPlan:
        """Compile *request*; errors are recorded on the returned plan."""
        return self._compiler.compile(request)

    def _require_executor(self) -> QueryExecutor:
        if self._executor is None:
            raise ValueError("QueryBuilder has no bind; it can only compile.")
        return self._executor

    def find_all(
        self, request: FilterRequest, result_type: ResultType[Any] | None = None
    ) -> list[Any]:
        executor = self._require_executor()
        return executor.find_all(self.build(request), result_type)

    def find_one(
        self, request: FilterRequest, result_type: ResultType[Any] | None = None
    ) -> Any:
        executor = self._require_executor()
        return executor.find_one(self.build(request), result_type)

    def count(self, request: FilterRequest) -> int:
        """Rows matching *request*, ignoring its sorts and pagination."""
        executor = self._require_executor()
        return executor.count(self.build(request))


def _catalog_for(
    entity: type[Any] | Table | FieldCatalog,
    include: Collection[str] | None,
    exclude: Collection[str] | None,
) -> FieldCatalog:
    if isinstance(entity, FieldCatalog):
        if include is not None or exclude:
            raise ValueError("include/exclude cannot narrow a ready FieldCatalog")
        return entity
    if isinstance(entity, Table):
        return FieldCatalog.from_table(entity, include=include, exclude=exclude)
    return FieldCatalog.from_model(entity, include=include, exclude=exclude)
