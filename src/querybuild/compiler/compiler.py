"""
Compile a ``FilterRequest`` into a :class:`~querybuild.plan.QueryPlan`.

The compiler folds a request into a single SQLAlchemy ``Select`` in a fixed
order::

    1. select scopes (custom_fields)    6. custom filter scope
    2. DISTINCT                         7. GROUP BY / group scopes
    3. joins / join scopes              8. ORDER BY / sort scopes
    4. sub-query as derived table       9. aggregate projection
    5. filters                         10. pagination

Every identifier placed in the statement comes from the
:class:`~querybuild.catalog.FieldCatalog`; values are bound parameters.
Validation failures do not abort compilation: each one is recorded on the
plan so a single request reports all of its problems, and the clause that
failed is left out.  The executor refuses plans that carry errors.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, Protocol

from sqlalchemy import func, select, table, text

from ..config import DEFAULT_CONFIG
from ..exceptions import (
    FieldValidationError,
    ScopeNotFoundError,
    UnsupportedFeatureError,
)
from ..operators import AggregationOp, aggregation_name
from ..plan import QueryPlan
from ..scopes import ScopeCategory, ScopeRegistry
from .operators import DEFAULT_OPERATOR_REGISTRY, build_default_registry
from .translator import OperatorTranslator

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from sqlalchemy.engine import Dialect
    from sqlalchemy.sql.expression import ColumnClause, FromClause

    from ..catalog import FieldCatalog
    from ..config import CompilerConfig
    from ..models import (
        Aggregation,
        CustomField,
        CustomFilter,
        Filter,
        FilterRequest,
        Group,
        Join,
        Pagination,
        Sort,
        SubQuery,
    )
    from ..scopes import ScopeFunc

logger = logging.getLogger(__name__)

JOIN_KINDS = frozenset({"INNER", "LEFT", "RIGHT", "FULL"})

# [schema.]table [[AS] alias]
_TABLE_REF = re.compile(
    r"^(?:(?P<schema>\w+)\.)?(?P<name>\w+)(?:\s+(?:AS\s+)?(?P<alias>\w+))?$",
    re.IGNORECASE,
)

_AGGREGATES = {
    AggregationOp.COUNT: func.count,
    AggregationOp.SUM: func.sum,
    AggregationOp.AVG: func.avg,
    AggregationOp.MAX: func.max,
    AggregationOp.MIN: func.min,
}


class PlanCounter(Protocol):
    """Anything able to count the rows of a plan (the executor)."""

    def count(self, plan: QueryPlan) -> int: ...


class RequestCompiler:
    """
    Compiles requests for one entity.

    Args:
        catalog: Allowed fields of the entity.
        registry: Scope registry consulted for named scopes.  A private,
            empty registry is created when omitted.
        translator: Filter operator translator.
        executor: Used to fill ``Pagination.total``.  Without one, paginated
            requests get OFFSET/LIMIT but no total.
        config: Compiler settings.
        related: Catalogs for tables a sub-query may target, by table name.
        dialect: Dialect used when rendering plans as text.
    """

    def __init__(
        self,
        catalog: FieldCatalog,
        registry: ScopeRegistry | None = None,
        *,
        translator: OperatorTranslator | None = None,
        executor: PlanCounter | None = None,
        config: CompilerConfig | None = None,
        related: Mapping[str, FieldCatalog] | None = None,
        dialect: Dialect | None = None,
    ) -> None:
        self._catalog = catalog
        self._registry = registry if registry is not None else ScopeRegistry()
        self._config = config or DEFAULT_CONFIG
        if translator is None:
            operators = (
                DEFAULT_OPERATOR_REGISTRY
                if self._config.value_separator == ","
                else build_default_registry(self._config.value_separator)
            )
            translator = OperatorTranslator(operators)
        self._translator = translator
        self._executor = executor
        self._related = dict(related or {})
        self._dialect = dialect

    @property
    def catalog(self) -> FieldCatalog:
        return self._catalog

    @property
    def registry(self) -> ScopeRegistry:
        return self._registry

    @property
    def config(self) -> CompilerConfig:
        return self._config

    def compile(self, request: FilterRequest) -> QueryPlan:
        """
        Fold *request* into a plan.

        The request is only written to in ``request.page.total``.
        """
        base = self._catalog.table
        plan = QueryPlan(
            statement=select(*self._catalog.columns()).select_from(base),
            catalog=self._catalog,
            from_clause=base,
            pagination=request.page,
            dialect=self._dialect,
        )

        self._apply_custom_fields(plan, request.custom_fields)
        if request.distinct:
            plan.statement = plan.statement.distinct()
        self._apply_joins(plan, request.joins)
        self._apply_sub_query(plan, request.sub_query)
        self._apply_filters(plan, request.filters)
        self._apply_custom_filter(plan, request.custom_filter)
        group_columns = self._apply_groups(plan, request.groups)
        self._apply_sorts(plan, request.sorts)
        self._apply_aggregations(plan, request.aggrs, group_columns)
        self._apply_pagination(plan, request.page)

        if plan.has_errors:
            logger.debug(
                "Compiled request for %s with %d error(s)",
                self._catalog.entity_name,
                len(plan.errors),
            )
        else:
            logger.debug("Compiled request for %s", self._catalog.entity_name)
        return plan

    # -- helpers ------------------------------------------------------------

    def _resolve(
        self, plan: QueryPlan, name: str, clause: str
    ) -> ColumnClause[Any] | None:
        try:
            return self._catalog.qualified(name, clause=clause)
        except FieldValidationError as exc:
            plan.add_error(exc)
            return None

    def _scope(
        self, plan: QueryPlan, category: ScopeCategory, name: str
    ) -> tuple[ScopeFunc | None, bool]:
        """
        Look up a scope.

        Returns ``(scope, skip)``: *skip* is true when the scope is missing
        and the clause must not fall back to its field.
        """
        scope = self._registry.get(category, name)
        if scope is not None:
            return scope, False
        if self._config.strict_scopes:
            plan.add_error(ScopeNotFoundError(category.value, name))
            return None, True
        logger.warning(
            "No %s scope registered under %r; ignoring the reference",
            category.value,
            name,
        )
        return None, False

    def _join(
        self, plan: QueryPlan, target: FromClause, onclause: Any, kind: str
    ) -> None:
        current = plan.from_clause
        if kind == "LEFT":
            joined = current.outerjoin(target, onclause)
        elif kind == "RIGHT":
            # A RIGHT JOIN B == B LEFT JOIN A
            joined = target.outerjoin(current, onclause)
        elif kind == "FULL":
            joined = current.outerjoin(target, onclause, full=True)
        else:
            joined = current.join(target, onclause)
        plan.from_clause = joined
        plan.statement = plan.statement.select_from(joined)

    # -- stages -------------------------------------------------------------

    def _apply_custom_fields(
        self, plan: QueryPlan, fields: Sequence[CustomField]
    ) -> None:
        for custom in fields:
            scope, _ = self._scope(plan, ScopeCategory.SELECT, custom.scope)
            if scope is not None:
                plan.statement = scope(plan.statement)

    def _apply_joins(self, plan: QueryPlan, joins: Sequence[Join]) -> None:
        for join in joins:
            kind = join.kind.strip().upper()
            if not kind:
                if not join.scope:
                    plan.add_error(
                        UnsupportedFeatureError(
                            "A join needs either a type or a scope",
                            feature="join",
                        )
                    )
                    continue
                scope, _ = self._scope(plan, ScopeCategory.JOIN, join.scope)
                if scope is not None:
                    plan.statement = scope(plan.statement)
                continue

            if kind not in JOIN_KINDS:
                plan.add_error(
                    UnsupportedFeatureError(
                        f"Unsupported join type {join.kind!r}; "
                        f"expected one of {', '.join(sorted(JOIN_KINDS))}",
                        feature="join",
                    )
                )
                continue
            if not join.table or not join.condition:
                plan.add_error(
                    UnsupportedFeatureError(
                        "A typed join needs both a table and a condition",
                        feature="join",
                    )
                )
                continue
            target = _join_target(join.table)
            if target is None:
                plan.add_error(
                    UnsupportedFeatureError(
                        f"Join table {join.table!r} is not of the form "
                        "[schema.]table [[AS] alias]",
                        feature="join",
                    )
                )
                continue
            self._join(plan, target, text(join.condition), kind)

    def _apply_sub_query(self, plan: QueryPlan, sub: SubQuery | None) -> None:
        if sub is None:
            return
        if not sub.field or not sub.join_cond:
            plan.add_error(
                UnsupportedFeatureError(
                    "A sub-query needs an alias (field) and a join condition",
                    feature="sub_query",
                )
            )
            return

        catalog = self._related.get(sub.table)
        if catalog is None:
            catalog = self._catalog.catalog_for(sub.table)
        nested = RequestCompiler(
            catalog,
            self._registry,
            translator=self._translator,
            config=self._config,
            related=self._related,
            dialect=self._dialect,
        ).compile(sub.filter)
        if nested.has_errors:
            plan.extend_errors(nested.errors)
            return

        derived = nested.statement.subquery(sub.field)
        self._join(plan, derived, text(sub.join_cond), "INNER")

    def _apply_filters(self, plan: QueryPlan, filters: Sequence[Filter]) -> None:
        for flt in filters:
            column = self._resolve(plan, flt.field, "filter")
            if column is None:
                continue
            try:
                predicate = self._translator.translate(
                    column, flt.op, flt.value, nocase=flt.nocase
                )
            except UnsupportedFeatureError as exc:
                plan.add_error(exc)
                continue
            if predicate is not None:
                plan.statement = plan.statement.where(predicate)

    def _apply_custom_filter(
        self, plan: QueryPlan, custom: CustomFilter | None
    ) -> None:
        if custom is None or not custom.scope:
            return
        scope, _ = self._scope(plan, ScopeCategory.FILTER, custom.scope)
        if scope is not None:
            plan.statement = scope(plan.statement, *custom.values)

    def _apply_groups(
        self, plan: QueryPlan, groups: Sequence[Group]
    ) -> list[ColumnClause[Any]]:
        columns: list[ColumnClause[Any]] = []
        for group in groups:
            if group.scope:
                scope, skip = self._scope(plan, ScopeCategory.GROUP, group.scope)
                if scope is not None:
                    plan.statement = scope(plan.statement)
                    continue
                if skip or not group.field:
                    continue

            column = self._resolve(plan, group.field, "group")
            if column is None:
                continue
            columns.append(column)
            if group.having:
                plan.add_error(
                    UnsupportedFeatureError(
                        "HAVING conditions must be implemented via a group scope",
                        feature="having",
                    )
                )

        if columns:
            plan.statement = plan.statement.group_by(*columns)
        return columns

    def _apply_sorts(self, plan: QueryPlan, sorts: Sequence[Sort]) -> None:
        for sort in sorts:
            if sort.scope:
                scope, skip = self._scope(plan, ScopeCategory.SORT, sort.scope)
                if scope is not None:
                    plan.statement = scope(plan.statement)
                    continue
                if skip or not sort.field:
                    continue

            column = self._resolve(plan, sort.field, "sort")
            if column is None:
                continue
            expr = func.lower(column) if sort.nocase else column
            plan.statement = plan.statement.order_by(
                expr.desc() if sort.desc else expr.asc()
            )

    def _apply_aggregations(
        self,
        plan: QueryPlan,
        aggrs: Sequence[Aggregation],
        group_columns: Sequence[ColumnClause[Any]],
    ) -> None:
        if not aggrs:
            return

        selects: list[Any] = []
        for aggr in aggrs:
            column = self._resolve(plan, aggr.field, "aggregation")
            if column is None:
                continue
            if aggr.add_selects:
                plan.add_error(
                    UnsupportedFeatureError(
                        "Additional selects must be implemented via a select scope",
                        feature="add_selects",
                    )
                )
                continue
            agg = _AGGREGATES.get(aggr.op)
            if agg is None:
                plan.add_error(
                    UnsupportedFeatureError(
                        f"Unsupported aggregation: {aggregation_name(aggr.op)}",
                        feature="aggregation",
                    )
                )
                continue

            expr = func.lower(column) if aggr.nocase else column
            label = aggr.alias or self._catalog.unqualified(aggr.field)
            selects.append(agg(expr).label(label))

        if selects:
            # Replaces the projection: group keys first, then the aggregates.
            # A key sharing its name with an aggregate label is left out so
            # every result column stays addressable by name.
            labels = {agg_col.name for agg_col in selects}
            keys = [col for col in group_columns if col.name not in labels]
            plan.statement = plan.statement.with_only_columns(*keys, *selects)

    def _apply_pagination(self, plan: QueryPlan, page: Pagination | None) -> None:
        if page is None:
            return
        size = page.page_size
        if self._config.max_page_size is not None:
            size = min(size, self._config.max_page_size)

        if not plan.has_errors and self._executor is not None:
            page.total = self._executor.count(plan)

        plan.statement = plan.statement.offset((page.page - 1) * size).limit(size)


def _join_target(ref: str) -> FromClause | None:
    """Parse ``[schema.]table [[AS] alias]``; ``None`` if *ref* is malformed."""
    match = _TABLE_REF.match(ref.strip())
    if match is None:
        return None
    alias = match["alias"]
    if alias is not None and alias.upper() == "AS":
        return None
    target = table(match["name"], schema=match["schema"])
    return target.alias(alias) if alias else target
