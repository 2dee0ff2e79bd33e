"""Declarative filter requests compiled into parameterized SQLAlchemy queries."""

from __future__ import annotations

from .builder import QueryBuilder
from .catalog import FieldCatalog, FieldInfo
from .compiler import (
    DEFAULT_OPERATOR_REGISTRY,
    FilterOperator,
    OperatorRegistry,
    OperatorTranslator,
    RequestCompiler,
    build_default_registry,
)
from .config import DEFAULT_CONFIG, CompilerConfig
from .exceptions import (
    CompilationError,
    FieldValidationError,
    NotFoundError,
    OperatorNotSupportedError,
    QueryBuildError,
    RequestValidationError,
    ScopeNotFoundError,
    UnsupportedFeatureError,
)
from .executor import QueryExecutor
from .models import (
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
from .operators import AggregationOp, Operator, aggregation_name, operator_name
from .plan import QueryPlan
from .scopes import ScopeCategory, ScopeFunc, ScopeRegistry

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_OPERATOR_REGISTRY",
    "Aggregation",
    "AggregationOp",
    "CompilationError",
    "CompilerConfig",
    "CustomField",
    "CustomFilter",
    "FieldCatalog",
    "FieldInfo",
    "FieldValidationError",
    "Filter",
    "FilterOperator",
    "FilterRequest",
    "Group",
    "Join",
    "NotFoundError",
    "Operator",
    "OperatorNotSupportedError",
    "OperatorRegistry",
    "OperatorTranslator",
    "Pagination",
    "QueryBuildError",
    "QueryBuilder",
    "QueryExecutor",
    "QueryPlan",
    "RequestCompiler",
    "RequestValidationError",
    "ScopeCategory",
    "ScopeFunc",
    "ScopeNotFoundError",
    "ScopeRegistry",
    "Sort",
    "SubQuery",
    "UnsupportedFeatureError",
    "aggregation_name",
    "build_default_registry",
    "operator_name",
]
