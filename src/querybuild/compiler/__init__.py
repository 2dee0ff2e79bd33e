"""
Request compilation: operator strategies, the translator and the compiler.

Usage::

    from querybuild.compiler import RequestCompiler

    plan = RequestCompiler(catalog, registry).compile(request)
    print(plan.sql)
"""

from __future__ import annotations

from .compiler import JOIN_KINDS, PlanCounter, RequestCompiler
from .operators import DEFAULT_OPERATOR_REGISTRY, build_default_registry
from .strategy import FilterOperator, OperatorRegistry
from .translator import OperatorTranslator

__all__ = [
    "DEFAULT_OPERATOR_REGISTRY",
    "JOIN_KINDS",
    "FilterOperator",
    "OperatorRegistry",
    "OperatorTranslator",
    "PlanCounter",
    "RequestCompiler",
    "build_default_registry",
]
