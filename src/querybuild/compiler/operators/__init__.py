"""
Built-in filter operator strategies and the default registry.

Usage::

    from querybuild.compiler.operators import DEFAULT_OPERATOR_REGISTRY

    expr = DEFAULT_OPERATOR_REGISTRY.apply(Operator.EQ, column, "active")
"""

from __future__ import annotations

from ..strategy import OperatorRegistry
from .array import array_operators
from .null import NullCheckOperator
from .set import BetweenOperator, MembershipOperator
from .standard import comparison_operators
from .string import pattern_operators


def build_default_registry(separator: str = ",") -> OperatorRegistry:
    """
    A registry compiling every :class:`~querybuild.operators.Operator`.

    *separator* splits the operands of IN, NOT IN and BETWEEN.
    """
    return OperatorRegistry(
        *comparison_operators(),
        MembershipOperator(separator),
        MembershipOperator(separator, negate=True),
        BetweenOperator(separator),
        *pattern_operators(),
        NullCheckOperator(),
        NullCheckOperator(negate=True),
        *array_operators(),
    )


DEFAULT_OPERATOR_REGISTRY: OperatorRegistry = build_default_registry()

__all__ = [
    "DEFAULT_OPERATOR_REGISTRY",
    "OperatorRegistry",
    "build_default_registry",
]
