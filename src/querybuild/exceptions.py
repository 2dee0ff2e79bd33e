"""
Query-build exception hierarchy.

All exceptions inherit from ``QueryBuildError`` and provide ``to_dict()``
for API-friendly error responses.  Storage backend failures are *not*
part of this hierarchy: SQLAlchemy's own exceptions propagate unchanged so
callers can tell a bad request from a storage failure.
"""

from __future__ import annotations

from difflib import get_close_matches
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence


class QueryBuildError(Exception):
    """Root exception for the querybuild package."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }


class RequestValidationError(QueryBuildError):
    """A request could not be compiled into a plan."""


class FieldValidationError(RequestValidationError):
    """
    A field name is not present in the entity's catalog.

    Resolution is exact; the suggestions are only a hint for the caller.

    Example error message::

        invalid field name: 'Staus' on 'test_users'. Did you mean: status?
    """

    def __init__(
        self,
        field: str,
        entity: str,
        available_fields: Iterable[str] = (),
        *,
        clause: str | None = None,
        cutoff: float = 0.6,
    ) -> None:
        self.field = field
        self.entity = entity
        self.clause = clause
        self.available_fields = sorted(available_fields)
        self.suggestions = get_close_matches(
            field, self.available_fields, n=3, cutoff=cutoff
        )

        message = f"invalid field name: {field!r} on {entity!r}"
        if clause:
            message += f" (in {clause})"
        message += "."
        if self.suggestions:
            message += f" Did you mean: {', '.join(self.suggestions)}?"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "INVALID_FIELD",
            "field": self.field,
            "entity": self.entity,
            "clause": self.clause,
            "suggestions": self.suggestions,
            "available_fields": self.available_fields,
        }


class UnsupportedFeatureError(RequestValidationError):
    """
    A request uses a construct that is deliberately not compiled.

    Raw ``having`` text and per-aggregation ``add_selects`` are rejected
    here instead of being silently dropped; register a scope instead.
    """

    def __init__(self, message: str, *, feature: str | None = None) -> None:
        self.feature = feature
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "UNSUPPORTED_FEATURE",
            "feature": self.feature,
            "message": str(self),
        }


class OperatorNotSupportedError(UnsupportedFeatureError):
    """
    No translation strategy is registered for an operator.

    *operator* is the operator's diagnostic name (``"UNKNOWN"`` for values
    outside the enum).
    """

    def __init__(self, operator: str) -> None:
        self.operator = operator
        super().__init__(
            f"Unsupported filter operator: {operator}", feature="operator"
        )


class ScopeNotFoundError(RequestValidationError):
    """A request references a scope that was never registered."""

    def __init__(self, category: str, name: str) -> None:
        self.category = category
        self.name = name
        super().__init__(f"No {category} scope registered under {name!r}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "SCOPE_NOT_FOUND",
            "category": self.category,
            "name": self.name,
        }


class CompilationError(RequestValidationError):
    """
    Aggregate of every error recorded while compiling one request.

    Raised by the executor when asked to run a plan that carries errors.
    """

    def __init__(self, errors: Sequence[RequestValidationError]) -> None:
        self.errors = list(errors)
        if len(self.errors) == 1:
            message = str(self.errors[0])
        else:
            details = "; ".join(str(e) for e in self.errors)
            message = f"{len(self.errors)} errors in request: {details}"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "COMPILATION_FAILED",
            "errors": [e.to_dict() for e in self.errors],
        }


class NotFoundError(QueryBuildError):
    """Raised by ``find_one`` when no row matches."""


__all__: list[str] = [
    "CompilationError",
    "FieldValidationError",
    "NotFoundError",
    "OperatorNotSupportedError",
    "QueryBuildError",
    "RequestValidationError",
    "ScopeNotFoundError",
    "UnsupportedFeatureError",
]
