"""Compiler configuration."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True)
class CompilerConfig:
    """
    Immutable settings shared by a builder, its compiler and sub-compilers.

    Attributes:
        strict_scopes: Record a ``ScopeNotFoundError`` when a request names
            an unregistered scope.  When ``False`` the reference is logged
            and the clause falls back to its field (or is skipped).
        value_separator: Separator for multi-valued operands of ``IN``,
            ``NOT_IN`` and ``BETWEEN``.  Operands containing it cannot be
            expressed; there is no escaping.
        max_page_size: Upper bound applied to ``Pagination.page_size``.
            ``None`` disables the clamp.
    """

    strict_scopes: bool = True
    value_separator: str = ","
    max_page_size: int | None = None

    def __post_init__(self) -> None:
        if not self.value_separator:
            raise ValueError("value_separator must not be empty")
        if self.max_page_size is not None and self.max_page_size < 1:
            raise ValueError("max_page_size must be a positive integer")

    def with_overrides(self, **changes: Any) -> CompilerConfig:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


DEFAULT_CONFIG = CompilerConfig()
