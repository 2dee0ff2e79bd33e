"""
ScopeRegistry: named, opaque query transforms.

A scope is a transform from one ``Select`` to another.  It is the escape
hatch for anything the declarative request cannot express safely: raw
``HAVING`` conditions, computed projections, vendor functions.  Whatever
SQL a scope emits is the registering caller's responsibility.

A scope is *not* narrowly "a grouping clause" or "an ORDER BY": it may touch
any part of the statement.  In particular a group scope commonly sets the
GROUP BY *and* replaces the projection::

    registry.register(
        ScopeCategory.GROUP,
        "status_counts",
        lambda stmt: stmt.with_only_columns(
            literal_column("status"), func.count().label("count")
        ).group_by(literal_column("status")),
    )

Filter scopes additionally receive ``CustomFilter.values`` as positional
arguments.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from enum import Enum
from typing import TYPE_CHECKING, Any

from .exceptions import ScopeNotFoundError

if TYPE_CHECKING:
    from sqlalchemy import Select

logger = logging.getLogger(__name__)

ScopeFunc = Callable[..., "Select[Any]"]


class ScopeCategory(str, Enum):
    """Independent scope namespaces."""

    FILTER = "filter"
    SORT = "sort"
    GROUP = "group"
    SELECT = "select"
    JOIN = "join"


class ReadWriteLock:
    """
    Many concurrent readers, one exclusive writer.

    Readers never block one another; a writer waits for active readers to
    drain and blocks everyone while it holds the lock.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class ScopeRegistry:
    """
    Thread-safe store of scopes keyed by ``(category, name)``.

    Registering an existing name replaces the scope (last write wins) and
    logs a warning.  A name registered in one category is invisible to the
    others.
    """

    def __init__(self) -> None:
        self._scopes: dict[ScopeCategory, dict[str, ScopeFunc]] = {
            category: {} for category in ScopeCategory
        }
        self._lock = ReadWriteLock()

    def register(
        self, category: ScopeCategory | str, name: str, scope: ScopeFunc
    ) -> None:
        if not name:
            raise ValueError("Scope name must not be empty")
        if not callable(scope):
            raise TypeError(f"Scope {name!r} is not callable")
        cat = ScopeCategory(category)
        with self._lock.write_locked():
            if name in self._scopes[cat]:
                logger.warning("Overwriting %s scope %r", cat.value, name)
            self._scopes[cat][name] = scope

    def unregister(self, category: ScopeCategory | str, name: str) -> None:
        cat = ScopeCategory(category)
        with self._lock.write_locked():
            self._scopes[cat].pop(name, None)

    def get(self, category: ScopeCategory | str, name: str) -> ScopeFunc | None:
        cat = ScopeCategory(category)
        with self._lock.read_locked():
            return self._scopes[cat].get(name)

    def lookup(self, category: ScopeCategory | str, name: str) -> ScopeFunc:
        """
        Return the scope registered under ``(category, name)``.

        Raises:
            ScopeNotFoundError: If nothing is registered under that key.
        """
        scope = self.get(category, name)
        if scope is None:
            raise ScopeNotFoundError(ScopeCategory(category).value, name)
        return scope

    def has(self, category: ScopeCategory | str, name: str) -> bool:
        return self.get(category, name) is not None

    def names(self, category: ScopeCategory | str) -> set[str]:
        cat = ScopeCategory(category)
        with self._lock.read_locked():
            return set(self._scopes[cat])
