import logging
import threading

import pytest
from sqlalchemy import literal_column

from querybuild import ScopeCategory, ScopeNotFoundError, ScopeRegistry


def _adults(stmt):
    return stmt.where(literal_column("age") >= 18)


def test_register_and_get():
    registry = ScopeRegistry()
    registry.register(ScopeCategory.FILTER, "adults", _adults)

    assert registry.get(ScopeCategory.FILTER, "adults") is _adults
    assert registry.has("filter", "adults")
    assert registry.names(ScopeCategory.FILTER) == {"adults"}


def test_categories_are_independent():
    registry = ScopeRegistry()
    registry.register(ScopeCategory.FILTER, "adults", _adults)

    assert registry.get(ScopeCategory.SORT, "adults") is None
    assert not registry.has(ScopeCategory.GROUP, "adults")


def test_last_registration_wins(caplog):
    registry = ScopeRegistry()

    def other(stmt):
        return stmt

    registry.register(ScopeCategory.SORT, "by_age", _adults)
    with caplog.at_level(logging.WARNING, logger="querybuild.scopes"):
        registry.register(ScopeCategory.SORT, "by_age", other)

    assert registry.get(ScopeCategory.SORT, "by_age") is other
    assert "Overwriting sort scope 'by_age'" in caplog.text


def test_lookup_raises_for_missing_scope():
    registry = ScopeRegistry()
    with pytest.raises(ScopeNotFoundError) as exc_info:
        registry.lookup(ScopeCategory.JOIN, "with_tags")

    assert exc_info.value.category == "join"
    assert exc_info.value.name == "with_tags"


def test_unregister():
    registry = ScopeRegistry()
    registry.register(ScopeCategory.SELECT, "full_name", _adults)
    registry.unregister(ScopeCategory.SELECT, "full_name")
    registry.unregister(ScopeCategory.SELECT, "never_registered")

    assert registry.get(ScopeCategory.SELECT, "full_name") is None


def test_register_validates_arguments():
    registry = ScopeRegistry()
    with pytest.raises(ValueError):
        registry.register(ScopeCategory.FILTER, "", _adults)
    with pytest.raises(TypeError):
        registry.register(ScopeCategory.FILTER, "broken", "not callable")
    with pytest.raises(ValueError):
        registry.register("ordering", "adults", _adults)


def test_concurrent_registration_and_lookup():
    registry = ScopeRegistry()
    errors: list[BaseException] = []

    def writer(n: int) -> None:
        try:
            for i in range(200):
                registry.register(ScopeCategory.FILTER, f"scope_{n}_{i}", _adults)
        except BaseException as exc:  # pragma: no cover
            errors.append(exc)

    def reader() -> None:
        try:
            for i in range(200):
                registry.get(ScopeCategory.FILTER, f"scope_0_{i}")
                registry.names(ScopeCategory.FILTER)
        except BaseException as exc:  # pragma: no cover
            errors.append(exc)

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
    threads += [threading.Thread(target=reader) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len(registry.names(ScopeCategory.FILTER)) == 800
