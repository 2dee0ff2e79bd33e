import logging

import pytest
from sqlalchemy.exc import OperationalError

from querybuild import (
    CompilationError,
    Filter,
    FilterRequest,
    Join,
    QueryExecutor,
    RequestCompiler,
    Sort,
)


@pytest.fixture
def executor(session):
    return QueryExecutor(session)


@pytest.fixture
def compiler(catalog, executor):
    return RequestCompiler(catalog, executor=executor, dialect=executor.dialect)


def test_dialect_is_taken_from_session(executor):
    assert executor.dialect.name == "sqlite"


def test_rows_are_mappings(compiler, executor):
    rows = executor.find_all(compiler.compile(FilterRequest(sorts=[Sort(field="id")])))

    assert rows[0]["name"] == "John Doe"
    assert set(rows[0].keys()) == {
        "id",
        "name",
        "email",
        "age",
        "status",
        "created_at",
    }


def test_plain_callable_result_type(compiler, executor):
    plan = compiler.compile(FilterRequest(filters=[Filter(field="id", value="3")]))
    row = executor.find_one(plan, lambda **cols: (cols["id"], cols["name"]))

    assert row == (3, "Bob Johnson")


def test_every_call_refuses_plans_with_errors(compiler, executor):
    plan = compiler.compile(
        FilterRequest(
            filters=[Filter(field="password", value="x")],
            sorts=[Sort(field="rank")],
        )
    )

    for call in (executor.find_all, executor.find_one, executor.count):
        with pytest.raises(CompilationError) as exc_info:
            call(plan)
        assert len(exc_info.value.errors) == 2
        assert exc_info.value.to_dict()["error"] == "COMPILATION_FAILED"


def test_count_ignores_order(compiler, executor):
    plan = compiler.compile(
        FilterRequest(
            filters=[Filter(field="status", value="active")],
            sorts=[Sort(field="age")],
        )
    )
    assert executor.count(plan) == 2


def test_backend_errors_propagate_unwrapped(compiler, executor):
    plan = compiler.compile(
        FilterRequest(
            joins=[
                Join(
                    kind="INNER",
                    table="ghosts",
                    condition="ghosts.id = test_users.id",
                )
            ]
        )
    )

    assert not plan.has_errors
    with pytest.raises(OperationalError):
        executor.find_all(plan)


def test_executed_sql_is_logged_at_debug(compiler, executor, caplog):
    plan = compiler.compile(FilterRequest(filters=[Filter(field="age", value="30")]))

    with caplog.at_level(logging.DEBUG, logger="querybuild.executor"):
        executor.find_all(plan)

    assert "Executing: SELECT" in caplog.text
