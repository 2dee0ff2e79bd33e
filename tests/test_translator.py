import pytest
from sqlalchemy import column, table

from querybuild import (
    FilterOperator,
    Operator,
    OperatorNotSupportedError,
    OperatorRegistry,
    OperatorTranslator,
    build_default_registry,
)

people = table("people", column("name"), column("age"), column("tags"))


def _compile(expr):
    compiled = expr.compile()
    return str(compiled), list(compiled.params.values())


@pytest.fixture
def translator():
    return OperatorTranslator()


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("op", "sql_op"),
    [
        (Operator.EQ, "="),
        (Operator.NE, "!="),
        (Operator.GT, ">"),
        (Operator.GE, ">="),
        (Operator.LT, "<"),
        (Operator.LE, "<="),
    ],
)
def test_comparison_operators(translator, op, sql_op):
    sql, params = _compile(translator.translate(people.c.age, op, "30"))
    assert sql.startswith(f"people.age {sql_op} :")
    assert params == ["30"]


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("op", "pattern"),
    [
        (Operator.LIKE, "%jo%"),
        (Operator.CONTAINS, "%jo%"),
        (Operator.STARTS_WITH, "jo%"),
        (Operator.ENDS_WITH, "%jo"),
    ],
)
def test_like_patterns_wrap_the_bound_value(translator, op, pattern):
    sql, params = _compile(translator.translate(people.c.name, op, "jo"))
    assert "people.name LIKE :" in sql
    assert params == [pattern]


def test_not_like(translator):
    sql, params = _compile(translator.translate(people.c.name, Operator.NOT_LIKE, "x"))
    assert "people.name NOT LIKE :" in sql
    assert params == ["%x%"]


def test_regexp_operators(translator):
    match_sql, _ = _compile(translator.translate(people.c.name, Operator.REGEXP, "^J"))
    not_match_sql, _ = _compile(
        translator.translate(people.c.name, Operator.NOT_REGEXP, "^J")
    )
    assert "regexp" in match_sql.lower()
    assert "regexp" in not_match_sql.lower()
    assert match_sql != not_match_sql


# ---------------------------------------------------------------------------
# Sets and ranges
# ---------------------------------------------------------------------------


def test_in_splits_on_comma(translator):
    sql, params = _compile(translator.translate(people.c.age, Operator.IN, "25,35"))
    assert "people.age IN" in sql
    assert params == [["25", "35"]]


def test_in_keeps_empty_segments(translator):
    _, params = _compile(translator.translate(people.c.name, Operator.IN, "a,,b"))
    assert params == [["a", "", "b"]]


def test_not_in(translator):
    sql, params = _compile(translator.translate(people.c.age, Operator.NOT_IN, "25"))
    assert "NOT IN" in sql
    assert params == [["25"]]


def test_between_needs_two_bounds(translator):
    expr = translator.translate(people.c.age, Operator.BETWEEN, "20,30")
    sql, params = _compile(expr)
    assert "people.age BETWEEN :" in sql
    assert params == ["20", "30"]

    assert translator.translate(people.c.age, Operator.BETWEEN, "20") is None
    assert translator.translate(people.c.age, Operator.BETWEEN, "1,2,3") is None


def test_custom_separator():
    translator = OperatorTranslator(build_default_registry(separator="|"))
    _, params = _compile(translator.translate(people.c.name, Operator.IN, "a,b|c"))
    assert params == [["a,b", "c"]]


# ---------------------------------------------------------------------------
# Null checks and arrays
# ---------------------------------------------------------------------------


def test_null_checks_ignore_value(translator):
    sql, params = _compile(translator.translate(people.c.name, Operator.IS_NULL, "x"))
    assert sql == "people.name IS NULL"
    assert params == []

    sql, _ = _compile(translator.translate(people.c.name, Operator.NOT_NULL))
    assert sql == "people.name IS NOT NULL"


@pytest.mark.parametrize(
    ("op", "sql_op"),
    [
        (Operator.OVERLAP, "&&"),
        (Operator.ARRAY_CONTAINS, "@>"),
        (Operator.ARRAY_CONTAINED, "<@"),
    ],
)
def test_array_operators(translator, op, sql_op):
    sql, params = _compile(translator.translate(people.c.tags, op, "{a,b}"))
    assert f"people.tags {sql_op} :" in sql
    assert params == ["{a,b}"]


# ---------------------------------------------------------------------------
# Case-insensitive matching
# ---------------------------------------------------------------------------


def test_nocase_lowers_column_and_value(translator):
    sql, params = _compile(
        translator.translate(people.c.name, Operator.EQ, "John Doe", nocase=True)
    )
    assert sql.startswith("lower(people.name) = :")
    assert params == ["john doe"]


def test_nocase_skips_null_checks(translator):
    sql, _ = _compile(
        translator.translate(people.c.name, Operator.IS_NULL, nocase=True)
    )
    assert sql == "people.name IS NULL"


def test_nocase_skips_array_operators(translator):
    sql, params = _compile(
        translator.translate(people.c.tags, Operator.OVERLAP, "{A}", nocase=True)
    )
    assert "lower" not in sql
    assert params == ["{A}"]


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


def test_default_registry_covers_every_operator():
    assert build_default_registry().supported_operators == set(Operator)


def test_unregistered_operator_raises():
    registry = build_default_registry()
    registry.unregister(Operator.REGEXP)
    translator = OperatorTranslator(registry)

    with pytest.raises(OperatorNotSupportedError) as exc_info:
        translator.translate(people.c.name, Operator.REGEXP, "x")
    assert str(exc_info.value) == "Unsupported filter operator: REGEXP"
    assert Operator.REGEXP not in registry


def test_value_outside_the_enum_is_reported_as_unknown(translator):
    with pytest.raises(OperatorNotSupportedError) as exc_info:
        translator.translate(people.c.name, 99, "x")

    assert exc_info.value.operator == "UNKNOWN"
    assert str(exc_info.value) == "Unsupported filter operator: UNKNOWN"


def test_custom_operator_replaces_builtin():
    class ExactLike(FilterOperator):
        operator = Operator.LIKE

        def apply(self, column, value):
            return column.like(value)

    registry = build_default_registry()
    registry.register(ExactLike())
    _, params = _compile(
        OperatorTranslator(registry).translate(people.c.name, Operator.LIKE, "J_n")
    )
    assert params == ["J_n"]
    assert Operator.EQ in registry


def test_empty_registry_supports_nothing():
    registry = OperatorRegistry()
    assert registry.supported_operators == frozenset()
    assert Operator.EQ not in registry
