"""
Tests for the python and SQL compilers.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

import pytest

from querysieve.exceptions import InvalidConfigError, TranslationError
from querysieve.querydsl.compilers import PythonCompiler, SqlCompiler, python_compiler, sql_compiler
from querysieve.querydsl.compilers.utils import ParamSink, format_value_sql, normalize_lambda, quote_identifier
from querysieve.querydsl.nodes import (
    Access,
    Call,
    CallMethod,
    Conditional,
    Constant,
    Default,
    Invoke,
    Lambda,
    Parameter,
)


class Status(Enum):
    OPEN = "open"


@dataclass
class Owner:
    name: str


@dataclass
class Item:
    name: str
    price: Optional[float] = None
    owner: Optional[Owner] = None
    check: Optional[Lambda] = None


EXPENSIVE = Lambda.of(Item, lambda i: i.attr("price", Optional[float]).gt(100))

COMPILERS = [
    ("python", PythonCompiler()),
    ("sql", SqlCompiler()),
]


@pytest.mark.parametrize("name,compiler", COMPILERS)
def test_compiler_rejects_non_lambda(name, compiler):
    with pytest.raises(TypeError, match="must be a Lambda"):
        compiler.to_where({"name": "x"})


class TestPythonCompiler:
    """Tests for closures over records."""

    def test_equality_with_none(self):
        where = Lambda.of(Item, lambda i: i.attr("price").eq(None))
        assert python_compiler.evaluate(where, Item("a"))
        assert not python_compiler.evaluate(where, Item("a", price=1.0))

    def test_relational_with_none_is_false(self):
        where = Lambda.of(Item, lambda i: i.attr("price").gt(1))
        assert not python_compiler.evaluate(where, Item("a"))
        assert python_compiler.evaluate(where, Item("a", price=2.0))

    def test_and_short_circuits(self):
        where = Lambda.of(Item, lambda i: i.attr("owner").is_not_null() & i.attr("owner").attr("name").eq("x"))
        assert not python_compiler.evaluate(where, Item("a"))
        assert python_compiler.evaluate(where, Item("a", owner=Owner("x")))

    def test_access_on_none_raises(self):
        where = Lambda.of(Item, lambda i: i.attr("owner").attr("name").eq("x"))
        with pytest.raises(AttributeError):
            python_compiler.evaluate(where, Item("a"))

    def test_string_calls(self):
        e = Parameter("e", Item)
        name = e.attr("name", str)
        contains = Lambda(e, Call(CallMethod.CONTAINS, Call(CallMethod.UPPER, name), Constant("EL")))
        starts = Lambda(e, Call(CallMethod.STARTS_WITH, name, Constant("he")))
        ends = Lambda(e, Call(CallMethod.ENDS_WITH, name, Constant("lo")))
        assert python_compiler.evaluate(contains, Item("hello"))
        assert python_compiler.evaluate(starts, Item("hello"))
        assert python_compiler.evaluate(ends, Item("hello"))
        assert not python_compiler.evaluate(ends, Item("help"))

    def test_string_calls_on_none(self):
        e = Parameter("e", Item)
        upper = Lambda(e, Call(CallMethod.UPPER, e.attr("price")))
        contains = Lambda(e, Call(CallMethod.CONTAINS, e.attr("price"), Constant("1")))
        assert python_compiler.evaluate(upper, Item("a")) is None
        assert python_compiler.evaluate(contains, Item("a")) is False

    def test_conditional_and_default(self):
        e = Parameter("e", Item)
        price = e.attr("price", Optional[float])
        key = Lambda(e, Conditional(price.is_null(), Default(float), price))
        assert python_compiler.evaluate(key, Item("a")) == 0.0
        assert python_compiler.evaluate(key, Item("a", price=3.0)) == 3.0

    def test_invoke_static_lambda(self):
        e = Parameter("e", Item)
        assert python_compiler.evaluate(Lambda(e, Invoke(EXPENSIVE, e)), Item("a", price=150.0))

    def test_invoke_computed_member(self):
        e = Parameter("e", Item)
        where = Lambda(e, Invoke(e.attr("check"), e))
        assert python_compiler.evaluate(where, Item("a", price=500.0, check=EXPENSIVE))

    def test_invoke_non_lambda_raises(self):
        e = Parameter("e", Item)
        where = Lambda(e, Invoke(e.attr("name"), e))
        with pytest.raises(TranslationError):
            python_compiler.evaluate(where, Item("a"))

    def test_to_expr(self):
        where = Lambda.of(Item, lambda i: i.attr("price").gt(1) | i.attr("name").is_null())
        assert python_compiler.to_expr(where) == "lambda e: (e.price > 1 or e.name is None)"


class TestSqlCompiler:
    """Tests for parameterized SQL fragments."""

    def test_comparison(self):
        where = Lambda.of(Item, lambda i: i.attr("price").gte(10) & i.attr("name").ne("x"))
        assert sql_compiler.to_where(where) == ('("price" >= ? AND "name" <> ?)', [10, "x"])

    def test_pyformat(self):
        where = Lambda.of(Item, lambda i: i.attr("price").lt(10) | i.attr("name").eq("x"))
        sql, params = SqlCompiler("pyformat").to_where(where)
        assert sql == '("price" < %(p1)s OR "name" = %(p2)s)'
        assert params == {"p1": 10, "p2": "x"}

    def test_null_comparisons(self):
        e = Parameter("e", Item)
        eq_null = Lambda(e, e.attr("price").eq(Constant(None, parameterized=False)))
        ne_null = Lambda(e, e.attr("price").ne(None))
        assert sql_compiler.to_where(eq_null) == ('"price" IS NULL', [])
        assert sql_compiler.to_where(ne_null) == ('"price" IS NOT NULL', [])

    def test_null_checks_and_negation(self):
        where = Lambda.of(Item, lambda i: ~(i.attr("owner").is_null()))
        assert sql_compiler.to_where(where) == ('NOT ("owner" IS NULL)', [])

    def test_nested_path(self):
        where = Lambda.of(Item, lambda i: i.attr("owner").attr("name").eq("x"))
        assert sql_compiler.to_where(where) == ('"owner"."name" = ?', ["x"])

    def test_string_calls(self):
        e = Parameter("e", Item)
        name = e.attr("name", str)
        upper_a = Call(CallMethod.UPPER, Constant("a"))
        contains = Lambda(e, Call(CallMethod.CONTAINS, Call(CallMethod.UPPER, name), upper_a))
        starts = Lambda(e, Call(CallMethod.STARTS_WITH, name, Constant("a")))
        ends = Lambda(e, Call(CallMethod.ENDS_WITH, name, Constant("a")))
        assert sql_compiler.to_where(contains) == ("UPPER(\"name\") LIKE '%' || UPPER(?) || '%'", ["a"])
        assert sql_compiler.to_where(starts) == ("\"name\" LIKE ? || '%'", ["a"])
        assert sql_compiler.to_where(ends) == ("\"name\" LIKE '%' || ?", ["a"])

    def test_conditional_key(self):
        e = Parameter("e", Item)
        price = e.attr("price", Optional[float])
        key = Lambda(e, Conditional(price.is_null(), Default(Optional[float]), price))
        assert sql_compiler.to_where(key) == ('CASE WHEN "price" IS NULL THEN NULL ELSE "price" END', [])

    def test_static_lambda_is_inlined(self):
        e = Parameter("e", Item)
        where = Lambda(e, Invoke(EXPENSIVE, e.attr("owner")))
        assert sql_compiler.to_where(where) == ('"owner"."price" > ?', [100])

    def test_computed_member_is_not_translatable(self):
        e = Parameter("e", Item)
        with pytest.raises(TranslationError):
            sql_compiler.to_where(Lambda(e, Invoke(e.attr("check"), e)))

    def test_foreign_parameter_is_not_translatable(self):
        where = Lambda(Parameter("e", Item), Parameter("x", Item).attr("name").eq("a"))
        with pytest.raises(TranslationError):
            sql_compiler.to_where(where)

    def test_to_expr_inlines_literals(self):
        where = Lambda.of(Item, lambda i: i.attr("name").eq("it's") & i.attr("price").gt(2))
        assert sql_compiler.to_expr(where) == "(\"name\" = 'it''s' AND \"price\" > 2)"

    def test_invalid_paramstyle(self):
        with pytest.raises(InvalidConfigError):
            SqlCompiler("named")


class TestUtils:
    """Tests for compiler helpers."""

    def test_quote_identifier(self):
        assert quote_identifier("name") == '"name"'
        assert quote_identifier("owner.name") == '"owner"."name"'
        assert quote_identifier('we"ird') == '"we""ird"'

    def test_format_value_sql(self):
        assert format_value_sql(None) == "NULL"
        assert format_value_sql(True) == "TRUE"
        assert format_value_sql(3) == "3"
        assert format_value_sql("a'b") == "'a''b'"
        assert format_value_sql(date(2024, 1, 5)) == "'2024-01-05'"
        assert format_value_sql(Status.OPEN) == "'open'"
        assert format_value_sql([1, "a"]) == "(1, 'a')"

    def test_param_sink(self):
        sink = ParamSink()
        assert sink.add(1) == "?"
        assert sink.add(Status.OPEN) == "?"
        assert sink.params == [1, "open"]

    def test_normalize_lambda(self):
        where = Lambda.of(Item, lambda i: i.attr("name").eq("a"))
        assert normalize_lambda(where) is where
        with pytest.raises(TypeError):
            normalize_lambda(Access(Parameter("e", Item), "name"))
