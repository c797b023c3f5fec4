import math
from dataclasses import dataclass

import pytest

from accessgate.expression import Expression, ExpressionError
from accessgate.model.function import load_function_map

BASIC_MATCHER = "r_sub == p_sub && r_obj == p_obj && r_act == p_act"


@dataclass
class User:
    name: str
    age: int


@pytest.mark.parametrize(
    "request_values, expected",
    [
        (("alice", "data1", "read"), True),
        (("alice", "data1", "write"), False),
        (("bob", "data1", "read"), False),
    ],
)
def test_basic_matcher(request_values, expected):
    sub, obj, act = request_values
    params = {
        "r_sub": sub, "r_obj": obj, "r_act": act,
        "p_sub": "alice", "p_obj": "data1", "p_act": "read",
    }
    assert Expression(BASIC_MATCHER).evaluate(params) is expected


def test_expression_is_reusable():
    expression = Expression("r_sub == p_sub")
    assert expression.evaluate({"r_sub": "a", "p_sub": "a"}) is True
    assert expression.evaluate({"r_sub": "a", "p_sub": "b"}) is False
    assert expression.evaluate({"r_sub": "a", "p_sub": "a"}) is True


def test_and_binds_tighter_than_or():
    assert Expression("true || false && false").evaluate() is True
    assert Expression("(true || false) && false").evaluate() is False


def test_arithmetic_precedence():
    assert Expression("1 + 2 * 3").evaluate() == 7.0


def test_in_operator():
    expression = Expression("r_obj in ('data2', 'data3')")
    assert expression.evaluate({"r_obj": "data2"}) is True
    assert expression.evaluate({"r_obj": "data1"}) is False


def test_in_requires_array():
    with pytest.raises(ExpressionError, match="not an array"):
        Expression("r_obj in 'data2'").evaluate({"r_obj": "data2"})


def test_key_match_function():
    expression = Expression("keyMatch(r_obj, p_obj)", load_function_map())
    assert expression.evaluate({"r_obj": "/alice_data/resource1", "p_obj": "/alice_data/*"}) is True
    assert expression.evaluate({"r_obj": "/bob_data/resource1", "p_obj": "/alice_data/*"}) is False


def test_custom_function_is_called_with_values():
    calls = []

    def g(name1, name2):
        calls.append((name1, name2))
        return name1 == "alice" and name2 == "admin"

    expression = Expression("g(r_sub, p_sub)", {"g": g})
    assert expression.evaluate({"r_sub": "alice", "p_sub": "admin"}) is True
    assert calls == [("alice", "admin")]


def test_function_failure_becomes_expression_error():
    expression = Expression("keyMatch(r_obj, p_obj)", load_function_map())
    with pytest.raises(ExpressionError, match="keyMatch"):
        expression.evaluate({"r_obj": 3, "p_obj": "/a"})


def test_missing_parameter():
    with pytest.raises(ExpressionError, match="No parameter 'r_x' found."):
        Expression("r_x == 'a'").evaluate({})


def test_undefined_function():
    with pytest.raises(ExpressionError, match="Undefined function nope"):
        Expression("nope(r_sub)")


@pytest.mark.parametrize(
    "text",
    ["r_sub ==", "(r_sub", "r_sub $ p_sub", "", "r_sub p_sub", "'unterminated", "f(a"],
)
def test_syntax_errors(text):
    with pytest.raises(ExpressionError):
        Expression(text, {"f": lambda *a: True})


def test_logical_operator_requires_bool():
    with pytest.raises(ExpressionError, match="logical operator"):
        Expression("r_sub && true").evaluate({"r_sub": "alice"})


def test_short_circuit_skips_right_side():
    assert Expression("false && r_missing").evaluate({}) is False
    assert Expression("true || r_missing").evaluate({}) is True


def test_ordering_of_mixed_types_fails():
    with pytest.raises(ExpressionError, match="comparator"):
        Expression("'a' < 1").evaluate()


def test_numeric_comparison_with_int_parameter():
    expression = Expression("r_age > 18")
    assert expression.evaluate({"r_age": 20}) is True
    assert expression.evaluate({"r_age": 10}) is False


def test_regex_operators():
    assert Expression("r_act =~ 'GET|POST'").evaluate({"r_act": "GET"}) is True
    assert Expression("r_act =~ 'GET|POST'").evaluate({"r_act": "DELETE"}) is False
    assert Expression("r_act !~ 'GET|POST'").evaluate({"r_act": "DELETE"}) is True


def test_not_operator():
    expression = Expression("!(r_sub == 'bob')")
    assert expression.evaluate({"r_sub": "alice"}) is True
    assert expression.evaluate({"r_sub": "bob"}) is False


def test_ternary():
    expression = Expression("r_sub == 'alice' ? 'yes' : 'no'")
    assert expression.evaluate({"r_sub": "alice"}) == "yes"
    assert expression.evaluate({"r_sub": "bob"}) == "no"
    assert Expression("r_sub == 'alice' ? 'yes'").evaluate({"r_sub": "bob"}) is None


def test_null_coalescing():
    expression = Expression("r_value ?? 'fallback'")
    assert expression.evaluate({"r_value": None}) == "fallback"
    assert expression.evaluate({"r_value": "set"}) == "set"


def test_attribute_accessor():
    expression = Expression("r_sub.name == 'alice' && r_sub.age >= 18")
    assert expression.evaluate({"r_sub": User("alice", 30)}) is True
    assert expression.evaluate({"r_sub": User("alice", 12)}) is False


def test_mapping_accessor_and_missing_field():
    assert Expression("r_sub.name").evaluate({"r_sub": {"name": "alice"}}) == "alice"
    with pytest.raises(ExpressionError, match="No field 'name'"):
        Expression("r_sub.name").evaluate({"r_sub": {}})


def test_method_call():
    expression = Expression("r_sub.startswith('al')")
    assert expression.evaluate({"r_sub": "alice"}) is True
    assert expression.evaluate({"r_sub": "bob"}) is False


def test_string_escapes_and_quotes():
    assert Expression(r"'it\'s' == r_x").evaluate({"r_x": "it's"}) is True
    assert Expression('"double" == r_x').evaluate({"r_x": "double"}) is True


def test_string_concatenation():
    assert Expression("r_a + r_b").evaluate({"r_a": "foo", "r_b": "bar"}) == "foo" + "bar"


def test_bool_is_not_equal_to_number():
    assert Expression("true == 1").evaluate() is False


def test_hex_literal():
    assert Expression("0x10 == 16").evaluate() is True


def test_bracketed_parameter_name():
    assert Expression("[r sub] == 'alice'").evaluate({"r sub": "alice"}) is True


def test_unary_minus_and_bare_value():
    assert Expression("-r_n").evaluate({"r_n": 5}) == -5
    assert Expression("r_n").evaluate({"r_n": 5}) == 5


def test_division_by_zero_is_infinite():
    assert Expression("1 / 0").evaluate() == math.inf


def test_subtraction_requires_numbers():
    with pytest.raises(ExpressionError, match="modifier"):
        Expression("r_a - 1").evaluate({"r_a": "x"})