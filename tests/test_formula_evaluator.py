"""Tests for the restricted expression evaluator."""
import math

import pytest

from formula_evaluator import EvaluationError, FormulaEvaluator


@pytest.fixture
def evaluator():
    return FormulaEvaluator()


def test_precedence(evaluator):
    assert evaluator.evaluate("2+3*4") == 14
    assert evaluator.evaluate("(2+3)*4") == 20
    assert evaluator.evaluate("10-4-3") == 3
    assert evaluator.evaluate("8/4/2") == 1


def test_power_binds_tightest_and_is_right_associative(evaluator):
    assert evaluator.evaluate("2**3**2") == 512
    assert evaluator.evaluate("2^3^2") == 512
    assert evaluator.evaluate("2*3^2") == 18
    assert evaluator.evaluate("-2**2") == -4
    assert evaluator.evaluate("2**-1") == 0.5


def test_unary_minus(evaluator):
    assert evaluator.evaluate("-3+5") == 2
    assert evaluator.evaluate("4*-2") == -8
    assert evaluator.evaluate("--3") == 3


def test_functions(evaluator):
    assert evaluator.evaluate("sqrt(16)") == 4
    assert evaluator.evaluate("abs(-7.5)") == 7.5
    assert evaluator.evaluate("log(1000)") == pytest.approx(3)
    assert evaluator.evaluate("ln(1)") == 0
    assert evaluator.evaluate("sin(0)+cos(0)") == 1
    assert evaluator.evaluate("tan(0)") == 0
    assert evaluator.evaluate("sqrt(sqrt(81))") == 3


def test_constants(evaluator):
    assert evaluator.evaluate("π") == math.pi
    assert evaluator.evaluate("pi") == math.pi
    assert evaluator.evaluate("e") == math.e
    assert evaluator.evaluate("ln(e)") == 1


def test_implicit_multiplication(evaluator):
    assert evaluator.evaluate("2π") == pytest.approx(2 * math.pi)
    assert evaluator.evaluate("3(4)") == 12
    assert evaluator.evaluate("(1+1)(2+2)") == 8
    assert evaluator.evaluate("2sqrt(9)") == 6


def test_exponent_literals(evaluator):
    assert evaluator.evaluate("1e+21") == 1e21
    assert evaluator.evaluate("2.5e-3*2") == pytest.approx(0.005)


@pytest.mark.parametrize(
    "expression",
    [
        "",
        "   ",
        "(2+3",
        "2+3)",
        "2+",
        "*3",
        "sin(",
        "sin 3",
        "foo(2)",
        "2..3",
        "1/0",
        "0/0",
        "sqrt(-1)",
        "log(0)",
        "ln(-2)",
        "10^400",
        "(-8)^(1/3)",
        "2$3",
        "__import__",
    ],
)
def test_malformed_or_non_finite_fails(evaluator, expression):
    with pytest.raises(EvaluationError):
        evaluator.evaluate(expression)


def test_evaluation_error_is_value_error(evaluator):
    with pytest.raises(ValueError):
        evaluator.evaluate("1/0")


def test_uses_scientific_tokens(evaluator):
    assert evaluator.uses_scientific_tokens("sqrt(16)")
    assert evaluator.uses_scientific_tokens("2π")
    assert evaluator.uses_scientific_tokens("e")
    assert evaluator.uses_scientific_tokens("2^3")
    assert not evaluator.uses_scientific_tokens("2+3*4")
    assert not evaluator.uses_scientific_tokens("1e+21")
