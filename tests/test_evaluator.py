"""Test class ExpressionEvaluator."""
import math

import pytest

from expression_mapper.common.errors import (
    DomainEvaluationError,
    MalformedExpression,
    NumericFailure,
    UnknownToken,
)
from expression_mapper.common.evaluator import ExpressionEvaluator
from expression_mapper.common.parser import ExpressionParser
from expression_mapper.groups.real import REAL, RealInterval


@pytest.mark.parametrize("postfix,variable,expected", [
    (["x"], 43.2, 43.2),
    (["x", "4", "-"], 43.2, 39.2),
    (["x", "x", "2", "-", "*", "3", "^"], 4.0, 512.0),
    (["10", "4", "-"], 0.0, 6.0),
    (["8", "2", "/"], 0.0, 4.0),
    (["0", "cos"], 0.0, 1.0),
])
def test_evaluate_once(postfix, variable, expected):
    """evaluate_once computes the value of a postfix expression."""
    assert ExpressionEvaluator.evaluate_once(postfix, variable, REAL) == pytest.approx(expected)


def test_evaluate_once_parsed_expression():
    """A ParsedExpression can be evaluated directly."""
    parsed = ExpressionParser.parse("x * (x - 2) ^ 3", "x", REAL)
    assert ExpressionEvaluator.evaluate_once(parsed, 4.0, REAL) == 32.0


def test_evaluate_once_is_repeatable():
    """Evaluating twice with the same value gives the same result."""
    parsed = ExpressionParser.parse("sin x / 2 - x", "x", REAL)
    first = ExpressionEvaluator.evaluate_once(parsed, 1.5, REAL)
    second = ExpressionEvaluator.evaluate_once(parsed, 1.5, REAL)
    assert first == second


@pytest.mark.parametrize("postfix", [
    ["x", "x"],
    ["+"],
    ["1", "+"],
    ["sin"],
    [],
])
def test_evaluate_once_malformed(postfix):
    """A postfix sequence that does not reduce to one value is rejected."""
    with pytest.raises(MalformedExpression):
        ExpressionEvaluator.evaluate_once(postfix, 1.0, REAL)


def test_evaluate_once_unknown_token():
    """Parentheses have no meaning in postfix order."""
    with pytest.raises(UnknownToken):
        ExpressionEvaluator.evaluate_once(["(", "x"], 1.0, REAL)


@pytest.mark.parametrize("postfix,cause", [
    (["x", "0", "/"], ZeroDivisionError),
    (["0", "log"], ValueError),
    (["0", "1", "-", "sqrt"], ValueError),
])
def test_evaluate_once_numeric_failure(postfix, cause):
    """Failures of the numeric system are reported as NumericFailure."""
    with pytest.raises(NumericFailure) as exc_info:
        ExpressionEvaluator.evaluate_once(postfix, 1.0, REAL)
    assert isinstance(exc_info.value.__cause__, cause)


@pytest.mark.parametrize("literal", ["0", "43.2", "-7.5", "1e3", "2.5e-3"])
def test_evaluate_variable_over_single_point(literal):
    """Evaluating "x" over a single point gives that point back."""
    value, _ = REAL.parse_literal(literal)
    interval = RealInterval(start=value, step=1, end=value)
    assert ExpressionEvaluator.evaluate_over_domain(["x"], interval, REAL) == [value]


def test_evaluate_over_domain():
    """Values are returned in domain order."""
    parsed = ExpressionParser.parse("x ^ 2", "x", REAL)
    interval = RealInterval(start=0, step=1, end=3)
    assert ExpressionEvaluator.evaluate_over_domain(parsed, interval, REAL) == [0.0, 1.0, 4.0, 9.0]


def test_evaluate_over_domain_failure_keeps_partial_results():
    """The first failing point is reported with the values computed before it."""
    parsed = ExpressionParser.parse("1 / x", "x", REAL)
    interval = RealInterval(start=-2, step=1, end=2)
    with pytest.raises(DomainEvaluationError) as exc_info:
        ExpressionEvaluator.evaluate_over_domain(parsed, interval, REAL)
    assert exc_info.value.point == 0.0
    assert exc_info.value.partial_results == [-0.5, -1.0]
    assert isinstance(exc_info.value.__cause__, NumericFailure)


def test_iter_domain_is_lazy():
    """iter_domain only evaluates the points that are consumed."""
    parsed = ExpressionParser.parse("log x", "x", REAL)
    interval = RealInterval(start=1, step=-1, end=-5)
    pairs = ExpressionEvaluator.iter_domain(parsed, interval, REAL)
    assert next(pairs) == (1.0, 0.0)
    with pytest.raises(NumericFailure):
        next(pairs)


def test_evaluate_trigonometry():
    """Functions apply to the whole parenthesised argument."""
    parsed = ExpressionParser.parse("sin(x) ^ 2 + cos(x) ^ 2", "x", REAL)
    interval = RealInterval(start=0, step=0.5, end=3)
    for value in ExpressionEvaluator.evaluate_over_domain(parsed, interval, REAL):
        assert math.isclose(value, 1.0)


def test_evaluate_over_domain_failure_names_error_type():
    """The failing point carries the kind of failure raised there."""
    parsed = ExpressionParser.parse("log x", "x", REAL)
    with pytest.raises(DomainEvaluationError) as exc_info:
        ExpressionEvaluator.evaluate_over_domain(parsed, RealInterval(start=1, step=-1, end=0), REAL)
    assert exc_info.value.error_type == "NumericFailure"
