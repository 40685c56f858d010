"""The real number system (Python floats) with common operators and functions."""
import math
import operator
from typing import Tuple

from pydantic import Field, model_validator

from expression_mapper.common.interval import Interval
from expression_mapper.common.models import Keyword, MathGroup, TokenKind

# Relative slack allowed when comparing an accumulated value against the end bound
DRIFT_TOLERANCE: float = 1e-9


def parse_real(token: str) -> Tuple[float, bool]:
    """
    Parse a real literal.

    Accepts decimal and exponent notations, "inf" and "nan". Digit separators
    ("1_000") are refused: underscores belong to complex literals.

    :param str token: Token string

    :return: Parsed value and True, or (0.0, False) if the token is not a real literal
    :rtype: Tuple[float, bool]
    """
    if "_" in token or token != token.strip():
        return 0.0, False
    try:
        return float(token), True
    except ValueError:
        return 0.0, False


def _operator(symbol: str, precedence: int, fn) -> Keyword:
    return Keyword(symbol=symbol, kind=TokenKind.OPERATOR, precedence=precedence, apply=fn)


def _function(symbol: str, fn) -> Keyword:
    return Keyword(symbol=symbol, kind=TokenKind.FUNCTION, apply=fn)


REAL: MathGroup[float] = MathGroup(
    name="real",
    keywords=[
        _operator("+", 1, operator.add),
        _operator("-", 1, operator.sub),
        _operator("*", 2, operator.mul),
        # Raises ZeroDivisionError on a zero divisor
        _operator("/", 2, operator.truediv),
        _operator("^", 3, math.pow),
        _function("sin", math.sin),
        _function("cos", math.cos),
        _function("tan", math.tan),
        _function("log", math.log),
        _function("exp", math.exp),
        _function("sqrt", math.sqrt),
        _function("abs", math.fabs),
    ],
    literal_parser=parse_real,
)


def steps_resolve(start: float, end: float, step: float) -> bool:
    """
    Determine if adding ``step`` always moves a value lying between ``start`` and ``end``.

    A step smaller than the float spacing at the largest bound would leave
    values unchanged, so the walk would never reach ``end``.
    """
    return start == end or abs(step) >= math.ulp(max(abs(start), abs(end)))


class RealInterval(Interval[float]):
    """
    Evenly spaced reals from ``start`` to ``end``.

    A positive step walks upwards and needs start <= end, a negative step walks
    downwards and needs start >= end.
    """

    start: float = Field(..., description="First value of the interval")
    end: float = Field(..., description="Bound that is never exceeded")
    step: float = Field(..., description="Signed distance between two consecutive values")

    @model_validator(mode="after")
    def check_direction(self) -> "RealInterval":
        """Reject a zero step, a step walking away from ``end`` and a step too small to move."""
        if self.step == 0 or not math.isfinite(self.step):
            raise ValueError("Interval step must be finite and non-zero")
        if not (math.isfinite(self.start) and math.isfinite(self.end)):
            raise ValueError("Interval bounds must be finite")
        if (self.step > 0 and self.start > self.end) or (self.step < 0 and self.start < self.end):
            raise ValueError(f"Step {self.step} does not lead from {self.start} to {self.end}")
        if not steps_resolve(self.start, self.end, self.step):
            raise ValueError(f"Step {self.step} is below the float resolution between {self.start} and {self.end}")
        return self

    def next(self, current: float) -> Tuple[float, bool]:
        if current == self.end:
            return current, True
        following = current + self.step
        tolerance = abs(self.step) * DRIFT_TOLERANCE
        if abs(following - self.end) <= tolerance:
            return self.end, False
        if (self.step > 0 and following > self.end) or (self.step < 0 and following < self.end):
            return current, True
        return following, False
