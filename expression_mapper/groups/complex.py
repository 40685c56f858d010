"""The complex number system (Python complex) with common operators and functions."""
import cmath
import math
import operator
from typing import Tuple

from pydantic import ConfigDict, Field, model_validator

from expression_mapper.common.interval import Interval
from expression_mapper.common.models import Keyword, MathGroup, TokenKind
from expression_mapper.groups.real import DRIFT_TOLERANCE, parse_real, steps_resolve


def parse_complex(token: str) -> Tuple[complex, bool]:
    """
    Parse a complex literal.

    Supported forms:
        - "2_3": real and imaginary parts separated by an underscore (2+3i)
        - "2.5": a real number
        - "i", "3i": a pure imaginary number

    :param str token: Token string

    :return: Parsed value and True, or (0j, False) if the token is not a complex literal
    :rtype: Tuple[complex, bool]
    """
    if "_" in token:
        parts = token.split("_")
        if len(parts) == 2:
            real, real_ok = parse_real(parts[0])
            imag, imag_ok = parse_real(parts[1])
            if real_ok and imag_ok:
                return complex(real, imag), True
        return 0j, False

    value, ok = parse_real(token)
    if ok:
        return complex(value, 0.0), True

    if token == "i":
        return 1j, True
    if token.endswith("i"):
        value, ok = parse_real(token[:-1])
        if ok:
            return complex(0.0, value), True
    return 0j, False


def _modulus(z: complex) -> complex:
    return complex(abs(z), 0.0)


def _operator(symbol: str, precedence: int, fn) -> Keyword:
    return Keyword(symbol=symbol, kind=TokenKind.OPERATOR, precedence=precedence, apply=fn)


def _function(symbol: str, fn) -> Keyword:
    return Keyword(symbol=symbol, kind=TokenKind.FUNCTION, apply=fn)


COMPLEX: MathGroup[complex] = MathGroup(
    name="complex",
    keywords=[
        _operator("+", 1, operator.add),
        _operator("-", 1, operator.sub),
        _operator("*", 2, operator.mul),
        _operator("/", 2, operator.truediv),
        _operator("^", 3, operator.pow),
        _function("sin", cmath.sin),
        _function("cos", cmath.cos),
        _function("tan", cmath.tan),
        # log(0) raises ValueError: the argument is undefined
        _function("log", cmath.log),
        _function("exp", cmath.exp),
        _function("sqrt", cmath.sqrt),
        _function("abs", _modulus),
    ],
    literal_parser=parse_complex,
)


class ComplexInterval(Interval[complex]):
    """
    Grid of complex numbers covering the rectangle from ``start`` to ``end``.

    ``start`` is the bottom left corner and ``end`` the top right corner in the
    Cartesian plane. Points are produced row by row: the real part moves
    fastest, then the imaginary part climbs by one step.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    start: complex = Field(..., description="Bottom left corner")
    end: complex = Field(..., description="Top right corner")
    step: float = Field(..., gt=0, description="Grid spacing along both axes")

    @model_validator(mode="after")
    def check_corners(self) -> "ComplexInterval":
        """Reject corners given in the wrong order and a step too small to move along an axis."""
        if not (cmath.isfinite(self.start) and cmath.isfinite(self.end) and math.isfinite(self.step)):
            raise ValueError("Interval corners and step must be finite")
        if self.start.real > self.end.real or self.start.imag > self.end.imag:
            raise ValueError(f"{self.start} is not the bottom left corner of a rectangle ending at {self.end}")
        if not (
            steps_resolve(self.start.real, self.end.real, self.step)
            and steps_resolve(self.start.imag, self.end.imag, self.step)
        ):
            raise ValueError(f"Step {self.step} is below the float resolution between {self.start} and {self.end}")
        return self

    def next(self, current: complex) -> Tuple[complex, bool]:
        tolerance = self.step * DRIFT_TOLERANCE
        real = current.real + self.step
        if current.real != self.end.real and real <= self.end.real + tolerance:
            return complex(real, current.imag), False

        # Start the next row
        imag = current.imag + self.step
        if current.imag == self.end.imag or imag > self.end.imag + tolerance:
            return current, True
        return complex(self.start.real, imag), False
