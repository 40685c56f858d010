"""Numeric systems available by name."""
from typing import Dict, List, Type

from expression_mapper.common.interval import Interval
from expression_mapper.common.models import MathGroup
from expression_mapper.groups.complex import COMPLEX, ComplexInterval
from expression_mapper.groups.real import REAL, RealInterval, parse_real

GROUPS: Dict[str, MathGroup] = {
    REAL.name: REAL,
    COMPLEX.name: COMPLEX,
}

INTERVALS: Dict[str, Type[Interval]] = {
    REAL.name: RealInterval,
    COMPLEX.name: ComplexInterval,
}


def available_groups() -> List[str]:
    """Return the names of the registered numeric systems."""
    return sorted(GROUPS)


def get_group(name: str) -> MathGroup:
    """
    Look up a numeric system by name.

    :param str name: Registry name, e.g. "real"

    :return: The registered numeric system
    :rtype: MathGroup
    :raises ValueError: If no numeric system has this name
    """
    try:
        return GROUPS[name]
    except KeyError:
        raise ValueError(f"Unknown numeric system {name!r}, expected one of {available_groups()}") from None


def build_interval(name: str, start: str, step: str, end: str) -> Interval:
    """
    Build an interval of a numeric system from the text of its bounds.

    Bounds are parsed with the literal parser of the numeric system, the step
    is always a real number.

    :param str name: Registry name of the numeric system
    :param str start: First value, as a literal
    :param str step: Distance between two values
    :param str end: Last value, as a literal

    :return: Interval of the numeric system
    :rtype: Interval
    :raises ValueError: If a bound or the step cannot be parsed, or the interval is degenerate
    """
    group = get_group(name)
    bounds = []
    for text in (start, end):
        value, ok = group.parse_literal(text)
        if not ok:
            raise ValueError(f"{text!r} is not a valid {name} value")
        bounds.append(value)

    step_value, ok = parse_real(step)
    if not ok:
        raise ValueError(f"{step!r} is not a valid step")

    return INTERVALS[name](start=bounds[0], step=step_value, end=bounds[1])


def is_registered(group: MathGroup) -> bool:
    """Return True if ``group`` is the very object registered under its name."""
    return GROUPS.get(group.name) is group
