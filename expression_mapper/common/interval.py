"""Finite domains over which a parsed expression is evaluated."""
from abc import ABC, abstractmethod
from typing import Any, Generic, Iterator, Tuple, TypeVar

from pydantic import BaseModel, ConfigDict, Field

V = TypeVar("V")


class Interval(BaseModel, ABC, Generic[V]):
    """
    A finite, ordered sequence of values of a numeric system.

    Subclasses reject degenerate configurations (zero step, start and end in
    the wrong order) when they are built, never while iterating, and implement
    a pure successor function that reaches exhaustion in finitely many steps.
    """

    # Bounds never change once the interval is built
    model_config = ConfigDict(frozen=True)

    start: Any = Field(..., description="First value of the interval")
    end: Any = Field(..., description="Last value the interval may reach")
    step: Any = Field(..., description="Distance between two consecutive values")

    def first(self) -> V:
        """Return the first value of the interval."""
        return self.start

    @abstractmethod
    def next(self, current: V) -> Tuple[V, bool]:
        """
        Return the value following ``current``.

        :param current: A value previously produced by this interval

        :return: The next value, and True when the interval is exhausted (the value is then meaningless)
        :rtype: Tuple[V, bool]
        """

    def points(self) -> Iterator[V]:
        """
        Iterate over every value of the interval, in order.

        :return: Single-pass iterator over the interval
        :rtype: Iterator[V]
        """
        current: V = self.first()
        while True:
            yield current
            current, exhausted = self.next(current)
            if exhausted:
                return
