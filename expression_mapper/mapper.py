"""Parse an expression once and map it over a domain of a numeric system."""
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from expression_mapper.common.evaluator import ExpressionEvaluator
from expression_mapper.common.interval import Interval
from expression_mapper.common.logger import logger
from expression_mapper.common.models import MathGroup, ParsedExpression
from expression_mapper.common.parser import ExpressionParser
from expression_mapper.sampler.config import SamplerConfig
from expression_mapper.sampler.pool import ParallelSampler


class ExpressionMapper(BaseModel):
    """
    Evaluate expressions of one free variable within a numeric system.

    Example:
        >>> mapper = ExpressionMapper(group=REAL, variable="x")
        >>> mapper.map_values("x - 4", RealInterval(start=43.2, step=1, end=43.2))
        [39.2]
    """

    model_config = ConfigDict(frozen=True)

    group: MathGroup = Field(..., description="Numeric system expressions are written in")
    variable: str = Field(default="x", description="Name of the free variable")
    config: SamplerConfig = Field(
        default_factory=lambda: SamplerConfig(max_workers=1), description="Domain sampling configuration"
    )

    @field_validator("variable")
    def variable_must_not_be_empty(cls, v: str) -> str:
        """Ensure that the variable name is not empty."""
        if not v.strip():
            raise ValueError("Variable name cannot be empty")
        return v

    def parse(self, expression: str) -> ParsedExpression:
        """Parse an expression written in terms of the mapper variable."""
        return ExpressionParser.parse(expression, self.variable, self.group)

    def map_values(self, expression: str, interval: Interval) -> List[Any]:
        """
        Parse an expression and evaluate it at every point of an interval.

        :param str expression: Infix expression
        :param Interval interval: Domain of the free variable

        :return: One value per point, in domain order
        :rtype: List[Any]
        :raises ExpressionError: If parsing fails, or evaluation fails at some point
        """
        parsed: ParsedExpression = self.parse(expression)
        logger.info(f"🗺️ Mapping {expression!r} over {self.group.name!r}")

        if self.config.max_workers == 1:
            return ExpressionEvaluator.evaluate_over_domain(parsed, interval, self.group)
        return ParallelSampler(config=self.config).evaluate_over_domain(parsed, interval, self.group)
