"""Evaluate postfix expressions at one point or over a whole domain."""
from typing import Any, Iterator, List, Sequence, Tuple, Union

from expression_mapper.common.errors import (
    DomainEvaluationError,
    ExpressionError,
    MalformedExpression,
    NumericFailure,
    UnknownToken,
)
from expression_mapper.common.interval import Interval
from expression_mapper.common.logger import logger
from expression_mapper.common.models import MathGroup, ParsedExpression, TokenKind

Postfix = Union[ParsedExpression, Sequence[str]]


def _postfix_tokens(expression: Postfix) -> Sequence[str]:
    if isinstance(expression, ParsedExpression):
        return expression.postfix
    return expression


class ExpressionEvaluator:
    """
    Evaluate postfix expressions with a value stack.

    Evaluation holds no state between calls: the same postfix expression can be
    evaluated at any number of points, concurrently or not.
    """

    @staticmethod
    def evaluate_once(expression: Postfix, value: Any, group: MathGroup) -> Any:
        """
        Evaluate a postfix expression for one value of the free variable.

        :param Postfix expression: Parsed expression or tokens in postfix order
        :param value: Value substituted to every variable token
        :param MathGroup group: Numeric system the expression was parsed for

        :return: Computed value
        :raises MalformedExpression: If the tokens do not reduce to exactly one value
        :raises UnknownToken: If a token has no meaning in postfix order
        :raises NumericFailure: If an operator or function of the numeric system fails
        """
        stack: List[Any] = []

        for token in _postfix_tokens(expression):
            kind, keyword = group.classify(token)

            if kind is TokenKind.LITERAL:
                literal, _ = group.parse_literal(token)
                stack.append(literal)
            elif kind is TokenKind.VARIABLE:
                stack.append(value)
            elif kind in (TokenKind.OPERATOR, TokenKind.FUNCTION):
                if len(stack) < keyword.arity:
                    raise MalformedExpression(f"Not enough operands for {token!r}")
                # First pop is the right-hand operand
                args = stack[-keyword.arity:]
                del stack[-keyword.arity:]
                try:
                    stack.append(group.apply(keyword, *args))
                except (ArithmeticError, ValueError) as exc:
                    raise NumericFailure(token, exc) from exc
            else:
                raise UnknownToken(token)

        if len(stack) != 1:
            raise MalformedExpression(f"Expression is invalid: {len(stack)} values left after evaluation")
        return stack[0]

    @staticmethod
    def iter_domain(expression: Postfix, interval: Interval, group: MathGroup) -> Iterator[Tuple[Any, Any]]:
        """
        Lazily evaluate an expression at each point of an interval.

        :return: Single-pass iterator of (point, value) pairs in domain order
        :rtype: Iterator[Tuple[Any, Any]]
        :raises ExpressionError: As raised by :meth:`evaluate_once`, when the failing point is reached
        """
        for point in interval.points():
            yield point, ExpressionEvaluator.evaluate_once(expression, point, group)

    @staticmethod
    def evaluate_over_domain(expression: Postfix, interval: Interval, group: MathGroup) -> List[Any]:
        """
        Evaluate an expression at every point of an interval.

        :param Postfix expression: Parsed expression or tokens in postfix order
        :param Interval interval: Domain of the free variable
        :param MathGroup group: Numeric system the expression was parsed for

        :return: One value per point, in domain order
        :rtype: List[Any]
        :raises DomainEvaluationError: On the first failing point, with the results computed so far
        """
        results: List[Any] = []
        for point in interval.points():
            try:
                results.append(ExpressionEvaluator.evaluate_once(expression, point, group))
            except ExpressionError as exc:
                logger.error(f"📉❌ Evaluation failed at {point!r} after {len(results)} point(s): {exc}")
                raise DomainEvaluationError(
                    point, results, f"Evaluation failed at {point!r}: {exc}", error_type=type(exc).__name__
                ) from exc

        logger.debug(f"📈 Evaluated {len(results)} point(s) in {group.name!r}")
        return results
