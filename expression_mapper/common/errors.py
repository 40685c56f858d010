"""Failures raised while parsing and evaluating expressions."""
from typing import Any, List, Optional


class ExpressionError(ValueError):
    """Base class of every recoverable parsing or evaluation failure."""


class EmptyExpression(ExpressionError):
    """The expression contains no token at all."""


class InvalidToken(ExpressionError):
    """A token cannot be placed where the grammar requires one."""

    def __init__(self, token: str, reason: str = "is not a valid token") -> None:
        self.token = token
        super().__init__(f"Token {token!r} {reason}")


class UnknownVariable(ExpressionError):
    """A variable token does not match the declared free variable."""

    def __init__(self, token: str, variable: str) -> None:
        self.token = token
        self.variable = variable
        super().__init__(f"Token {token!r} is not recognized (expected variable {variable!r})")


class LocallyInvalidExpression(ExpressionError):
    """
    Two adjacent tokens cannot follow each other.

    The message reproduces the expression with a caret under the position
    where it stopped being valid.
    """

    def __init__(self, expression: str, offset: int) -> None:
        self.expression = expression
        self.offset = offset
        super().__init__(f"Expression is not valid\n{expression}\n{' ' * offset}^")


class UnbalancedParentheses(ExpressionError):
    """Parenthesis nesting does not close correctly."""

    def __init__(self, message: str = "Expression has unmatched parentheses") -> None:
        super().__init__(message)


class MalformedExpression(ExpressionError):
    """The postfix evaluation did not end with exactly one value."""


class UnknownToken(ExpressionError):
    """A postfix token has no meaning during evaluation."""

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"Invalid token {token!r} in postfix expression")


class NumericFailure(ExpressionError):
    """An operator or function of the numeric system failed (division by zero, log of zero...)."""

    def __init__(self, token: str, cause: BaseException) -> None:
        self.token = token
        super().__init__(f"Applying {token!r} failed: {cause}")


class DomainEvaluationError(ExpressionError):
    """
    Evaluation failed at one point of the domain.

    Carries the point that triggered the failure and every result computed
    before it, in domain order.
    """

    def __init__(
        self,
        point: Any,
        partial_results: List[Any],
        message: Optional[str] = None,
        error_type: Optional[str] = None,
    ) -> None:
        self.point = point
        self.partial_results = partial_results
        # Name of the failure raised at that point, e.g. "NumericFailure"
        self.error_type = error_type
        super().__init__(message or f"Evaluation failed at {point!r}")
