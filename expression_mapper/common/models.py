"""Pydantic models describing numeric systems, tokens and parsed expressions."""
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator

# Value type of a numeric system (float for the reals, complex for the complexes...)
V = TypeVar("V")

LEFT_PAREN: str = "("
RIGHT_PAREN: str = ")"


class TokenKind(str, Enum):
    """Every token string classifies to exactly one of these kinds."""

    LITERAL = "literal"
    VARIABLE = "variable"
    LEFT_PAREN = "left_paren"
    RIGHT_PAREN = "right_paren"
    OPERATOR = "operator"
    FUNCTION = "function"


class Keyword(BaseModel):
    """
    An operator (two operands) or a function (one argument) of a numeric system.

    Operators carry a precedence rank, higher binding tighter. Functions carry
    none: they always outrank every operator.
    """

    model_config = ConfigDict(frozen=True)

    symbol: str = Field(..., min_length=1, description="Text of the keyword as written in expressions")
    kind: TokenKind = Field(..., description="OPERATOR or FUNCTION")
    apply: Callable[..., Any] = Field(..., description="Semantics of the keyword")
    precedence: Optional[int] = Field(default=None, description="Rank of an operator")

    @model_validator(mode="after")
    def check_keyword(self) -> "Keyword":
        """Reject symbols the tokenizer could never produce and inconsistent precedence."""
        if self.kind not in (TokenKind.OPERATOR, TokenKind.FUNCTION):
            raise ValueError(f"Keyword {self.symbol!r} must be an operator or a function, not {self.kind.value}")
        if any(c.isspace() or c in (LEFT_PAREN, RIGHT_PAREN) for c in self.symbol):
            raise ValueError(f"Keyword {self.symbol!r} cannot contain whitespace or parentheses")
        if self.kind is TokenKind.OPERATOR and self.precedence is None:
            raise ValueError(f"Operator {self.symbol!r} needs a precedence")
        if self.kind is TokenKind.FUNCTION and self.precedence is not None:
            raise ValueError(f"Function {self.symbol!r} cannot have a precedence")
        return self

    @property
    def arity(self) -> int:
        """Number of values consumed by :attr:`apply`."""
        return 2 if self.kind is TokenKind.OPERATOR else 1


class MathGroup(BaseModel, Generic[V]):
    """
    A numeric system: its keywords, their precedence and the parser of its literals.

    Instances are immutable once built and can be shared between evaluations.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Registry name of the numeric system")
    keywords: List[Keyword] = Field(..., description="Operators and functions of the system")
    literal_parser: Callable[[str], Tuple[V, bool]] = Field(
        ..., description="Parse a literal, returning (value, success)"
    )

    _by_symbol: Dict[str, Keyword] = PrivateAttr(default_factory=dict)
    _function_rank: int = PrivateAttr(default=1)

    @model_validator(mode="after")
    def check_unique_symbols(self) -> "MathGroup":
        """Each symbol must be registered once."""
        seen = set()
        for keyword in self.keywords:
            if keyword.symbol in seen:
                raise ValueError(f"Symbol {keyword.symbol!r} is registered twice in {self.name!r}")
            seen.add(keyword.symbol)
        return self

    def model_post_init(self, __context: Any) -> None:
        self._by_symbol = {keyword.symbol: keyword for keyword in self.keywords}
        ranks = [keyword.precedence for keyword in self.operators]
        self._function_rank = max(ranks, default=0) + 1

    @property
    def operators(self) -> Tuple[Keyword, ...]:
        return tuple(k for k in self.keywords if k.kind is TokenKind.OPERATOR)

    @property
    def functions(self) -> Tuple[Keyword, ...]:
        return tuple(k for k in self.keywords if k.kind is TokenKind.FUNCTION)

    def keyword(self, symbol: str) -> Optional[Keyword]:
        """Return the keyword registered under ``symbol``, if any."""
        return self._by_symbol.get(symbol)

    def precedence(self, keyword: Keyword) -> int:
        """
        Rank of a keyword when deciding what leaves the operator stack.

        :param Keyword keyword: Operator or function of this group

        :return: Operator precedence, or a rank above every operator for functions
        :rtype: int
        """
        if keyword.kind is TokenKind.FUNCTION:
            return self._function_rank
        return keyword.precedence

    def parse_literal(self, token: str) -> Tuple[V, bool]:
        return self.literal_parser(token)

    def classify(self, token: str) -> Tuple[TokenKind, Optional[Keyword]]:
        """
        Classify a token string.

        First match wins: parentheses, then registered keywords, then literals.
        Anything else is a variable.

        :param str token: Non-empty token string

        :return: Kind of the token and its keyword for operators and functions
        :rtype: Tuple[TokenKind, Optional[Keyword]]
        """
        if token == LEFT_PAREN:
            return TokenKind.LEFT_PAREN, None
        if token == RIGHT_PAREN:
            return TokenKind.RIGHT_PAREN, None

        keyword = self._by_symbol.get(token)
        if keyword is not None:
            return keyword.kind, keyword

        _, is_literal = self.literal_parser(token)
        if is_literal:
            return TokenKind.LITERAL, None

        return TokenKind.VARIABLE, None

    def apply(self, keyword: Keyword, *args: V) -> V:
        """
        Apply an operator to two values or a function to one.

        :raises TypeError: If the number of arguments does not match the keyword arity
        """
        if len(args) != keyword.arity:
            raise TypeError(f"{keyword.symbol!r} takes {keyword.arity} argument(s), got {len(args)}")
        return keyword.apply(*args)


class ParsedExpression(BaseModel):
    """An expression converted to postfix order, ready to be evaluated many times."""

    model_config = ConfigDict(frozen=True)

    expression: str = Field(..., description="Original infix expression")
    variable: str = Field(..., description="Name of the free variable")
    group: str = Field(..., description="Name of the numeric system it was parsed for")
    postfix: Tuple[str, ...] = Field(..., description="Tokens in postfix (Reverse Polish) order")


class StackEntry(BaseModel):
    """Entry of the operator stack used while converting to postfix."""

    model_config = ConfigDict(frozen=True)

    kind: TokenKind = Field(..., description="OPERATOR, FUNCTION or LEFT_PAREN")
    token: str = Field(..., description="Token text, emitted as is to the output")
    keyword: Optional[Keyword] = Field(default=None, description="Keyword of operators and functions")
