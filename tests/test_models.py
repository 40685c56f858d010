"""Test classes Keyword, MathGroup and ParsedExpression."""
import operator

from pydantic import ValidationError
import pytest

from expression_mapper.common.models import Keyword, MathGroup, ParsedExpression, TokenKind


def _always_literal(token: str):
    return 1, True


def _never_literal(token: str):
    return 0, False


def _group(literal_parser=_never_literal) -> MathGroup:
    return MathGroup(
        name="test",
        keywords=[
            Keyword(symbol="+", kind=TokenKind.OPERATOR, precedence=1, apply=operator.add),
            Keyword(symbol="**", kind=TokenKind.OPERATOR, precedence=5, apply=operator.pow),
            Keyword(symbol="neg", kind=TokenKind.FUNCTION, apply=operator.neg),
        ],
        literal_parser=literal_parser,
    )


def test_keyword_arity() -> None:
    """Operators take two values, functions one."""
    group = _group()
    assert group.keyword("+").arity == 2
    assert group.keyword("neg").arity == 1
    assert group.keyword("-") is None


@pytest.mark.parametrize("kwargs", [
    {"symbol": "+", "kind": TokenKind.OPERATOR},                       # Missing precedence
    {"symbol": "f", "kind": TokenKind.FUNCTION, "precedence": 2},       # Function with precedence
    {"symbol": "a b", "kind": TokenKind.FUNCTION},                      # Whitespace
    {"symbol": "f(", "kind": TokenKind.FUNCTION},                       # Parenthesis
    {"symbol": "", "kind": TokenKind.FUNCTION},                         # Empty
    {"symbol": "v", "kind": TokenKind.VARIABLE},                        # Not a keyword kind
])
def test_keyword_invalid(kwargs) -> None:
    """Keywords the tokenizer could not produce are rejected at construction."""
    with pytest.raises(ValidationError):
        Keyword(apply=operator.add, **kwargs)


def test_group_rejects_duplicate_symbols() -> None:
    """A symbol can only be registered once."""
    with pytest.raises(ValidationError):
        MathGroup(
            name="dup",
            keywords=[
                Keyword(symbol="+", kind=TokenKind.OPERATOR, precedence=1, apply=operator.add),
                Keyword(symbol="+", kind=TokenKind.OPERATOR, precedence=2, apply=operator.mul),
            ],
            literal_parser=_never_literal,
        )


@pytest.mark.parametrize("token,kind", [
    ("(", TokenKind.LEFT_PAREN),
    (")", TokenKind.RIGHT_PAREN),
    ("+", TokenKind.OPERATOR),
    ("neg", TokenKind.FUNCTION),
    ("x", TokenKind.VARIABLE),
])
def test_classify(token, kind) -> None:
    """Each token string gets exactly one kind."""
    assert _group().classify(token)[0] is kind


def test_classify_keywords_before_literals() -> None:
    """Registered symbols win over the literal parser, which wins over variables."""
    group = _group(literal_parser=_always_literal)
    assert group.classify("**") == (TokenKind.OPERATOR, group.keyword("**"))
    assert group.classify("(") == (TokenKind.LEFT_PAREN, None)
    assert group.classify("anything") == (TokenKind.LITERAL, None)


def test_precedence_functions_outrank_operators() -> None:
    """Functions rank above every operator."""
    group = _group()
    assert group.precedence(group.keyword("+")) == 1
    assert group.precedence(group.keyword("neg")) > group.precedence(group.keyword("**"))


def test_apply_checks_arity() -> None:
    """Apply passes arguments through and refuses the wrong count."""
    group = _group()
    assert group.apply(group.keyword("**"), 2, 10) == 1024
    assert group.apply(group.keyword("neg"), 3) == -3
    with pytest.raises(TypeError):
        group.apply(group.keyword("+"), 1)


def test_views() -> None:
    """Operators and functions are listed separately."""
    group = _group()
    assert [k.symbol for k in group.operators] == ["+", "**"]
    assert [k.symbol for k in group.functions] == ["neg"]


def test_parsed_expression_is_immutable() -> None:
    """A parsed expression cannot be modified once produced."""
    parsed = ParsedExpression(expression="x + 1", variable="x", group="real", postfix=("x", "1", "+"))
    with pytest.raises(ValidationError):
        parsed.postfix = ("x",)
