"""Parse infix expressions of one free variable into reusable postfix expressions."""
from typing import List, Optional, Sequence, Tuple

from expression_mapper.common.errors import (
    EmptyExpression,
    InvalidToken,
    LocallyInvalidExpression,
    UnbalancedParentheses,
    UnknownVariable,
)
from expression_mapper.common.logger import logger
from expression_mapper.common.models import (
    LEFT_PAREN,
    RIGHT_PAREN,
    MathGroup,
    ParsedExpression,
    StackEntry,
    TokenKind,
)

# Tokens that can close an expression (or a parenthesised sub-expression)
ENDABLE_KINDS: Tuple[TokenKind, ...] = (TokenKind.LITERAL, TokenKind.VARIABLE, TokenKind.RIGHT_PAREN)
# Tokens allowed right after an endable token
FOLLOWER_KINDS: Tuple[TokenKind, ...] = (TokenKind.OPERATOR, TokenKind.RIGHT_PAREN)


class ExpressionParser:
    """
    Parse infix expressions written for a given numeric system.

    Algorithm:
        1. Tokenize on whitespace, parentheses and single-character operators
        2. Check that every variable token is the declared free variable
        3. Check that each token may follow its neighbour
        4. Convert to Reverse Polish Notation (RPN) using Shunting-yard

    The postfix result is computed once and evaluated as many times as needed,
    one evaluation per point of a domain.

    Examples:
        - Infix expression: sin ( x ) + 4 * x ^ 2
        - Corresponding Reverse Polish Notation (RPN): x sin 4 x 2 ^ * +

    """

    @staticmethod
    def _is_boundary(char: str, group: Optional[MathGroup]) -> bool:
        """
        Determine if a character always forms a token of its own.

        :param str char: Single character
        :param MathGroup group: Numeric system whose operator symbols split tokens

        :return: True for parentheses and single-character operator symbols
        :rtype: bool
        """
        if char in (LEFT_PAREN, RIGHT_PAREN):
            return True
        if group is None:
            return False
        keyword = group.keyword(char)
        return keyword is not None and keyword.kind is TokenKind.OPERATOR

    @staticmethod
    def tokenize(expr: str, group: Optional[MathGroup] = None) -> List[str]:
        """
        Split an expression into tokens.

        Whitespace separates tokens and is discarded. Parentheses, and operators
        of ``group`` written with a single character, always form their own token.
        Every other run of characters is one token, so "sin(x)" gives
        ["sin", "(", "x", ")"] while "sinx" stays a single token.

        :param str expr: Expression as a string
        :param MathGroup group: Numeric system, or None to split on whitespace and parentheses only

        :return: List of tokens, never containing empty strings
        :rtype: List[str]
        """
        tokens: List[str] = []
        current: List[str] = []

        for char in expr:
            if not char.isspace() and not ExpressionParser._is_boundary(char, group):
                current.append(char)
                continue
            # Any separator terminates the token being accumulated
            if current:
                tokens.append("".join(current))
                current = []
            if not char.isspace():
                tokens.append(char)

        if current:
            tokens.append("".join(current))
        return tokens

    @staticmethod
    def is_locally_valid(tokens: Sequence[str], group: MathGroup) -> Tuple[bool, int]:
        """
        Verify that each token may follow the previous one.

        An endable token (literal, variable, right parenthesis) must be followed
        by an operator or a right parenthesis; any other token must not be.
        Parentheses balance is not checked here.

        :param Sequence[str] tokens: Infix tokens
        :param MathGroup group: Numeric system used to classify the tokens

        :return: Validity, and the offset (over the concatenated tokens) where validity stops
        :rtype: Tuple[bool, int]
        """
        offset = 0
        if not tokens:
            return True, offset

        prev_kind, _ = group.classify(tokens[0])
        if len(tokens) == 1:
            return prev_kind in (TokenKind.LITERAL, TokenKind.VARIABLE), offset
        if prev_kind in FOLLOWER_KINDS:
            return False, offset
        offset += len(tokens[0])

        for token in tokens[1:]:
            kind, _ = group.classify(token)
            prev_is_endable = prev_kind in ENDABLE_KINDS
            current_follows = kind in FOLLOWER_KINDS
            if prev_is_endable != current_follows:
                return False, offset
            offset += len(token)
            prev_kind = kind

        if prev_kind not in ENDABLE_KINDS:
            # Point at the dangling last token
            return False, offset - len(tokens[-1])
        return True, offset

    @staticmethod
    def check_variables(tokens: Sequence[str], variable: str, group: MathGroup) -> None:
        """
        Ensure every variable token is the declared free variable.

        :raises UnknownVariable: On the first token classified as another variable
        """
        for token in tokens:
            kind, _ = group.classify(token)
            if kind is TokenKind.VARIABLE and token != variable:
                raise UnknownVariable(token, variable)

    @staticmethod
    def to_postfix(tokens: Sequence[str], group: MathGroup) -> List[str]:
        """
        Convert infix tokens into Reverse Polish Notation (RPN) using the Shunting-yard algorithm.

        Operators of equal precedence are left-associative: "a - b - c" gives
        ["a", "b", "-", "c", "-"]. Functions outrank every operator.

        :param Sequence[str] tokens: Locally valid infix tokens
        :param MathGroup group: Numeric system used to classify the tokens

        :return: List of tokens in RPN order
        :rtype: List[str]
        :raises UnbalancedParentheses: If a parenthesis is left unmatched
        """
        output: List[str] = []
        stack: List[StackEntry] = []

        for token in tokens:
            kind, keyword = group.classify(token)

            if kind in (TokenKind.LITERAL, TokenKind.VARIABLE):
                # Operands are added directly to the output
                output.append(token)
            elif kind is TokenKind.OPERATOR:
                # Pop stacked keywords with higher or equal precedence
                precedence = group.precedence(keyword)
                while (
                    stack
                    and stack[-1].kind is not TokenKind.LEFT_PAREN
                    and group.precedence(stack[-1].keyword) >= precedence
                ):
                    output.append(stack.pop().token)
                stack.append(StackEntry(kind=kind, token=token, keyword=keyword))
            elif kind is TokenKind.RIGHT_PAREN:
                while stack and stack[-1].kind is not TokenKind.LEFT_PAREN:
                    output.append(stack.pop().token)
                if not stack:
                    raise UnbalancedParentheses()
                # Discard the matching left parenthesis
                stack.pop()
            else:
                # Functions and left parentheses wait on the stack
                stack.append(StackEntry(kind=kind, token=token, keyword=keyword))

        # Append remaining keywords, stack top first
        while stack:
            entry = stack.pop()
            if entry.kind is TokenKind.LEFT_PAREN:
                raise UnbalancedParentheses()
            output.append(entry.token)
        return output

    @staticmethod
    def _caret_position(expr: str, offset: int) -> int:
        """
        Map an offset counted over non-whitespace characters onto the raw expression.

        :param str expr: Raw expression
        :param int offset: Number of non-whitespace characters before the caret

        :return: Index in ``expr`` under which the caret is drawn
        :rtype: int
        """
        count = 0
        for index, char in enumerate(expr):
            if char.isspace():
                continue
            if count == offset:
                return index
            count += 1
        return len(expr.rstrip())

    @staticmethod
    def parse(expr: str, variable: str, group: MathGroup) -> ParsedExpression:
        """
        Parse an expression of one free variable for a numeric system.

        :param str expr: Infix expression
        :param str variable: Name of the free variable
        :param MathGroup group: Numeric system the expression is written in

        :return: Postfix expression reusable across evaluations
        :rtype: ParsedExpression
        :raises ExpressionError: If the expression or the variable name is invalid
        """
        tokens: List[str] = ExpressionParser.tokenize(expr, group)
        if not tokens:
            raise EmptyExpression("Empty expression")

        variable_tokens = ExpressionParser.tokenize(variable, group)
        if variable_tokens != [variable] or group.classify(variable)[0] is not TokenKind.VARIABLE:
            raise InvalidToken(variable, f"cannot be used as a variable name in {group.name!r}")

        ExpressionParser.check_variables(tokens, variable, group)

        valid, offset = ExpressionParser.is_locally_valid(tokens, group)
        if not valid:
            raise LocallyInvalidExpression(expr, ExpressionParser._caret_position(expr, offset))

        postfix: List[str] = ExpressionParser.to_postfix(tokens, group)
        logger.debug(f"🧮 Parsed {expr!r} in {group.name!r}: {' '.join(postfix)}")

        return ParsedExpression(expression=expr, variable=variable, group=group.name, postfix=tuple(postfix))
