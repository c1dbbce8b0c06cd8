"""Convert infix expressions to postfix (Reverse Polish) notation."""
from typing import Dict, List, Sequence

from infix_postfix.common.errors import InvalidExpression
from infix_postfix.common.logger import logger
from infix_postfix.common.validator import is_valid


# Operator precedence, parentheses and unknown symbols rank 0
PRECEDENCE: Dict[str, int] = {
    "+": 1,
    "-": 1,
    "*": 2,
    "/": 2,
    "%": 2,
    "^": 3,
}


def _is_operand_char(c: str) -> bool:
    # str.isalnum() accepts non-ASCII letters, the validator does not
    return c.isascii() and c.isalnum()


class ExpressionParser:
    """
    Convert infix arithmetic expressions into postfix token lists.

    Algorithm:
        1. Validate characters and parentheses
        2. Tokenize, coalescing alphanumeric runs into single operands
        3. Reorder tokens with the Shunting-yard algorithm

    Operators of equal precedence are popped before the incoming one, so every
    operator is left-associative, '^' included: "A^B^C" becomes "A B ^ C ^"
    rather than the conventional "A B C ^ ^".

    Examples:
        - Infix expression: A + B * C
        - Postfix expression: A B C * +
    """

    @staticmethod
    def precedence(op: str) -> int:
        """
        Return the precedence of an operator.

        :param str op: Operator symbol

        :return: 1 for '+' and '-', 2 for '*', '/' and '%', 3 for '^', else 0
        :rtype: int
        """
        return PRECEDENCE.get(op, 0)

    @staticmethod
    def tokenize(expr: str) -> List[str]:
        """
        Split an infix expression into operand and operator tokens.

        Operands are maximal runs of alphanumeric characters ("AB14" is one
        token). Spaces separate tokens and are otherwise dropped.

        :param str expr: Infix expression

        :return: List of tokens in input order
        :rtype: List[str]
        """
        tokens: List[str] = []
        i = 0
        while i < len(expr):
            c = expr[i]
            if _is_operand_char(c):
                start = i
                while i + 1 < len(expr) and _is_operand_char(expr[i + 1]):
                    i += 1
                tokens.append(expr[start:i + 1])
            elif not c.isspace():
                tokens.append(c)
            i += 1
        return tokens

    @staticmethod
    def to_postfix(expr: str) -> List[str]:
        """
        Convert an infix expression into a list of tokens in postfix order.

        :param str expr: Infix expression

        :return: Postfix tokens, without parentheses
        :rtype: List[str]
        :raises InvalidExpression: If the expression has an illegal character or unbalanced parentheses
        """
        if not is_valid(expr):
            raise InvalidExpression(expr)

        output: List[str] = []
        stack: List[str] = []

        for token in ExpressionParser.tokenize(expr):
            if _is_operand_char(token[0]):
                output.append(token)
            elif token == "(":
                stack.append(token)
            elif token == ")":
                # A matching '(' is guaranteed by validation
                while stack[-1] != "(":
                    output.append(stack.pop())
                stack.pop()
            else:
                prec = ExpressionParser.precedence(token)
                while stack and ExpressionParser.precedence(stack[-1]) >= prec:
                    output.append(stack.pop())
                stack.append(token)

        # Remaining operators, stack top first
        output.extend(reversed(stack))
        logger.debug("Converted %r to postfix %r", expr, output)
        return output

    @staticmethod
    def format_postfix(tokens: Sequence[str]) -> str:
        """
        Render postfix tokens as a space-separated string.

        :param Sequence[str] tokens: Postfix tokens

        :return: Tokens joined by single spaces
        :rtype: str
        """
        return " ".join(tokens)
