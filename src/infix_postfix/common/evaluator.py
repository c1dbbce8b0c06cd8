"""Evaluate postfix token lists against integer variable bindings."""
from collections.abc import Callable as ABCCallable
import operator
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from infix_postfix.common.errors import (
    DivisionByZero,
    ExponentTooLarge,
    MalformedExpression,
    NegativeExponent,
    UndefinedVariable,
)
from infix_postfix.common.logger import logger
from infix_postfix.common.operations import OperationResult
from infix_postfix.common.parser import ExpressionParser


# Type alias for operator functions (taking two ints, returning an int)
OperatorFn: ABCCallable[[int, int], int] = Callable[[int, int], int]


def _truncating_div(a: int, b: int) -> int:
    if b == 0:
        raise DivisionByZero("/")
    quotient = abs(a) // abs(b)
    return -quotient if (a < 0) != (b < 0) else quotient


def _truncating_mod(a: int, b: int) -> int:
    # Sign follows the dividend so that a == (a / b) * b + a % b
    if b == 0:
        raise DivisionByZero("%")
    return a - b * _truncating_div(a, b)


# Largest power result, in bits
MAX_POWER_BITS: int = 1 << 16


def _power(a: int, b: int) -> int:
    if b < 0:
        raise NegativeExponent(b)
    # |a| >= 2**(bit_length - 1), so this underestimates the result size
    if abs(a) > 1 and (abs(a).bit_length() - 1) * b > MAX_POWER_BITS:
        raise ExponentTooLarge(a, b)
    return operator.pow(a, b)


# Mapping of operator symbols to integer functions
OPERATORS: Dict[str, OperatorFn] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": _truncating_div,
    "%": _truncating_mod,
    "^": _power,
}


class PostfixEvaluator:
    """
    Evaluate postfix expressions with a stack machine.

    Operands are resolved through the caller's bindings. A bound name always
    wins; an unbound operand made only of digits stands for its literal value;
    any other unbound operand is an error, never a silent zero.
    """

    @staticmethod
    def resolve(token: str, bindings: Mapping[str, int]) -> int:
        """
        Resolve an operand token to its integer value.

        :param str token: Operand token
        :param Mapping[str, int] bindings: Variable name to value

        :return: Bound value, or the literal value of a digit-only token
        :rtype: int
        :raises UndefinedVariable: If the token is neither bound nor a literal
        """
        if token in bindings:
            return bindings[token]
        if token.isascii() and token.isdigit():
            return int(token)
        raise UndefinedVariable(token)

    @staticmethod
    def evaluate(postfix: Sequence[str], bindings: Optional[Mapping[str, int]] = None) -> int:
        """
        Evaluate a postfix token list.

        For each operator, 'b' is popped first and 'a' second, and 'a OP b' is pushed.

        :param Sequence[str] postfix: Tokens in postfix order
        :param Mapping[str, int] bindings: Variable name to value, never modified

        :return: Integer result
        :rtype: int
        :raises UndefinedVariable: If an operand has no value
        :raises DivisionByZero: If the divisor of '/' or '%' is zero
        :raises NegativeExponent: If the exponent of '^' is negative
        :raises ExponentTooLarge: If the result of '^' would exceed MAX_POWER_BITS bits
        :raises MalformedExpression: On stack underflow, stray tokens, or leftover values
        """
        if bindings is None:
            bindings = {}

        stack: List[int] = []
        for token in postfix:
            if token in OPERATORS:
                if len(stack) < 2:
                    raise MalformedExpression(f"Not enough operands for '{token}'")
                b = stack.pop()
                a = stack.pop()
                stack.append(OPERATORS[token](a, b))
            elif token and token.isascii() and token.isalnum():
                stack.append(PostfixEvaluator.resolve(token, bindings))
            else:
                raise MalformedExpression(f"Unexpected token: {token!r}")

        if len(stack) != 1:
            raise MalformedExpression(f"Expected one final value, found {len(stack)}")

        return stack[0]

    @staticmethod
    def evaluate_expression(expr: str, bindings: Optional[Mapping[str, int]] = None) -> OperationResult:
        """
        Convert an infix expression to postfix and evaluate it.

        :param str expr: Infix expression
        :param Mapping[str, int] bindings: Variable name to value

        :return: Expression, postfix tokens and result
        :rtype: OperationResult
        :raises ExpressionError: If conversion or evaluation fails
        """
        postfix = ExpressionParser.to_postfix(expr)
        result = PostfixEvaluator.evaluate(postfix, bindings)
        logger.debug("Evaluated %r to %d", expr, result)
        return OperationResult(expression=expr, postfix=postfix, result=result)
