"""Pre-conversion checks on raw infix expressions."""
import string

# Characters allowed besides ASCII letters and digits
OPERATOR_CHARS: str = "+-*/%^()"
ALLOWED_CHARS: frozenset = frozenset(string.ascii_letters + string.digits + OPERATOR_CHARS + " ")


def has_valid_characters(expr: str) -> bool:
    """
    Check that every character is alphanumeric, an operator, a parenthesis or a space.

    :param str expr: Raw infix expression

    :return: True if no illegal character is present
    :rtype: bool
    """
    return all(c in ALLOWED_CHARS for c in expr)


def has_balanced_parentheses(expr: str) -> bool:
    """
    Check that parentheses are balanced.

    A ')' without a matching '(' before it, or any '(' left open at the end,
    makes the expression unbalanced.

    :param str expr: Raw infix expression

    :return: True if parentheses balance
    :rtype: bool
    """
    depth = 0
    for c in expr:
        if c == "(":
            depth += 1
        elif c == ")":
            if depth == 0:
                return False
            depth -= 1
    return depth == 0


def is_valid(expr: str) -> bool:
    """
    Validate an infix expression before conversion.

    Operator arity and operand adjacency are not checked here.

    :param str expr: Raw infix expression

    :return: True if the expression may be converted
    :rtype: bool
    """
    return has_valid_characters(expr) and has_balanced_parentheses(expr)
