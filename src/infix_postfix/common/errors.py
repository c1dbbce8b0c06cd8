"""Errors raised while validating, converting and evaluating expressions."""


class ExpressionError(ValueError):
    """Base class for every recoverable expression error."""


class InvalidExpression(ExpressionError):
    """Illegal character or unbalanced parentheses in an infix expression."""

    def __init__(self, expression: str) -> None:
        self.expression = expression
        super().__init__(f"Invalid expression: {expression!r}")


class UndefinedVariable(ExpressionError):
    """An operand has no value in the supplied bindings."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Undefined variable: {name}")


class DivisionByZero(ExpressionError):
    """Divisor of '/' or '%' is zero."""

    def __init__(self, operator: str = "/") -> None:
        self.operator = operator
        super().__init__(f"Division by zero in '{operator}'")


class NegativeExponent(ExpressionError):
    """Exponent of '^' is negative."""

    def __init__(self, exponent: int) -> None:
        self.exponent = exponent
        super().__init__(f"Negative exponent is not supported: {exponent}")


class ExponentTooLarge(ExpressionError):
    """Result of '^' would exceed the supported size."""

    def __init__(self, base: int, exponent: int) -> None:
        self.base = base
        self.exponent = exponent
        super().__init__(f"Power too large: {base} ^ {exponent}")


class MalformedExpression(ExpressionError):
    """Postfix sequence does not reduce to exactly one value."""


class InvalidBindings(ExpressionError):
    """Variable binding text cannot be parsed."""
