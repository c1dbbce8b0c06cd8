"""Pydantic models for expression evaluation requests and results."""
from typing import Dict, List

from pydantic import BaseModel, Field, field_validator


class OperationRequest(BaseModel):
    """Represents a single infix expression to convert and evaluate."""

    expression: str = Field(..., description="Infix arithmetic expression as a string")
    bindings: Dict[str, int] = Field(default_factory=dict, description="Variable name to integer value")

    @field_validator("expression")
    def expression_must_not_be_empty(cls, v: str) -> str:
        """Ensure that the expression is not blank."""
        if not v.strip():
            raise ValueError("Expression cannot be empty")
        return v


class OperationResult(BaseModel):
    """Represents the postfix form and value of an evaluated expression."""

    expression: str = Field(..., description="Original infix expression")
    postfix: List[str] = Field(..., description="Expression tokens in postfix order")
    result: int = Field(..., description="Evaluated integer result of the expression")

    @property
    def postfix_string(self) -> str:
        """Postfix tokens separated by single spaces."""
        return " ".join(self.postfix)
