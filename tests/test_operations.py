"""Test classes OperationRequest and OperationResult."""
from pydantic import ValidationError
import pytest

from infix_postfix.common.operations import OperationRequest, OperationResult


def test_operation_request_valid() -> None:
    """Test that a valid OperationRequest can be created."""
    req = OperationRequest(expression="A + B * C", bindings={"A": 2, "B": 3, "C": 4})
    assert req.expression == "A + B * C"
    assert req.bindings["C"] == 4


def test_operation_request_default_bindings() -> None:
    """Bindings default to an empty mapping."""
    assert OperationRequest(expression="1 + 2").bindings == {}


def test_operation_request_invalid_type() -> None:
    """Test that non-string expressions raise a validation error."""
    with pytest.raises(ValidationError):
        OperationRequest(expression=123)


def test_operation_request_empty_expression() -> None:
    """Blank expressions are rejected."""
    with pytest.raises(ValidationError):
        OperationRequest(expression="   ")


def test_operation_request_invalid_binding_value() -> None:
    """Binding values must be integers."""
    with pytest.raises(ValidationError):
        OperationRequest(expression="A", bindings={"A": "two"})


def test_operation_result_valid() -> None:
    """Test that a valid OperationResult can be created."""
    res = OperationResult(expression="A+B", postfix=["A", "B", "+"], result=5)
    assert res.result == 5
    assert isinstance(res.result, int)
    assert res.postfix_string == "A B +"


def test_operation_result_invalid_result_type() -> None:
    """Test that invalid result type raises a validation error."""
    with pytest.raises(ValidationError):
        OperationResult(expression="A+B", postfix=["A", "B", "+"], result="not an int")
