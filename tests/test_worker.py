"""Unit tests for WorkerProcess using real Pipe connections."""
from multiprocessing import Pipe

from pydantic import ValidationError
import pytest

from infix_postfix.batch.worker import WorkerProcess, split_line
from infix_postfix.common.errors import InvalidBindings
from infix_postfix.common.operations import OperationRequest


@pytest.mark.parametrize(
    "line,expected_expression,expected_bindings",
    [
        ("A + B ; A=1 B=2", "A + B", {"A": 1, "B": 2}),
        ("3 * 4", "3 * 4", {}),
        ("X^2;X 5", "X^2", {"X": 5}),
    ],
)
def test_split_line(line: str, expected_expression: str, expected_bindings: dict) -> None:
    """split_line builds a request from the expression and its bindings."""
    request = split_line(line)
    assert isinstance(request, OperationRequest)
    assert request.expression == expected_expression
    assert request.bindings == expected_bindings


@pytest.mark.parametrize("line", ["; A=1", "   ;"])
def test_split_line_blank_expression(line: str) -> None:
    """A line without an expression is rejected by the request model."""
    with pytest.raises(ValidationError):
        split_line(line)


def test_split_line_invalid_bindings() -> None:
    """Malformed bindings are reported before any worker runs."""
    with pytest.raises(InvalidBindings):
        split_line("A ; A=x")


@pytest.mark.parametrize(
    "line,postfix,expected",
    [
        ("2 + 3", "2 3 +", 5),
        ("A * (B - C) ; A=3 B=10 C=4", "A B C - *", 18),
        ("A % B ; A=17 B=5", "A B %", 2),
        ("2 ^ 3 ^ 2", "2 3 ^ 2 ^", 64),
    ],
)
def test_worker_sends_result_for_valid_request(line: str, postfix: str, expected: int) -> None:
    """Worker sends postfix form and result through the connection for valid requests."""
    parent_conn, child_conn = Pipe()
    worker = WorkerProcess(conn=child_conn, request=split_line(line), line_number=1)
    worker.run()

    msg = parent_conn.recv()
    assert msg["line"] == 1
    assert msg["expression"] == line.partition(";")[0].strip()
    assert msg["postfix"] == postfix
    assert msg["result"] == expected
    assert "error" not in msg


@pytest.mark.parametrize(
    "expression,bindings,fragment",
    [
        ("A + B", {"A": 1}, "Undefined variable: B"),
        ("A / B", {"A": 1, "B": 0}, "Division by zero"),
        ("A + )", {}, "Invalid expression"),
        ("2 +", {}, "Not enough operands"),
        ("A ^ B", {"A": 10, "B": 10**9}, "Power too large"),
    ],
)
def test_worker_sends_error_for_invalid_request(expression: str, bindings: dict, fragment: str) -> None:
    """Worker sends an error message for requests that cannot be evaluated."""
    parent_conn, child_conn = Pipe()
    request = OperationRequest(expression=expression, bindings=bindings)
    worker = WorkerProcess(conn=child_conn, request=request, line_number=2)
    worker.run()

    msg = parent_conn.recv()
    assert msg["line"] == 2
    assert msg["expression"] == expression
    assert "result" not in msg
    assert fragment in msg["error"]


def test_worker_rejects_invalid_line_number() -> None:
    """Line numbers start at 1."""
    _, child_conn = Pipe()
    with pytest.raises(ValueError):
        WorkerProcess(conn=child_conn, request=OperationRequest(expression="1 + 1"), line_number=0)
