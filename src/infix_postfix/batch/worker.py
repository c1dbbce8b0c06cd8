"""Worker process for converting and evaluating one expression request."""
from multiprocessing.connection import Connection

from pydantic import BaseModel, ConfigDict, Field

from infix_postfix.common.bindings import parse_bindings
from infix_postfix.common.errors import ExpressionError
from infix_postfix.common.evaluator import PostfixEvaluator
from infix_postfix.common.logger import logger
from infix_postfix.common.operations import OperationRequest


# Separates the expression from its bindings on a batch line
BINDINGS_SEPARATOR: str = ";"


def split_line(line: str) -> OperationRequest:
    """
    Build a request from a batch line.

    Example: "A + B * C ; A=2 B=3 C=4"

    :param str line: Batch input line

    :return: Expression and bindings of the line
    :rtype: OperationRequest
    :raises InvalidBindings: If the bindings part is malformed
    :raises pydantic.ValidationError: If the expression part is blank
    """
    expression, _, bindings_text = line.partition(BINDINGS_SEPARATOR)
    return OperationRequest(expression=expression.strip(), bindings=parse_bindings(bindings_text))


class WorkerProcess(BaseModel):
    """
    Worker process responsible for evaluating a single request.

    Lifecycle:
        - Spawned by the batch runner
        - Receives one request only
        - Sends the postfix form and result, or an error, through a Pipe
        - Terminates immediately after computation
    """

    # Make the Pydantic instance immutable (read-only)
    # Allow arbitrary types like multiprocessing.Connection
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    conn: Connection = Field(..., description="Connection object for sending results back to the runner")
    request: OperationRequest = Field(..., description="Expression and bindings to evaluate")
    line_number: int = Field(..., ge=1, description="Line number in the input file")

    def run(self) -> None:
        """
        Evaluate the request and send the result or error through the pipe.

        :return: None
        """
        expression = self.request.expression
        logger.info(f"👷🏁 Worker started on line {self.line_number}: {expression}")

        finished = False

        try:
            outcome = PostfixEvaluator.evaluate_expression(expression, self.request.bindings)

            self.conn.send(
                {
                    "line": self.line_number,
                    "expression": expression,
                    "postfix": outcome.postfix_string,
                    "result": outcome.result,
                }
            )
            finished = True

        except ExpressionError as exc:
            logger.error(
                f"👷❌ Worker failed on line {self.line_number}: {exc}\n"
                f"Could not evaluate: {expression!r}"
            )

            self.conn.send(
                {
                    "line": self.line_number,
                    "expression": expression,
                    "error": str(exc),
                }
            )

        finally:
            # Always close the connection
            self.conn.close()

            if finished:
                logger.info(f"👷✅ Worker finished on line {self.line_number}")
