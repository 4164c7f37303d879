"""Worker process for evaluating arithmetic expressions."""
from multiprocessing.connection import Connection

from pydantic import BaseModel, ConfigDict, Field, field_validator

from arithmetic_calculator.common.logger import logger
from arithmetic_calculator.common.operations import Outcome
from arithmetic_calculator.common.parser import ExpressionParser


class WorkerProcess(BaseModel):
    """
    Worker process responsible for evaluating a single arithmetic expression.

    Lifecycle:
        - Spawned by the batch runner
        - Receives one expression only
        - Sends the outcome through a Pipe
        - Terminates immediately after computation
    """

    # Make the Pydantic instance immutable (read-only) for safety
    # Allow arbitrary types like multiprocessing.Connection
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    conn: Connection = Field(..., description="Connection object for sending results back to the runner")
    expression: str = Field(..., description="Single arithmetic expression to evaluate")
    line_number: int = Field(..., ge=1, description="Line number in the input file")

    @field_validator("expression")
    def expression_must_not_be_empty(cls, v: str) -> str:
        """Blank lines are filtered before a worker is spawned."""
        if not v.strip():
            raise ValueError("Expression cannot be empty")
        return v

    def run(self) -> None:
        """
        Evaluate the arithmetic expression and send the outcome through the pipe.

        The payload is a dict with "line" and "expression" plus the outcome
        fields: "ok" and "value", or "ok", "kind" and "message".

        :return: None
        """
        logger.info(f"👷🏁 Worker started on line {self.line_number}: {self.expression}")

        try:
            outcome: Outcome = ExpressionParser.evaluate(self.expression)
            self.conn.send(
                {
                    "line": self.line_number,
                    "expression": self.expression,
                    **outcome.model_dump(),
                }
            )
        finally:
            # Always close the connection
            self.conn.close()

        if outcome.ok:
            logger.info(f"👷✅ Worker finished on line {self.line_number}: {outcome.value}")
        else:
            logger.error(
                f"👷❌ Worker failed on line {self.line_number}: {outcome.kind.value}: {outcome.message}\n"
                f"Invalid arithmetic expression, could not evaluate: {self.expression!r}"
            )
