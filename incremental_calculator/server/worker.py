"""Worker process for running calculator sessions."""
from multiprocessing.connection import Connection
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from incremental_calculator.common.logger import logger
from incremental_calculator.common.models import SessionResult
from incremental_calculator.core.session import CalculatorSession


class WorkerProcess(BaseModel):
    """
    Worker process responsible for running a single calculator session.

    Lifecycle:
        - Spawned by the parent server process
        - Receives one session line only
        - Sends the session result or error through a Pipe
        - Terminates immediately after computation
    """

    # Make the Pydantic instance immutable (read-only) for safety
    # Allow arbitrary types like multiprocessing.Connection
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    conn: Connection = Field(..., description="Connection object for sending results back to server")
    session: str = Field(..., description="Single session line: commands separated by ';'")
    line_number: int = Field(..., ge=1, description="Line number in the input file")

    @field_validator("session")
    def session_must_not_be_empty(cls, v: str) -> str:
        """Ensure that the session is not empty."""
        if not v.strip():
            raise ValueError("Session cannot be empty")
        return v

    def run(self) -> None:
        """
        Run the session in a fresh calculator and send the result or error through the pipe.

        Calculator faults are part of a normal result. Only a malformed session line is an error.

        :return: None
        """
        logger.info(f"👷🏁 Worker started on line {self.line_number}: {self.session}")

        outcome: Union[SessionResult, None] = None

        try:
            outcome = CalculatorSession().run_line(self.session)

            self.conn.send(
                {
                    "line": self.line_number,
                    "session": self.session,
                    "result": outcome.result,
                    "errors": [f"{step.command}: {step.error}" for step in outcome.errors],
                }
            )

        except Exception as exc:
            logger.error(
                f"👷❌ Worker failed on line {self.line_number}: {exc}\n"
                f"Invalid calculator session, could not run: {self.session!r}"
            )

            self.conn.send(
                {
                    "line": self.line_number,
                    "session": self.session,
                    "error": str(exc),
                }
            )

        finally:
            # Always close the connection
            self.conn.close()

            if outcome is not None:
                logger.info(f"👷✅ Worker finished on line {self.line_number}: {outcome.result}")
