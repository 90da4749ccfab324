"""Pydantic models for calculator session results."""
import re
from typing import List, Optional

from pydantic import BaseModel, Field


class StepResult(BaseModel):
    """Outcome of one command of a session."""

    command: str = Field(..., description="Command as written in the session")
    current: int = Field(..., description="Current value after the command")
    error: Optional[str] = Field(default=None, description="Fault raised by the command, if any")

    @property
    def failed(self) -> bool:
        return self.error is not None


class SessionResult(BaseModel):
    """Outcome of a whole session: every step and the final current value."""

    session: str = Field(..., description="Original session line")
    result: int = Field(..., description="Current value once every command was issued")
    steps: List[StepResult] = Field(default_factory=list, description="One entry per command, in order")

    @property
    def errors(self) -> List[StepResult]:
        return [step for step in self.steps if step.failed]


class SessionReply(BaseModel):
    """
    One line of the server's results file, read back as a record.

    Lines look like ``<session> = <result>``, optionally followed by
    `` [faults: <step>; <step>]``, or ``<session> -> ERROR: <message>``
    when the session could not be parsed.
    """

    session: str = Field(..., description="Session line as sent")
    result: Optional[int] = Field(default=None, description="Final current value, None if the session was rejected")
    faults: List[str] = Field(default_factory=list, description="Steps that raised a calculator fault")
    error: Optional[str] = Field(default=None, description="Why the session was rejected")

    @property
    def rejected(self) -> bool:
        return self.error is not None

    def to_line(self) -> str:
        """
        Render the reply as a results-file line.

        :return: The line, without a trailing newline
        :rtype: str
        """
        if self.rejected:
            return f"{self.session} -> ERROR: {self.error}"
        line = f"{self.session} = {self.result}"
        if self.faults:
            line += f" [faults: {'; '.join(self.faults)}]"
        return line

    @classmethod
    def from_line(cls, line: str) -> "SessionReply":
        """
        Parse a results-file line.

        :param str line: Line written by the server

        :return: The reply it describes
        :rtype: SessionReply
        :raises ValueError: If the line matches neither form
        """
        match = _ERROR_LINE.match(line)
        if match:
            return cls(session=match["session"], error=match["error"])
        match = _RESULT_LINE.match(line)
        if not match:
            raise ValueError(f"Not a session reply: {line!r}")
        faults = match["faults"].split("; ") if match["faults"] else []
        return cls(session=match["session"], result=int(match["result"]), faults=faults)


_ERROR_LINE = re.compile(r"^(?P<session>.*?) -> ERROR: (?P<error>.*)$")
_RESULT_LINE = re.compile(r"^(?P<session>.*?) = (?P<result>-?\d+)(?: \[faults: (?P<faults>.*)\])?$")
