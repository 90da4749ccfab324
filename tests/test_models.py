"""Test classes StepResult and SessionResult."""
from pydantic import ValidationError
import pytest

from incremental_calculator.common.models import SessionReply, SessionResult, StepResult


def test_step_result_valid() -> None:
    """A StepResult without error has not failed."""
    step = StepResult(command="value 2", current=2)
    assert step.error is None
    assert not step.failed


def test_step_result_failed() -> None:
    """A StepResult with an error has failed."""
    step = StepResult(command="close", current=2, error="EmptyScopeError: nothing to close")
    assert step.failed


def test_step_result_invalid_current_type() -> None:
    """Non-integer current values raise a validation error."""
    with pytest.raises(ValidationError):
        StepResult(command="value 2", current="two")


def test_session_result_errors() -> None:
    """errors lists only the failed steps."""
    ok = StepResult(command="value 1", current=1)
    bad = StepResult(command="value 2", current=1, error="InvalidStateError: value() is not allowed while ready")
    result = SessionResult(session="value 1; value 2", result=1, steps=[ok, bad])
    assert result.errors == [bad]


def test_session_result_invalid_session_type() -> None:
    """Invalid session type raises a validation error."""
    with pytest.raises(ValidationError):
        SessionResult(session=42, result=0)


@pytest.mark.parametrize("line,expected", [
    ("value 4; sqrt = 2", SessionReply(session="value 4; sqrt", result=2)),
    ("binop -; value 9; compute = -9", SessionReply(session="binop -; value 9; compute", result=-9)),
    (
        "value 1; value 2 = 1 [faults: value 2: InvalidStateError: value() is not allowed while ready]",
        SessionReply(
            session="value 1; value 2",
            result=1,
            faults=["value 2: InvalidStateError: value() is not allowed while ready"],
        ),
    ),
    (
        "value 1; close; close = 1 [faults: close: EmptyScopeError: a; close: EmptyScopeError: b]",
        SessionReply(
            session="value 1; close; close",
            result=1,
            faults=["close: EmptyScopeError: a", "close: EmptyScopeError: b"],
        ),
    ),
    ("fly -> ERROR: Unknown command: 'fly'", SessionReply(session="fly", error="Unknown command: 'fly'")),
])
def test_session_reply_from_line(line: str, expected: SessionReply) -> None:
    """from_line reads both result forms, and to_line writes them back unchanged."""
    reply = SessionReply.from_line(line)
    assert reply == expected
    assert reply.to_line() == line


@pytest.mark.parametrize("line", ["", "value 1", "value 1 = one", "value 1 => 1"])
def test_session_reply_from_line_invalid(line: str) -> None:
    """Lines in neither form raise ValueError."""
    with pytest.raises(ValueError):
        SessionReply.from_line(line)


def test_session_reply_rejected() -> None:
    """Only replies carrying an error are rejected."""
    assert SessionReply(session="x", error="bad").rejected
    assert not SessionReply(session="value 1", result=1).rejected
