"""Unit tests for WorkerProcess using real Pipe connections."""
from multiprocessing import Pipe

import pytest

from incremental_calculator.server.worker import WorkerProcess


@pytest.mark.parametrize(
    "session,expected",
    [
        ("value 2; binop +; value 3; compute", 5),
        ("value 10; binop -; value 4; binop -; value 1; compute", 5),
        ("value 3; binop *; open; value 1; binop +; value 3; close; compute", 12),
        ("value 64; sqrt", 8),
    ],
)
def test_worker_sends_result_for_valid_session(session: str, expected: int) -> None:
    """Worker sends the final current value through the connection for valid sessions."""
    parent_conn, child_conn = Pipe()
    worker = WorkerProcess(conn=child_conn, session=session, line_number=1)
    worker.run()

    msg = parent_conn.recv()
    assert msg["line"] == 1
    assert msg["session"] == session
    assert msg["result"] == expected
    assert msg["errors"] == []
    assert "error" not in msg


def test_worker_reports_calculator_faults_with_result() -> None:
    """Calculator faults are listed next to the result, not sent as an error."""
    session = "value 1; binop /; value 0; compute; value 7"
    parent_conn, child_conn = Pipe()
    WorkerProcess(conn=child_conn, session=session, line_number=3).run()

    msg = parent_conn.recv()
    assert msg["result"] == 7
    assert len(msg["errors"]) == 1
    assert msg["errors"][0].startswith("compute: DivisionByZeroError")


@pytest.mark.parametrize(
    "session",
    [
        "value",             # Missing operand
        "binop ^",           # Unknown operation
        "value 1; teleport", # Unknown command
    ],
)
def test_worker_sends_error_for_invalid_session(session: str) -> None:
    """Worker sends an error message for malformed session lines."""
    parent_conn, child_conn = Pipe()
    worker = WorkerProcess(conn=child_conn, session=session, line_number=2)
    worker.run()

    msg = parent_conn.recv()
    assert msg["line"] == 2
    assert msg["session"] == session
    assert "error" in msg
    assert isinstance(msg["error"], str)


def test_worker_rejects_empty_session() -> None:
    """Pydantic validation prevents creating WorkerProcess with an empty session."""
    _, child_conn = Pipe()
    with pytest.raises(ValueError):
        WorkerProcess(conn=child_conn, session="  ", line_number=1)


def test_worker_rejects_invalid_line_number() -> None:
    """Line numbers start at 1."""
    _, child_conn = Pipe()
    with pytest.raises(ValueError):
        WorkerProcess(conn=child_conn, session="value 1", line_number=0)
