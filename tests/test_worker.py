"""Unit tests for WorkerProcess using real Pipe connections."""
from multiprocessing import Pipe

import pytest

from arithmetic_calculator.batch.worker import WorkerProcess
from arithmetic_calculator.common.operations import ErrorKind


@pytest.mark.parametrize(
    "expr,expected",
    [
        ("2 + 3", 5.0),
        ("10 - 4", 6.0),
        ("3 * 4", 12.0),
        ("8 / 2", 4.0),
        ("7 % 4", 3.0),
    ],
)
def test_worker_sends_result_for_valid_expression(expr: str, expected: float) -> None:
    """Worker sends computed result through the connection for valid expressions."""
    parent_conn, child_conn = Pipe()
    worker = WorkerProcess(conn=child_conn, expression=expr, line_number=1)
    worker.run()

    msg = parent_conn.recv()
    assert msg["line"] == 1
    assert msg["expression"] == expr
    assert msg["ok"] is True
    assert msg["value"] == expected
    assert "kind" not in msg


@pytest.mark.parametrize(
    "expr,kind",
    [
        ("2 +", ErrorKind.INVALID_EXPRESSION),
        ("(1 + 2", ErrorKind.MISMATCHED_PARENTHESES),
        ("4 / 0", ErrorKind.DIVISION_BY_ZERO),
        ("1.2.3", ErrorKind.INVALID_NUMBER),
    ],
)
def test_worker_sends_error_for_invalid_expression(expr: str, kind: ErrorKind) -> None:
    """Worker sends the failure kind and message for malformed expressions."""
    parent_conn, child_conn = Pipe()
    worker = WorkerProcess(conn=child_conn, expression=expr, line_number=2)
    worker.run()

    msg = parent_conn.recv()
    assert msg["line"] == 2
    assert msg["expression"] == expr
    assert msg["ok"] is False
    assert msg["kind"] == kind
    assert isinstance(msg["message"], str)


def test_worker_closes_connection() -> None:
    _, child_conn = Pipe()
    WorkerProcess(conn=child_conn, expression="1+1", line_number=1).run()
    assert child_conn.closed


def test_worker_rejects_empty_expression() -> None:
    """Pydantic validation prevents creating WorkerProcess with empty expression."""
    _, child_conn = Pipe()
    with pytest.raises(ValueError):
        WorkerProcess(conn=child_conn, expression="  ", line_number=1)


def test_worker_rejects_invalid_line_number() -> None:
    _, child_conn = Pipe()
    with pytest.raises(ValueError):
        WorkerProcess(conn=child_conn, expression="1+1", line_number=0)
