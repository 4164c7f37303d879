"""Test class CalculatorSession."""
import pytest

from arithmetic_calculator.common.operations import ErrorKind
from arithmetic_calculator.session import session as session_module
from arithmetic_calculator.session.session import CalculatorSession, normalize


def test_append_builds_expression() -> None:
    session = CalculatorSession()
    for key in ["1", "2", "+", "3"]:
        session.append(key)
    assert session.expression == "12+3"


def test_append_normalizes_display_glyphs() -> None:
    session = CalculatorSession()
    session.append("6×2÷3−1")
    assert session.expression == "6*2/3-1"


def test_normalize_leaves_canonical_text_alone() -> None:
    assert normalize("1+2*3") == "1+2*3"


def test_backspace_and_clear() -> None:
    session = CalculatorSession(expression="12+")
    assert session.backspace() == "12"
    session.clear()
    assert session.expression == ""
    # Backspace on an empty expression is harmless
    assert session.backspace() == ""


def test_submit_success_records_history_and_shows_result() -> None:
    session = CalculatorSession()
    session.append("2+3*4")
    outcome = session.submit()

    assert outcome.ok and outcome.value == 14
    assert session.expression == "14"
    assert len(session.history) == 1
    assert session.history[0].expression == "2+3*4"
    assert session.history[0].outcome == outcome


def test_submit_failure_keeps_expression_for_correction() -> None:
    session = CalculatorSession(expression="1/0")
    outcome = session.submit()

    assert not outcome.ok
    assert outcome.kind == ErrorKind.DIVISION_BY_ZERO
    assert session.expression == "1/0"
    assert session.history[0].outcome.kind == ErrorKind.DIVISION_BY_ZERO


def test_history_is_most_recent_first_without_deduplication() -> None:
    session = CalculatorSession()
    for expr in ["1+1", "2*3", "1+1"]:
        session.expression = expr
        session.submit()

    assert [entry.expression for entry in session.history] == ["1+1", "2*3", "1+1"][::-1]
    assert [entry.outcome.value for entry in session.history] == [2, 6, 2]


def test_result_can_be_reused_in_next_expression() -> None:
    session = CalculatorSession(expression="1/4")
    session.submit()
    session.append("*2")
    assert session.submit().value == 0.5


def test_long_result_is_shown_without_float_noise() -> None:
    session = CalculatorSession(expression="123456789.123456789*1")
    session.submit()
    assert session.expression == "123456789.12345679"
    # The displayed text evaluates back to the same value
    assert session.submit().value == 123456789.12345679


def test_overflow_is_reported_not_shown() -> None:
    big = "9" * 200
    session = CalculatorSession(expression=f"{big}*{big}")
    outcome = session.submit()
    assert outcome.kind == ErrorKind.EVALUATION_ERROR
    assert session.expression == f"{big}*{big}"


@pytest.mark.parametrize("blank", ["", "   "])
def test_submit_blank_expression_never_reaches_evaluator(monkeypatch, blank) -> None:
    """Blank input is filtered here, before the evaluator is called."""
    calls = []
    monkeypatch.setattr(session_module, "evaluate", lambda expr: calls.append(expr))

    session = CalculatorSession(expression=blank)
    assert session.submit() is None
    assert calls == []
    assert session.history == []


def test_clear_history() -> None:
    session = CalculatorSession(expression="1+1")
    session.submit()
    session.clear_history()
    assert session.history == []


def test_sessions_do_not_share_history() -> None:
    first = CalculatorSession(expression="1+1")
    first.submit()
    assert CalculatorSession().history == []
