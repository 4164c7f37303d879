"""Test outcome models, tokens and result formatting."""
from pydantic import ValidationError
import pytest

from arithmetic_calculator.common.operations import (
    ErrorKind,
    EvaluationFailure,
    EvaluationSuccess,
    HistoryEntry,
    describe,
    format_value,
)
from arithmetic_calculator.common.tokens import NumberToken, OperatorToken


def test_evaluation_success_valid() -> None:
    res = EvaluationSuccess(value=8.0)
    assert res.ok is True
    assert res.value == 8.0


def test_evaluation_failure_valid() -> None:
    res = EvaluationFailure(kind=ErrorKind.DIVISION_BY_ZERO, message="Division by zero")
    assert res.ok is False
    assert res.kind == "DivisionByZero"


def test_evaluation_failure_rejects_unknown_kind() -> None:
    with pytest.raises(ValidationError):
        EvaluationFailure(kind="Overflow", message="?")


def test_outcomes_are_immutable() -> None:
    res = EvaluationSuccess(value=1.0)
    with pytest.raises(ValidationError):
        res.value = 2.0


def test_error_kind_taxonomy_is_closed() -> None:
    assert {kind.value for kind in ErrorKind} == {
        "InvalidNumber",
        "UnexpectedCharacter",
        "MismatchedParentheses",
        "InvalidExpression",
        "DivisionByZero",
        "EvaluationError",
    }


def test_history_entry_accepts_both_outcomes() -> None:
    ok = HistoryEntry(expression="1+1", outcome=EvaluationSuccess(value=2.0))
    bad = HistoryEntry(
        expression="1/0",
        outcome=EvaluationFailure(kind=ErrorKind.DIVISION_BY_ZERO, message="Division by zero"),
    )
    assert ok.outcome.ok and ok.outcome.value == 2.0
    assert not bad.outcome.ok and bad.outcome.kind == ErrorKind.DIVISION_BY_ZERO


def test_history_entry_invalid_expression_type() -> None:
    with pytest.raises(ValidationError):
        HistoryEntry(expression=42, outcome=EvaluationSuccess(value=1.0))


def test_operator_token_rejects_unknown_symbol() -> None:
    with pytest.raises(ValidationError):
        OperatorToken(symbol="^")


def test_number_token_equality() -> None:
    assert NumberToken(value=2) == NumberToken(value=2.0)
    assert NumberToken(value=2) != NumberToken(value=-2)


@pytest.mark.parametrize("value,expected", [
    (2.0, "2"),
    (-6.0, "-6"),
    (0.333333333333, "0.333333333333"),
    (0.3, "0.3"),
    (-2.5, "-2.5"),
    (123456789.123456789, "123456789.12345679"),
    (0.00001, "0.00001"),
    (-0.000000000001, "-0.000000000001"),
])
def test_format_value(value, expected) -> None:
    assert format_value(value) == expected


def test_describe() -> None:
    assert describe(EvaluationSuccess(value=4.0)) == "4"
    failure = EvaluationFailure(kind=ErrorKind.INVALID_NUMBER, message="Invalid number '1.2.3' at position 0")
    assert describe(failure) == "InvalidNumber: Invalid number '1.2.3' at position 0"
