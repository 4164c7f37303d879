"""Pydantic models for evaluation outcomes and history entries."""
from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from arithmetic_calculator.common.config import RESULT_DECIMALS


class ErrorKind(str, Enum):
    """Closed set of reasons an evaluation can fail."""

    INVALID_NUMBER = "InvalidNumber"
    UNEXPECTED_CHARACTER = "UnexpectedCharacter"
    MISMATCHED_PARENTHESES = "MismatchedParentheses"
    INVALID_EXPRESSION = "InvalidExpression"
    DIVISION_BY_ZERO = "DivisionByZero"
    EVALUATION_ERROR = "EvaluationError"


class EvaluationSuccess(BaseModel):
    """Represents a successfully evaluated expression."""

    model_config = ConfigDict(frozen=True)

    ok: Literal[True] = True
    value: float = Field(..., description="Evaluated numeric result")


class EvaluationFailure(BaseModel):
    """Represents an expression that could not be evaluated."""

    model_config = ConfigDict(frozen=True)

    ok: Literal[False] = False
    kind: ErrorKind = Field(..., description="Failure category")
    message: str = Field(..., description="Human readable explanation")


Outcome = Union[EvaluationSuccess, EvaluationFailure]


class HistoryEntry(BaseModel):
    """An expression as typed by the user, paired with its outcome."""

    model_config = ConfigDict(frozen=True)

    expression: str = Field(..., description="Original expression text")
    outcome: Outcome = Field(..., description="Result or failure of the evaluation")


def format_value(value: float) -> str:
    """
    Render a result for display.

    Integer-valued results drop the fractional part ("2", not "2.0"). Other
    values use their shortest repr, or fixed-point notation where repr would
    use an exponent, so the text can be typed back in.

    :param float value: Evaluated result

    :return: Display string
    :rtype: str
    """
    if float(value).is_integer():
        return str(int(value))
    text = repr(value)
    if "e" in text:
        # Only small magnitudes get here; results carry at most RESULT_DECIMALS digits
        text = f"{value:.{RESULT_DECIMALS}f}".rstrip("0").rstrip(".")
    return text


def describe(outcome: Outcome) -> str:
    """Render an outcome the way the CLI and batch output show it."""
    if outcome.ok:
        return format_value(outcome.value)
    return f"{outcome.kind.value}: {outcome.message}"
