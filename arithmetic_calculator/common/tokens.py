"""Token types produced by the tokenizer."""
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field


OperatorSymbol = Literal["+", "-", "*", "/", "%"]


class NumberToken(BaseModel):
    """A numeric literal, sign already folded in."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["number"] = "number"
    value: float = Field(..., description="Literal value")


class OperatorToken(BaseModel):
    """A binary operator."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["operator"] = "operator"
    symbol: OperatorSymbol = Field(..., description="Operator character")


class LeftParen(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["lparen"] = "lparen"


class RightParen(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["rparen"] = "rparen"


Token = Union[NumberToken, OperatorToken, LeftParen, RightParen]
