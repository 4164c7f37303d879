"""Interactive calculator state: the expression being typed and past results."""
from typing import List, Optional

from pydantic import BaseModel, Field

from arithmetic_calculator.common.config import GLYPHS
from arithmetic_calculator.common.logger import logger
from arithmetic_calculator.common.operations import HistoryEntry, Outcome, format_value
from arithmetic_calculator.common.parser import evaluate


def normalize(text: str) -> str:
    """Replace display glyphs such as "×" with their operator characters."""
    for glyph, symbol in GLYPHS.items():
        text = text.replace(glyph, symbol)
    return text


class CalculatorSession(BaseModel):
    """
    State owned by one calculator front end.

    The evaluator itself is stateless; this object keeps what the user sees:
        - the expression under construction
        - the history of evaluations, most recent first, never deduplicated

    History lives in memory only and is lost when the process exits.
    """

    expression: str = Field(default="", description="Expression under construction")
    history: List[HistoryEntry] = Field(default_factory=list, description="Past evaluations, most recent first")

    def append(self, text: str) -> str:
        """
        Append typed characters (digits, operators, parentheses) to the expression.

        :param str text: Characters entered by the user

        :return: The updated expression
        :rtype: str
        """
        self.expression += normalize(text)
        return self.expression

    def backspace(self) -> str:
        """Remove the last character of the expression."""
        self.expression = self.expression[:-1]
        return self.expression

    def clear(self) -> None:
        """Discard the expression under construction."""
        self.expression = ""

    def clear_history(self) -> None:
        self.history.clear()

    def submit(self) -> Optional[Outcome]:
        """
        Evaluate the current expression and record it in the history.

        A blank expression is a no-op: nothing is evaluated or recorded.
        On success the expression is replaced by the formatted result so the
        user can keep calculating with it; on failure it is left untouched
        for correction.

        :return: Outcome of the evaluation, or None for a blank expression
        :rtype: Optional[Outcome]
        """
        if not self.expression.strip():
            return None

        expression: str = self.expression
        outcome: Outcome = evaluate(expression)
        self.history.insert(0, HistoryEntry(expression=expression, outcome=outcome))

        if outcome.ok:
            self.expression = format_value(outcome.value)
            logger.debug(f"🧮✅ {expression} = {self.expression}")
        else:
            logger.debug(f"🧮❌ {expression} -> {outcome.kind.value}")

        return outcome
