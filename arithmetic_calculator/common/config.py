"""Runtime settings for the calculator."""
from multiprocessing import cpu_count
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


# Inputs longer than this are rejected before tokenizing
MAX_EXPRESSION_LENGTH: int = 1000

# Fractional digits kept on non-integer results
RESULT_DECIMALS: int = 12

# Display glyphs mapped to their canonical operator characters
GLYPHS: dict[str, str] = {
    "×": "*",
    "÷": "/",
    "−": "-",
}


class CalculatorSettings(BaseModel):
    """Settings assembled from command-line flags."""

    model_config = ConfigDict(frozen=True)

    max_workers: int = Field(default_factory=cpu_count, ge=1, description="Maximum concurrent worker processes")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO", description="Package log level")
