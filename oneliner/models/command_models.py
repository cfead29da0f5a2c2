from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class RiskLevel(str, Enum):
    NONE = "none"
    LOW = "low"
    HIGH = "high"

    @classmethod
    def parse(cls, value: Any) -> "RiskLevel":
        """Map a provider risk string to a level; anything unknown is NONE."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.NONE


class RiskAnnotation(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: RiskLevel
    message: str = Field(default="", description="Short justification for the risk")


class CommandOption(BaseModel):
    """One candidate command. Frozen so a batch can only be replaced, not poked."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., description="Brief title for this option")
    command: str = Field(..., description="The shell command to run")
    description: str = Field(..., description="What the command does")
    risk: Optional[RiskAnnotation] = None

    def with_risk(self, risk: Optional[RiskAnnotation]) -> "CommandOption":
        return self.model_copy(update={"risk": risk})


class PipelineStage(str, Enum):
    GENERATING = "generating"
    EVALUATING = "evaluating"

    @property
    def message(self) -> str:
        if self is PipelineStage.EVALUATING:
            return "Evaluating safety..."
        return "Generating options..."


class OutputMode(str, Enum):
    CLIPBOARD = "clipboard"
    SHELL_FUNCTION = "shell-function"
    STDOUT = "stdout"

    @classmethod
    def parse(cls, value: Any) -> "OutputMode":
        """Unrecognised modes fall back to the clipboard."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.CLIPBOARD
