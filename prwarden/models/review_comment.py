from pydantic import BaseModel, Field, field_validator
from typing import Any, Optional
import enum
import re

_LEADING_INT = re.compile(r"\s*[-+]?\d+")


class Severity(str, enum.Enum):
    """Severity of a single review comment."""

    ERROR = "error"
    WARNING = "warning"
    SUGGESTION = "suggestion"


class ReviewComment(BaseModel):
    """A single inline review comment produced by the language model."""

    file: str = Field(..., min_length=1, description="Path of the file, relative to the repo root.")
    line: int = Field(1, description="Line number in the new version of the file.")
    severity: Severity = Field(Severity.ERROR, description="error, warning or suggestion.")
    category: str = Field("general", description="Review category, e.g. 'security'.")
    comment: str = Field(..., min_length=1, description="Actionable feedback.")
    suggestion: Optional[str] = Field(None, description="Optional proposed code.")

    @field_validator("line", mode="before")
    @classmethod
    def _coerce_line(cls, value: Any) -> int:
        if isinstance(value, bool):
            return 1
        if isinstance(value, (int, float)):
            try:
                line = int(value)
            except (ValueError, OverflowError):
                return 1
        else:
            # Leading digits win, so "12abc" is line 12
            match = _LEADING_INT.match(str(value or ""))
            if not match:
                return 1
            line = int(match.group(0))
        return line if line > 0 else 1

    @field_validator("severity", mode="before")
    @classmethod
    def _normalize_severity(cls, value: Any) -> Severity:
        # Unknown severities fall back to the most conservative level.
        if isinstance(value, Severity):
            return value
        try:
            return Severity(str(value).strip().lower())
        except ValueError:
            return Severity.ERROR

    @field_validator("category", mode="before")
    @classmethod
    def _default_category(cls, value: Any) -> str:
        if not value or not isinstance(value, str):
            return "general"
        return value.strip().lower()

    @field_validator("suggestion", mode="before")
    @classmethod
    def _empty_suggestion(cls, value: Any) -> Optional[str]:
        return value or None


class ReviewedFile(BaseModel):
    """A changed file that was handed to the reviewer."""

    path: str
    status: str = "modified"
    additions: int = 0
    deletions: int = 0
    changes: int = 0
