"""
Data models for PreReview.
"""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

SEVERITIES = ("error", "warning", "info", "hint")
CONFIDENCES = ("high", "medium", "low")


class Suggestion(BaseModel):
    """Represents a single file-anchored review suggestion."""
    file_path: str
    line: int = 0
    end_line: int = 0
    severity: str = "info"  # error|warning|info|hint
    confidence: Optional[str] = None  # high|medium|low, None when unspecified
    title: str
    description: str = ""
    category: str = ""  # security|performance|style|bug|best-practice
    original_code: Optional[str] = None  # None when the reply said N/A
    suggested_fix: Optional[str] = None

    @property
    def has_fix(self) -> bool:
        """Whether both snippets are present so the fix can be applied."""
        return bool(self.original_code) and bool(self.suggested_fix)


class ReviewResult(BaseModel):
    """Outcome of reviewing a set of staged changes."""
    files: List[str] = Field(default_factory=list)
    suggestions: List[Suggestion] = Field(default_factory=list)
    summary: Optional[str] = None
    errors: List[str] = Field(default_factory=list)


class SessionAction(str, Enum):
    COMMIT = "commit"
    ABORT = "abort"
    REREVIEW = "re-review"


class SessionOutcome(BaseModel):
    """Final disposition of an interactive review session."""
    action: SessionAction
    fixed: int = 0
    skipped: int = 0
