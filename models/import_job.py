"""
Import pipeline events and report.

An import yields one ImportProgress per resolved row and finishes with a
single ImportReport.
"""

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field, computed_field


class OutcomeStatus(str, Enum):
    """Result of submitting one row."""
    SUCCESS = "success"
    FAILED = "failed"


class ImportOutcome(BaseModel):
    """Per-row submission result."""
    row_index: int = Field(..., ge=1, description="1-based row in the source sheet")
    status: OutcomeStatus
    record_id: Optional[str] = None
    error: Optional[str] = None


class ImportProgress(BaseModel):
    """Emitted after each row resolves, success or failure."""
    event: Literal["progress"] = "progress"
    completed: int
    total: int
    succeeded: int
    failed: int
    outcome: ImportOutcome

    @computed_field
    @property
    def percent(self) -> int:
        if self.total == 0:
            return 100
        return round(self.completed / self.total * 100)


class ImportReport(BaseModel):
    """Final summary of an import run."""
    event: Literal["report"] = "report"
    total: int
    succeeded: int
    failed: int
    outcomes: list[ImportOutcome] = Field(default_factory=list)
    errors: list[dict] = Field(default_factory=list)

    @computed_field
    @property
    def summary(self) -> str:
        return f"{self.succeeded} of {self.total} succeeded"

    @property
    def success(self) -> bool:
        """True if every row was stored."""
        return self.failed == 0
