"""Problem bank records extracted from innovation cycles."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import Field

from .base import DBModel


class ValidationStatus(str, Enum):
    """How far a problem has been validated with real users."""

    UNVALIDATED = "unvalidated"
    USER_TESTED = "user_tested"
    DESPERATE_USER_CONFIRMED = "desperate_user_confirmed"
    MARKET_VALIDATED = "market_validated"


class ProblemStatus(str, Enum):
    """Problem lifecycle status."""

    OPEN = "open"
    SOLVED = "solved"


class ProblemRecord(DBModel):
    """Durable problem bank entry."""

    title: str = Field(..., description="Problem title", min_length=1, max_length=200)
    problem_statement: str = Field(..., description="Assembled problem statement")
    theme: Optional[str] = Field(None, description="Theme category")

    who_affected: Optional[str] = Field(None, description="Who experiences the problem")
    when_occurs: Optional[str] = Field(None, description="When the problem occurs")
    where_occurs: Optional[str] = Field(None, description="Where the problem occurs")
    frequency: Optional[str] = Field(None, description="How often the problem occurs")
    severity_rating: Optional[int] = Field(None, description="Severity (1-10)", ge=1, le=10)
    current_workaround: Optional[str] = Field(None, description="Current workaround")

    validation_status: ValidationStatus = Field(
        ValidationStatus.UNVALIDATED, description="Validation status"
    )
    users_interviewed: int = Field(0, description="Interviews completed", ge=0)
    desperate_user_count: int = Field(0, description="Desperate users found", ge=0)
    desperate_user_score: Optional[int] = Field(
        None, description="Desperate-user criteria met (0-5, null when none)", ge=0, le=5
    )

    status: ProblemStatus = Field(ProblemStatus.OPEN, description="Lifecycle status")
    is_open_for_attempts: bool = Field(True, description="Whether new attempts are accepted")

    original_cycle_id: Optional[str] = Field(None, description="Source cycle (unique when set)")
    source_type: str = Field("cycle", description="Where the problem came from")
    source_year: Optional[int] = Field(None, description="Year the problem was captured")
    source_event: Optional[str] = Field(None, description="Event the problem was captured at")
    best_solution_cycle_id: Optional[str] = Field(None, description="Cycle holding the best solution")

    submitted_by: Optional[str] = Field(None, description="Submitting user")
    institution_id: Optional[str] = Field(None, description="Submitter's institution")

    search_content: Optional[str] = Field(None, description="Precomputed search text")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Extra source metadata")

    @property
    def search_text(self) -> str:
        """Text used for keyword similarity."""
        return self.search_content or f"{self.title} {self.problem_statement}"


class Evidence(DBModel):
    """Validation evidence attached to a problem (append-only)."""

    problem_id: str = Field(..., description="Foreign key to problem_bank")
    evidence_type: str = Field("interview", description="Kind of evidence")
    content: str = Field(..., description="Evidence content")
    source_name: Optional[str] = Field(None, description="Who the evidence came from")
    source_role: Optional[str] = Field(None, description="Role of the source")
    pain_level: Optional[int] = Field(None, description="Reported pain (1-10)", ge=1, le=10)
    collected_at: Optional[datetime] = Field(None, description="When the evidence was collected")
    collected_by: Optional[str] = Field(None, description="User who collected it")
