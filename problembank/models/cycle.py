"""Cycle aggregate consumed by the extractor.

These mirror the rows the methodology wizard writes for each step. Every
field is optional because a cycle may be extracted at any point after the
problem discovery step.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProblemDiscovery(BaseModel):
    """Problem discovery step answers."""

    model_config = ConfigDict(extra="ignore")

    refined_statement: Optional[str] = None
    selected_question: Optional[str] = None
    q_takes_too_long: Optional[str] = None
    q_repetitive: Optional[str] = None
    q_lookup_repeatedly: Optional[str] = None
    q_complaints: Optional[str] = None
    q_would_pay: Optional[str] = None


class ContextDiscovery(BaseModel):
    """Context discovery step answers."""

    model_config = ConfigDict(extra="ignore")

    problem_description: Optional[str] = None
    who_affected: Optional[str] = None
    when_occurs: Optional[str] = None
    where_occurs: Optional[str] = None
    frequency: Optional[str] = None
    severity_rating: Optional[int] = None
    current_workaround: Optional[str] = None
    # Free-form JSON; only list-shaped values yield evidence
    interviews: Any = None


class ValueAssessment(BaseModel):
    """Value discovery step answers, including the desperate-user criteria."""

    model_config = ConfigDict(extra="ignore")

    desperate_user_confirmed: Optional[bool] = None
    interviews_completed: Optional[int] = None
    desperate_user_count: Optional[int] = None

    multiple_have_it: Optional[bool] = None
    complained_before: Optional[bool] = None
    doing_something: Optional[bool] = None
    light_up_at_solution: Optional[bool] = None
    ask_when_can_use: Optional[bool] = None


class ImpactAssessment(BaseModel):
    """Impact step results."""

    model_config = ConfigDict(extra="ignore")

    completed: Optional[bool] = None
    total_users: Optional[int] = None
    impact_score: Optional[float] = None


class CycleAggregate(BaseModel):
    """A cycle with whichever step records exist."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Cycle id")
    name: Optional[str] = Field(None, description="Cycle display name")
    user_id: Optional[str] = Field(None, description="Owning user")
    build_url: Optional[str] = Field(None, description="Deployed project URL")
    created_at: Optional[datetime] = None

    problem: Optional[ProblemDiscovery] = None
    context: Optional[ContextDiscovery] = None
    value_assessment: Optional[ValueAssessment] = None
    impact_assessment: Optional[ImpactAssessment] = None
