"""Similarity models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class PairScore(BaseModel):
    """Score breakdown for one pair of problems."""

    problem_id_a: str = Field(..., description="Smaller problem id")
    problem_id_b: str = Field(..., description="Larger problem id")
    text_score: float = Field(0.0, description="Keyword overlap", ge=0.0, le=1.0)
    theme_score: float = Field(0.0, description="Theme match component", ge=0.0, le=1.0)
    total_score: float = Field(..., description="Combined score", ge=0.0, le=1.0)


class SimilarityRunResult(BaseModel):
    """Result of one similarity pass."""

    problem_count: int = Field(..., description="Open problems considered")
    pairs_evaluated: int = Field(0, description="Pairs scored")
    similarities_computed: int = Field(0, description="Edges written at or above threshold")
    threshold: float = Field(..., description="Threshold used")
    target_problem_id: Optional[str] = Field(None, description="Single-target mode problem")
    computed_at: datetime = Field(..., description="When the pass ran")


class SimilarProblem(BaseModel):
    """A problem related to another one."""

    id: str
    title: str
    problem_statement: str = Field(..., description="Statement preview")
    theme: Optional[str] = None
    similarity_score: float = Field(..., ge=0.0, le=1.0)
    method: str = Field(..., description="stored_edges, theme_fallback or text_fallback")
