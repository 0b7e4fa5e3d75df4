"""Similarity edges between problems."""

from datetime import datetime
from typing import Optional, Tuple

from pydantic import BaseModel, Field, model_validator


def canonical_pair(first_id: str, second_id: str) -> Tuple[str, str]:
    """Order an unordered pair so the smaller id comes first."""
    if first_id == second_id:
        raise ValueError("A problem cannot be paired with itself")
    return (first_id, second_id) if first_id < second_id else (second_id, first_id)


class SimilarityEdge(BaseModel):
    """Similarity between two problems, stored once per unordered pair."""

    problem_id_a: str = Field(..., description="Smaller problem id")
    problem_id_b: str = Field(..., description="Larger problem id")
    similarity_score: float = Field(..., description="Combined score", ge=0.0, le=1.0)
    similarity_type: str = Field("keyword", description="Method tag")
    computed_at: Optional[datetime] = Field(None, description="When the score was computed")
    algorithm_version: str = Field("v1-keyword", description="Algorithm version")

    class Config:
        """Pydantic config."""

        from_attributes = True
        frozen = True

    @model_validator(mode="after")
    def check_canonical_order(self) -> "SimilarityEdge":
        if not self.problem_id_a < self.problem_id_b:
            raise ValueError(
                f"Edge must be stored in canonical order: "
                f"{self.problem_id_a!r} < {self.problem_id_b!r}"
            )
        return self

    @classmethod
    def between(cls, first_id: str, second_id: str, score: float, **kwargs) -> "SimilarityEdge":
        """Build an edge for an unordered pair."""
        a, b = canonical_pair(first_id, second_id)
        return cls(problem_id_a=a, problem_id_b=b, similarity_score=score, **kwargs)

    @property
    def pair(self) -> Tuple[str, str]:
        return (self.problem_id_a, self.problem_id_b)

    def other(self, problem_id: str) -> str:
        """Return the id on the other side of the edge."""
        if problem_id == self.problem_id_a:
            return self.problem_id_b
        if problem_id == self.problem_id_b:
            return self.problem_id_a
        raise ValueError(f"Problem {problem_id} is not part of this edge")
