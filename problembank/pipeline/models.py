"""Result models returned by the problem bank service."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..models import Cluster


class ComputeResult(BaseModel):
    """Result of a compute-similarities request."""

    problem_count: int = Field(..., description="Open problems considered")
    similarities_computed: int = Field(0, description="Edges written")
    clusters_updated: int = Field(0, description="Theme clusters upserted")
    threshold: float = Field(..., description="Threshold used")
    stages: Dict[str, Dict] = Field(default_factory=dict, description="Per-stage timings and stats")


class ClusterProblem(BaseModel):
    """A cluster member as shown in listings."""

    id: str
    title: str
    problem_statement: str
    theme: Optional[str] = None
    validation_status: str
    severity_rating: Optional[int] = None
    institution_id: Optional[str] = None
    institution_short: Optional[str] = None
    membership_score: float
    is_centroid: bool = False


class ClusterListing(BaseModel):
    """A cluster with optional member details."""

    cluster: Cluster
    problems: Optional[List[ClusterProblem]] = None
    institutions_list: Optional[List[str]] = None


class SimilarityStats(BaseModel):
    """Summary of the similarity cache."""

    total_problems: int = Field(..., description="Open problems")
    total_similarities: int = Field(..., description="Stored edges")
    avg_similarity_score: float = Field(0.0, description="Mean edge score")
    total_clusters: int = Field(..., description="Active clusters")
    clusters: List[Cluster] = Field(default_factory=list)
    last_computed: Optional[datetime] = Field(None, description="Most recent edge computation")
