"""Cluster models for grouping related problems."""

from enum import Enum
from typing import Optional

from pydantic import Field

from .base import DBModel


class ClusterStatus(str, Enum):
    """Cluster status. Archived is terminal."""

    ACTIVE = "active"
    ARCHIVED = "archived"


class MembershipSource(str, Enum):
    """Who added a problem to a cluster."""

    MANUAL = "manual"
    AUTO = "auto"


class Cluster(DBModel):
    """Problem cluster model."""

    name: str = Field(..., description="Cluster name", min_length=1)
    slug: str = Field(..., description="Unique slug", min_length=1)
    primary_theme: Optional[str] = Field(None, description="Dominant theme")
    description: Optional[str] = Field(None, description="Cluster description")
    status: ClusterStatus = Field(ClusterStatus.ACTIVE, description="Cluster status")
    problem_count: int = Field(0, description="Member count (derived, may lag)", ge=0)
    avg_severity: Optional[float] = Field(None, description="Mean member severity (derived)")

    @property
    def is_active(self) -> bool:
        return self.status == ClusterStatus.ACTIVE

    def archive(self) -> "Cluster":
        """Return an archived copy. Archiving twice is a no-op."""
        if not self.is_active:
            return self
        return self.model_copy(update={"status": ClusterStatus.ARCHIVED.value})


class ClusterMembership(DBModel):
    """Cluster membership model."""

    cluster_id: str = Field(..., description="Foreign key to problem_clusters")
    problem_id: str = Field(..., description="Foreign key to problem_bank")
    membership_score: float = Field(..., description="Membership strength", ge=0.0, le=1.0)
    is_centroid: bool = Field(False, description="Representative member of the cluster")
    added_by: MembershipSource = Field(MembershipSource.AUTO, description="manual or auto")
