"""Storage interface shared by the Postgres and in-memory stores."""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from ..models import (
    Cluster,
    ClusterMembership,
    CycleAggregate,
    Evidence,
    ProblemRecord,
    SimilarityEdge,
)


class ProblemBankStore(ABC):
    """Everything the pipeline reads from or writes to storage.

    Implementations must enforce the same uniqueness rules: one problem per
    source cycle, one edge per canonical pair, one cluster per slug and one
    membership per (cluster, problem).
    """

    # Consumed collaborators

    @abstractmethod
    def get_cycle(self, cycle_id: str) -> Optional[CycleAggregate]:
        """Load a cycle with whichever step records exist."""

    @abstractmethod
    def get_user_institution(self, user_id: str) -> Optional[str]:
        """Resolve a user to their institution id."""

    @abstractmethod
    def get_institution_short_names(self, institution_ids: Iterable[str]) -> Dict[str, str]:
        """Map institution ids to short display names."""

    # Problems

    @abstractmethod
    def find_problem_id_by_cycle(self, cycle_id: str) -> Optional[str]:
        """Return the problem extracted from a cycle, if any."""

    @abstractmethod
    def insert_problem(self, problem: ProblemRecord) -> ProblemRecord:
        """Insert a problem and return it with its id.

        Raises DuplicateExtractionError when the source cycle is taken.
        """

    @abstractmethod
    def get_problem(self, problem_id: str) -> Optional[ProblemRecord]:
        """Get a problem by id."""

    @abstractmethod
    def get_problems(self, problem_ids: Iterable[str]) -> List[ProblemRecord]:
        """Get several problems by id. Missing ids are skipped."""

    @abstractmethod
    def list_open_problems(self) -> List[ProblemRecord]:
        """Snapshot of every open problem."""

    @abstractmethod
    def insert_evidence(self, evidence: Evidence) -> Evidence:
        """Append an evidence record."""

    # Similarities

    @abstractmethod
    def upsert_similarities(self, edges: List[SimilarityEdge]) -> int:
        """Insert or overwrite edges by canonical pair. Returns rows written."""

    @abstractmethod
    def list_similarities(self, problem_id: Optional[str] = None) -> List[SimilarityEdge]:
        """List edges, optionally only those touching a problem."""

    # Clusters

    @abstractmethod
    def get_cluster(self, cluster_id: str) -> Optional[Cluster]:
        """Get a cluster by id."""

    @abstractmethod
    def get_cluster_by_slug(self, slug: str) -> Optional[Cluster]:
        """Get a cluster by slug."""

    @abstractmethod
    def insert_cluster(self, cluster: Cluster) -> Cluster:
        """Insert a new cluster. Raises DuplicateError when the slug is taken."""

    @abstractmethod
    def upsert_cluster(self, cluster: Cluster) -> Cluster:
        """Insert or update a cluster by slug, leaving its status unchanged."""

    @abstractmethod
    def set_cluster_status(self, cluster_id: str, status: str) -> Cluster:
        """Change a cluster's status."""

    @abstractmethod
    def update_cluster_stats(
        self,
        cluster_id: str,
        problem_count: int,
        avg_severity: Optional[float],
    ) -> Cluster:
        """Store derived cluster statistics."""

    @abstractmethod
    def list_clusters(
        self,
        theme: Optional[str] = None,
        include_archived: bool = False,
    ) -> List[Cluster]:
        """List clusters ordered by problem count, largest first."""

    # Memberships

    @abstractmethod
    def upsert_memberships(self, memberships: List[ClusterMembership]) -> int:
        """Insert or update memberships by (cluster, problem).

        Automatic memberships never overwrite manual ones.
        """

    @abstractmethod
    def list_memberships(
        self,
        cluster_id: str,
        limit: Optional[int] = None,
    ) -> List[ClusterMembership]:
        """List memberships ordered by membership score, highest first."""
