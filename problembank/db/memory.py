"""In-memory store used for tests and dry runs."""

import uuid
from typing import Dict, Iterable, List, Optional, Tuple

import pendulum

from ..errors import DuplicateError, DuplicateExtractionError, NotFoundError
from ..models import (
    Cluster,
    ClusterMembership,
    CycleAggregate,
    Evidence,
    MembershipSource,
    ProblemRecord,
    ProblemStatus,
    SimilarityEdge,
)
from .store import ProblemBankStore


class InMemoryStore(ProblemBankStore):
    """Dict-backed store with the same uniqueness rules as the database.

    Ids are UUID-shaped and allocated sequentially, so they sort in
    creation order.
    """

    def __init__(self) -> None:
        self.cycles: Dict[str, CycleAggregate] = {}
        self.user_institutions: Dict[str, str] = {}
        self.institution_short_names: Dict[str, str] = {}

        self.problems: Dict[str, ProblemRecord] = {}
        self.evidence: List[Evidence] = []
        self.similarities: Dict[Tuple[str, str], SimilarityEdge] = {}
        self.clusters: Dict[str, Cluster] = {}
        self.memberships: Dict[Tuple[str, str], ClusterMembership] = {}
        self._counter = 0

    def _next_id(self) -> str:
        self._counter += 1
        return str(uuid.UUID(int=self._counter))

    def _stamp(self, record, **changes):
        now = pendulum.now("UTC")
        changes.setdefault("updated_at", now)
        if record.created_at is None:
            changes.setdefault("created_at", now)
        return record.model_copy(update=changes)

    # Seeding helpers

    def add_cycle(self, cycle: CycleAggregate) -> None:
        self.cycles[cycle.id] = cycle

    def add_user(self, user_id: str, institution_id: Optional[str]) -> None:
        if institution_id is not None:
            self.user_institutions[user_id] = institution_id

    def add_institution(self, institution_id: str, short_name: str) -> None:
        self.institution_short_names[institution_id] = short_name

    # Consumed collaborators

    def get_cycle(self, cycle_id: str) -> Optional[CycleAggregate]:
        return self.cycles.get(cycle_id)

    def get_user_institution(self, user_id: str) -> Optional[str]:
        return self.user_institutions.get(user_id)

    def get_institution_short_names(self, institution_ids: Iterable[str]) -> Dict[str, str]:
        return {
            iid: self.institution_short_names[iid]
            for iid in institution_ids
            if iid in self.institution_short_names
        }

    # Problems

    def find_problem_id_by_cycle(self, cycle_id: str) -> Optional[str]:
        for problem in self.problems.values():
            if problem.original_cycle_id == cycle_id:
                return problem.id
        return None

    def insert_problem(self, problem: ProblemRecord) -> ProblemRecord:
        if problem.original_cycle_id is not None:
            for existing in self.problems.values():
                if existing.original_cycle_id == problem.original_cycle_id:
                    raise DuplicateExtractionError(problem.original_cycle_id, existing.id)

        stored = self._stamp(problem, id=problem.id or self._next_id())
        self.problems[stored.id] = stored
        return stored

    def get_problem(self, problem_id: str) -> Optional[ProblemRecord]:
        return self.problems.get(problem_id)

    def get_problems(self, problem_ids: Iterable[str]) -> List[ProblemRecord]:
        return [self.problems[pid] for pid in problem_ids if pid in self.problems]

    def list_open_problems(self) -> List[ProblemRecord]:
        return [p for p in self.problems.values() if p.status == ProblemStatus.OPEN]

    def insert_evidence(self, evidence: Evidence) -> Evidence:
        if evidence.problem_id not in self.problems:
            raise NotFoundError(f"Problem not found: {evidence.problem_id}")
        stored = self._stamp(evidence, id=self._next_id())
        self.evidence.append(stored)
        return stored

    # Similarities

    def upsert_similarities(self, edges: List[SimilarityEdge]) -> int:
        for edge in edges:
            self.similarities[edge.pair] = edge
        return len(edges)

    def list_similarities(self, problem_id: Optional[str] = None) -> List[SimilarityEdge]:
        edges = list(self.similarities.values())
        if problem_id is not None:
            edges = [e for e in edges if problem_id in e.pair]
        return sorted(edges, key=lambda e: e.similarity_score, reverse=True)

    # Clusters

    def get_cluster(self, cluster_id: str) -> Optional[Cluster]:
        return self.clusters.get(cluster_id)

    def get_cluster_by_slug(self, slug: str) -> Optional[Cluster]:
        for cluster in self.clusters.values():
            if cluster.slug == slug:
                return cluster
        return None

    def insert_cluster(self, cluster: Cluster) -> Cluster:
        if self.get_cluster_by_slug(cluster.slug) is not None:
            raise DuplicateError(f"Cluster slug already exists: {cluster.slug}")
        stored = self._stamp(cluster, id=self._next_id())
        self.clusters[stored.id] = stored
        return stored

    def upsert_cluster(self, cluster: Cluster) -> Cluster:
        existing = self.get_cluster_by_slug(cluster.slug)
        if existing is None:
            return self.insert_cluster(cluster)

        changes = {
            "name": cluster.name,
            "description": cluster.description,
            "primary_theme": cluster.primary_theme,
        }
        if all(getattr(existing, k) == v for k, v in changes.items()):
            return existing
        stored = self._stamp(existing, **changes)
        self.clusters[stored.id] = stored
        return stored

    def _require_cluster(self, cluster_id: str) -> Cluster:
        cluster = self.clusters.get(cluster_id)
        if cluster is None:
            raise NotFoundError(f"Cluster not found: {cluster_id}")
        return cluster

    def set_cluster_status(self, cluster_id: str, status: str) -> Cluster:
        stored = self._stamp(self._require_cluster(cluster_id), status=status)
        self.clusters[cluster_id] = stored
        return stored

    def update_cluster_stats(
        self,
        cluster_id: str,
        problem_count: int,
        avg_severity: Optional[float],
    ) -> Cluster:
        stored = self._stamp(
            self._require_cluster(cluster_id),
            problem_count=problem_count,
            avg_severity=avg_severity,
        )
        self.clusters[cluster_id] = stored
        return stored

    def list_clusters(
        self,
        theme: Optional[str] = None,
        include_archived: bool = False,
    ) -> List[Cluster]:
        clusters = [
            c for c in self.clusters.values()
            if (include_archived or c.is_active)
            and (theme is None or c.primary_theme == theme)
        ]
        return sorted(clusters, key=lambda c: c.problem_count, reverse=True)

    # Memberships

    def upsert_memberships(self, memberships: List[ClusterMembership]) -> int:
        written = 0
        for membership in memberships:
            if membership.cluster_id not in self.clusters:
                raise NotFoundError(f"Cluster not found: {membership.cluster_id}")
            if membership.problem_id not in self.problems:
                raise NotFoundError(f"Problem not found: {membership.problem_id}")

            key = (membership.cluster_id, membership.problem_id)
            existing = self.memberships.get(key)
            if existing is None:
                self.memberships[key] = self._stamp(membership, id=self._next_id())
                written += 1
                continue

            if (
                membership.added_by == MembershipSource.AUTO
                and existing.added_by == MembershipSource.MANUAL
            ):
                continue

            changes = {
                "membership_score": membership.membership_score,
                "added_by": membership.added_by,
            }
            if membership.added_by == MembershipSource.MANUAL:
                changes["is_centroid"] = membership.is_centroid
            self.memberships[key] = self._stamp(existing, **changes)
            written += 1
        return written

    def list_memberships(
        self,
        cluster_id: str,
        limit: Optional[int] = None,
    ) -> List[ClusterMembership]:
        members = [m for m in self.memberships.values() if m.cluster_id == cluster_id]
        members.sort(key=lambda m: m.membership_score, reverse=True)
        return members[:limit] if limit is not None else members
