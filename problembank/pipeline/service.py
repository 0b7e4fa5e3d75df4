"""Problem bank service that ties extraction, similarity and clustering together."""

import logging
from typing import List, Optional

from ..clustering import ClusterBuilder
from ..config import ConfigModel
from ..db.store import ProblemBankStore
from ..errors import NotFoundError
from ..extraction import ExtractionResult, ProblemExtractor
from ..models import Cluster, ProblemRecord
from ..similarity import SimilarityEngine, SimilarProblem
from .models import ClusterListing, ClusterProblem, ComputeResult, SimilarityStats
from .stages import PipelineStage

logger = logging.getLogger(__name__)


class ProblemBankService:
    """Entry point for every problem bank operation."""

    def __init__(self, store: ProblemBankStore, config: Optional[ConfigModel] = None):
        """Initialize the service over a store."""
        self.store = store
        self.config = config or ConfigModel()
        self.extractor = ProblemExtractor(store)
        self.engine = SimilarityEngine(store, self.config.similarity)
        self.builder = ClusterBuilder(store, self.config.clustering)

    def extract(
        self,
        cycle_id: str,
        source_event: Optional[str] = None,
        submitted_by: Optional[str] = None,
    ) -> ExtractionResult:
        """Extract a completed cycle into the problem bank."""
        return self.extractor.extract(cycle_id, source_event=source_event, submitted_by=submitted_by)

    def compute_similarities(
        self,
        problem_id: Optional[str] = None,
        threshold: Optional[float] = None,
        recompute_all: bool = False,
    ) -> ComputeResult:
        """
        Compute similarity edges and, for full recomputes, theme clusters.

        Args:
            problem_id: Only score pairs touching this problem
            threshold: Minimum score for an edge to be stored
            recompute_all: Also rebuild theme clusters from the open problems

        Returns:
            Counts for the run
        """
        similarity_stage = PipelineStage("similarity", "Scoring problem pairs")
        cluster_stage = PipelineStage("clusters", "Building theme clusters")

        with similarity_stage.run():
            run = self.engine.compute(threshold=threshold, problem_id=problem_id)
            similarity_stage.record(
                pairs_evaluated=run.pairs_evaluated,
                similarities_computed=run.similarities_computed,
            )

        clusters_updated = 0
        if not recompute_all:
            cluster_stage.skip("not a full recompute")
        elif run.problem_count < 2:
            cluster_stage.skip("fewer than two open problems")
        else:
            with cluster_stage.run():
                clusters_updated = self.builder.build_theme_clusters(self.store.list_open_problems())
                cluster_stage.record(clusters_updated=clusters_updated)

        return ComputeResult(
            problem_count=run.problem_count,
            similarities_computed=run.similarities_computed,
            clusters_updated=clusters_updated,
            threshold=run.threshold,
            stages={
                stage.name: stage.summary()
                for stage in (similarity_stage, cluster_stage)
            },
        )

    def create_cluster(
        self,
        name: str,
        description: Optional[str] = None,
        primary_theme: Optional[str] = None,
        problem_ids: Optional[List[str]] = None,
    ) -> str:
        """Create a manual cluster and return its id."""
        cluster = self.builder.create_cluster(
            name,
            problem_ids=problem_ids,
            description=description,
            primary_theme=primary_theme,
        )
        return cluster.id

    def archive_cluster(self, cluster_id: str) -> Cluster:
        return self.builder.archive_cluster(cluster_id)

    def list_clusters(
        self,
        theme: Optional[str] = None,
        include_problems: bool = False,
    ) -> List[ClusterListing]:
        """
        List active clusters, largest first.

        With include_problems each cluster carries its top members by
        membership score and the unique institution short names among them.
        """
        listings = []
        for cluster in self.store.list_clusters(theme=theme):
            if not include_problems:
                listings.append(ClusterListing(cluster=cluster))
                continue

            memberships = self.store.list_memberships(cluster.id, limit=self.config.clustering.top_members)
            problems = {p.id: p for p in self.store.get_problems(m.problem_id for m in memberships)}
            short_names = self.store.get_institution_short_names(
                p.institution_id for p in problems.values() if p.institution_id
            )

            members = []
            for membership in memberships:
                problem = problems.get(membership.problem_id)
                if problem is None:
                    continue
                members.append(ClusterProblem(
                    id=problem.id,
                    title=problem.title,
                    problem_statement=problem.problem_statement,
                    theme=problem.theme,
                    validation_status=problem.validation_status,
                    severity_rating=problem.severity_rating,
                    institution_id=problem.institution_id,
                    institution_short=short_names.get(problem.institution_id),
                    membership_score=membership.membership_score,
                    is_centroid=membership.is_centroid,
                ))

            institutions = []
            for member in members:
                if member.institution_short and member.institution_short not in institutions:
                    institutions.append(member.institution_short)

            listings.append(ClusterListing(cluster=cluster, problems=members, institutions_list=institutions))

        return listings

    def similar_problems(self, problem_id: str, limit: int = 5) -> List[SimilarProblem]:
        return self.engine.similar_problems(problem_id, limit=limit)

    def similarity_stats(self) -> SimilarityStats:
        """Summarize the open corpus, stored edges and active clusters."""
        problems = self.store.list_open_problems()
        edges = self.store.list_similarities()
        clusters = self.store.list_clusters()

        avg_score = 0.0
        if edges:
            avg_score = round(sum(e.similarity_score for e in edges) / len(edges), 4)
        last_computed = max((e.computed_at for e in edges if e.computed_at), default=None)

        return SimilarityStats(
            total_problems=len(problems),
            total_similarities=len(edges),
            avg_similarity_score=avg_score,
            total_clusters=len(clusters),
            clusters=clusters,
            last_computed=last_computed,
        )

    def get_problem(self, problem_id: str) -> ProblemRecord:
        problem = self.store.get_problem(problem_id)
        if problem is None:
            raise NotFoundError(f"Problem not found: {problem_id}")
        return problem
