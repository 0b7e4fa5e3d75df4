"""Theme clusters over the problem bank."""

import logging
import re
from collections import OrderedDict
from typing import Dict, List, Optional

from ..config import ClusteringConfig
from ..db.store import ProblemBankStore
from ..errors import DuplicateError, NotFoundError, ValidationError
from ..models import (
    Cluster,
    ClusterMembership,
    ClusterStatus,
    MembershipSource,
    ProblemRecord,
)

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_WHITESPACE = re.compile(r"\s+")


def slugify(name: str) -> str:
    """Lower-case a name and collapse non-alphanumeric runs into hyphens."""
    return _NON_ALNUM.sub("-", name.lower()).strip("-")


def theme_slug(theme: str) -> str:
    """Deterministic slug for an auto-generated theme cluster."""
    return _WHITESPACE.sub("-", theme.strip().lower())


class ClusterBuilder:
    """Create, maintain and archive problem clusters."""

    def __init__(
        self,
        store: ProblemBankStore,
        config: Optional[ClusteringConfig] = None,
    ) -> None:
        self.store = store
        self.config = config or ClusteringConfig()

    def theme_cluster_name(self, theme: str) -> str:
        return self.config.theme_names.get(theme, f"{theme} Problems")

    def group_by_theme(self, problems: List[ProblemRecord]) -> Dict[str, List[ProblemRecord]]:
        """Themes with enough members, in first-seen order."""
        groups: Dict[str, List[ProblemRecord]] = OrderedDict()
        for problem in problems:
            if problem.theme:
                groups.setdefault(problem.theme, []).append(problem)
        return OrderedDict(
            (theme, members)
            for theme, members in groups.items()
            if len(members) >= self.config.min_members
        )

    def build_theme_clusters(self, problems: List[ProblemRecord]) -> int:
        """
        Upsert one cluster per well-populated theme.

        Args:
            problems: Open-problem snapshot

        Returns:
            Number of clusters updated
        """
        updated = 0
        for theme, members in self.group_by_theme(problems).items():
            slug = theme_slug(theme)
            existing = self.store.get_cluster_by_slug(slug)
            if existing is not None and not existing.is_active:
                logger.info("Skipping archived cluster %s", slug)
                continue

            name = self.theme_cluster_name(theme)
            cluster = self.store.upsert_cluster(Cluster(
                name=name,
                slug=slug,
                primary_theme=theme,
                description=f"Auto-generated cluster for {name} problems",
            ))
            self.store.upsert_memberships([
                ClusterMembership(
                    cluster_id=cluster.id,
                    problem_id=problem.id,
                    membership_score=self.config.auto_membership_score,
                    added_by=MembershipSource.AUTO,
                )
                for problem in members
            ])
            self.refresh_stats(cluster.id)
            logger.info("Updated cluster %s with %d problems", slug, len(members))
            updated += 1

        return updated

    def create_cluster(
        self,
        name: str,
        problem_ids: Optional[List[str]] = None,
        description: Optional[str] = None,
        primary_theme: Optional[str] = None,
    ) -> Cluster:
        """
        Create a cluster by hand. The first listed problem is the centroid.

        Raises:
            ValidationError: name is missing or has no usable characters
            DuplicateError: a cluster with the same slug exists
            NotFoundError: a listed problem does not exist
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Cluster name is required")
        slug = slugify(name)
        if not slug:
            raise ValidationError(f"Cluster name has no letters or digits: {name!r}")

        member_ids = list(OrderedDict.fromkeys(problem_ids or []))
        found = {p.id for p in self.store.get_problems(member_ids)}
        missing = [pid for pid in member_ids if pid not in found]
        if missing:
            raise NotFoundError(f"Problems not found: {', '.join(missing)}")

        if self.store.get_cluster_by_slug(slug) is not None:
            raise DuplicateError(f"Cluster slug already exists: {slug}")

        cluster = self.store.insert_cluster(Cluster(
            name=name,
            slug=slug,
            primary_theme=primary_theme,
            description=description,
        ))
        if member_ids:
            self.store.upsert_memberships([
                ClusterMembership(
                    cluster_id=cluster.id,
                    problem_id=pid,
                    membership_score=self.config.manual_membership_score,
                    is_centroid=index == 0,
                    added_by=MembershipSource.MANUAL,
                )
                for index, pid in enumerate(member_ids)
            ])
            cluster = self.refresh_stats(cluster.id)

        logger.info("Created cluster %s with %d problems", slug, len(member_ids))
        return cluster

    def archive_cluster(self, cluster_id: str) -> Cluster:
        """Archive a cluster. Archived clusters stay archived."""
        cluster = self.store.get_cluster(cluster_id)
        if cluster is None:
            raise NotFoundError(f"Cluster not found: {cluster_id}")
        if not cluster.is_active:
            return cluster

        archived = self.store.set_cluster_status(cluster_id, ClusterStatus.ARCHIVED.value)
        logger.info("Archived cluster %s", cluster.slug)
        return archived

    def refresh_stats(self, cluster_id: str) -> Cluster:
        """Recompute the cached member count and mean severity."""
        memberships = self.store.list_memberships(cluster_id)
        problems = self.store.get_problems(m.problem_id for m in memberships)
        severities = [p.severity_rating for p in problems if p.severity_rating is not None]
        avg_severity = round(sum(severities) / len(severities), 2) if severities else None
        return self.store.update_cluster_stats(cluster_id, len(memberships), avg_severity)
