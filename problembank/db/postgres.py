"""Postgres-backed problem bank storage."""

import uuid
from contextlib import contextmanager
from typing import Any, Dict, Generator, Iterable, List, Optional

import psycopg
from psycopg import Connection
from psycopg.errors import UniqueViolation
from psycopg.types.json import Jsonb

from ..errors import DuplicateError, DuplicateExtractionError, NotFoundError, PersistenceError
from ..models import (
    Cluster,
    ClusterMembership,
    ContextDiscovery,
    CycleAggregate,
    Evidence,
    ImpactAssessment,
    ProblemDiscovery,
    ProblemRecord,
    SimilarityEdge,
    ValueAssessment,
)
from .store import ProblemBankStore

PROBLEM_COLUMNS = [
    "original_cycle_id",
    "source_type",
    "source_year",
    "source_event",
    "title",
    "problem_statement",
    "theme",
    "who_affected",
    "when_occurs",
    "where_occurs",
    "frequency",
    "severity_rating",
    "current_workaround",
    "validation_status",
    "users_interviewed",
    "desperate_user_count",
    "desperate_user_score",
    "institution_id",
    "submitted_by",
    "status",
    "is_open_for_attempts",
    "best_solution_cycle_id",
    "search_content",
    "metadata",
]


def _clean_row(row: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Turn UUID columns into strings so rows validate against the models."""
    if row is None:
        return None
    return {k: str(v) if isinstance(v, uuid.UUID) else v for k, v in row.items()}


class PostgresStore(ProblemBankStore):
    """Problem bank storage on a psycopg connection."""

    def __init__(self, conn: Connection) -> None:
        """Initialize store on an open connection (dict_row factory)."""
        self.conn = conn

    @contextmanager
    def _write(self, action: str) -> Generator[psycopg.Cursor, None, None]:
        """Run a write in its own transaction, wrapping driver errors."""
        try:
            with self.conn.cursor() as cur:
                yield cur
            self.conn.commit()
        except UniqueViolation:
            self.conn.rollback()
            raise
        except psycopg.Error as e:
            self.conn.rollback()
            raise PersistenceError(f"Failed to {action}: {e}") from e

    def _fetchone(self, query: str, params: tuple) -> Optional[Dict[str, Any]]:
        try:
            with self.conn.cursor() as cur:
                cur.execute(query, params)
                return _clean_row(cur.fetchone())
        except psycopg.Error as e:
            self.conn.rollback()
            raise PersistenceError(str(e)) from e

    def _fetchall(self, query: str, params: tuple = ()) -> List[Dict[str, Any]]:
        try:
            with self.conn.cursor() as cur:
                cur.execute(query, params)
                return [_clean_row(row) for row in cur.fetchall()]
        except psycopg.Error as e:
            self.conn.rollback()
            raise PersistenceError(str(e)) from e

    # Consumed collaborators

    def get_cycle(self, cycle_id: str) -> Optional[CycleAggregate]:
        cycle = self._fetchone("SELECT * FROM cycles WHERE id = %s", (cycle_id,))
        if cycle is None:
            return None

        def child(table: str) -> Optional[Dict[str, Any]]:
            return self._fetchone(
                f"SELECT * FROM {table} WHERE cycle_id = %s LIMIT 1",
                (cycle_id,),
            )

        problem = child("problems")
        context = child("contexts")
        value = child("value_assessments")
        impact = child("impact_assessments")
        build = cycle.get("build") or {}

        return CycleAggregate(
            id=cycle["id"],
            name=cycle.get("name"),
            user_id=cycle.get("user_id"),
            build_url=build.get("project_url") if isinstance(build, dict) else None,
            created_at=cycle.get("created_at"),
            problem=ProblemDiscovery(**problem) if problem else None,
            context=ContextDiscovery(**context) if context else None,
            value_assessment=ValueAssessment(**value) if value else None,
            impact_assessment=ImpactAssessment(**impact) if impact else None,
        )

    def get_user_institution(self, user_id: str) -> Optional[str]:
        row = self._fetchone("SELECT institution_id FROM users WHERE id = %s", (user_id,))
        return row["institution_id"] if row else None

    def get_institution_short_names(self, institution_ids: Iterable[str]) -> Dict[str, str]:
        ids = list(institution_ids)
        if not ids:
            return {}
        rows = self._fetchall(
            "SELECT id, short_name FROM institutions WHERE id = ANY(%s::uuid[])",
            (ids,),
        )
        return {row["id"]: row["short_name"] for row in rows if row["short_name"]}

    # Problems

    def find_problem_id_by_cycle(self, cycle_id: str) -> Optional[str]:
        row = self._fetchone(
            "SELECT id FROM problem_bank WHERE original_cycle_id = %s",
            (cycle_id,),
        )
        return row["id"] if row else None

    def insert_problem(self, problem: ProblemRecord) -> ProblemRecord:
        data = problem.model_dump(include=set(PROBLEM_COLUMNS))
        data["metadata"] = Jsonb(data["metadata"])
        columns = ", ".join(PROBLEM_COLUMNS)
        placeholders = ", ".join(f"%({c})s" for c in PROBLEM_COLUMNS)

        try:
            with self._write("save problem to bank") as cur:
                cur.execute(
                    f"""
                    INSERT INTO problem_bank ({columns})
                    VALUES ({placeholders})
                    RETURNING *
                    """,
                    data,
                )
                row = _clean_row(cur.fetchone())
        except UniqueViolation as e:
            # Lost a race with a concurrent extraction of the same cycle
            existing = self.find_problem_id_by_cycle(problem.original_cycle_id)
            if existing is None:
                raise PersistenceError(f"Failed to save problem to bank: {e}") from e
            raise DuplicateExtractionError(problem.original_cycle_id, existing) from e

        return ProblemRecord(**row)

    def get_problem(self, problem_id: str) -> Optional[ProblemRecord]:
        row = self._fetchone("SELECT * FROM problem_bank WHERE id = %s", (problem_id,))
        return ProblemRecord(**row) if row else None

    def get_problems(self, problem_ids: Iterable[str]) -> List[ProblemRecord]:
        ids = list(problem_ids)
        if not ids:
            return []
        rows = self._fetchall(
            "SELECT * FROM problem_bank WHERE id = ANY(%s::uuid[])",
            (ids,),
        )
        by_id = {row["id"]: ProblemRecord(**row) for row in rows}
        return [by_id[pid] for pid in ids if pid in by_id]

    def list_open_problems(self) -> List[ProblemRecord]:
        rows = self._fetchall(
            "SELECT * FROM problem_bank WHERE status = 'open' ORDER BY id"
        )
        return [ProblemRecord(**row) for row in rows]

    def insert_evidence(self, evidence: Evidence) -> Evidence:
        with self._write("save evidence") as cur:
            cur.execute(
                """
                INSERT INTO problem_evidence (
                    problem_id, evidence_type, content, source_name,
                    source_role, pain_level, collected_at, collected_by
                ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING *
                """,
                (
                    evidence.problem_id,
                    evidence.evidence_type,
                    evidence.content,
                    evidence.source_name,
                    evidence.source_role,
                    evidence.pain_level,
                    evidence.collected_at,
                    evidence.collected_by,
                ),
            )
            row = _clean_row(cur.fetchone())
        return Evidence(**row)

    # Similarities

    def upsert_similarities(self, edges: List[SimilarityEdge]) -> int:
        if not edges:
            return 0
        with self._write("save similarities") as cur:
            cur.executemany(
                """
                INSERT INTO problem_similarities (
                    problem_id_a, problem_id_b, similarity_score,
                    similarity_type, computed_at, algorithm_version
                ) VALUES (%s, %s, %s, %s, %s, %s)
                ON CONFLICT (problem_id_a, problem_id_b) DO UPDATE SET
                    similarity_score = EXCLUDED.similarity_score,
                    similarity_type = EXCLUDED.similarity_type,
                    computed_at = EXCLUDED.computed_at,
                    algorithm_version = EXCLUDED.algorithm_version
                """,
                [
                    (
                        e.problem_id_a,
                        e.problem_id_b,
                        e.similarity_score,
                        e.similarity_type,
                        e.computed_at,
                        e.algorithm_version,
                    )
                    for e in edges
                ],
            )
        return len(edges)

    def list_similarities(self, problem_id: Optional[str] = None) -> List[SimilarityEdge]:
        query = "SELECT * FROM problem_similarities"
        params: tuple = ()
        if problem_id is not None:
            query += " WHERE problem_id_a = %s OR problem_id_b = %s"
            params = (problem_id, problem_id)
        query += " ORDER BY similarity_score DESC"
        return [SimilarityEdge(**row) for row in self._fetchall(query, params)]

    # Clusters

    def get_cluster(self, cluster_id: str) -> Optional[Cluster]:
        row = self._fetchone("SELECT * FROM problem_clusters WHERE id = %s", (cluster_id,))
        return Cluster(**row) if row else None

    def get_cluster_by_slug(self, slug: str) -> Optional[Cluster]:
        row = self._fetchone("SELECT * FROM problem_clusters WHERE slug = %s", (slug,))
        return Cluster(**row) if row else None

    def insert_cluster(self, cluster: Cluster) -> Cluster:
        try:
            with self._write("create cluster") as cur:
                cur.execute(
                    """
                    INSERT INTO problem_clusters (name, slug, primary_theme, description, status)
                    VALUES (%s, %s, %s, %s, %s)
                    RETURNING *
                    """,
                    (
                        cluster.name,
                        cluster.slug,
                        cluster.primary_theme,
                        cluster.description,
                        cluster.status,
                    ),
                )
                row = _clean_row(cur.fetchone())
        except UniqueViolation as e:
            raise DuplicateError(f"Cluster slug already exists: {cluster.slug}") from e
        return Cluster(**row)

    def upsert_cluster(self, cluster: Cluster) -> Cluster:
        with self._write("save cluster") as cur:
            cur.execute(
                """
                INSERT INTO problem_clusters (name, slug, primary_theme, description, status)
                VALUES (%s, %s, %s, %s, %s)
                ON CONFLICT (slug) DO UPDATE SET
                    name = EXCLUDED.name,
                    primary_theme = EXCLUDED.primary_theme,
                    description = EXCLUDED.description
                RETURNING *
                """,
                (
                    cluster.name,
                    cluster.slug,
                    cluster.primary_theme,
                    cluster.description,
                    cluster.status,
                ),
            )
            row = _clean_row(cur.fetchone())
        return Cluster(**row)

    def _update_cluster(self, cluster_id: str, assignments: str, params: tuple) -> Cluster:
        with self._write("update cluster") as cur:
            cur.execute(
                f"UPDATE problem_clusters SET {assignments} WHERE id = %s RETURNING *",
                params + (cluster_id,),
            )
            row = _clean_row(cur.fetchone())
        if row is None:
            raise NotFoundError(f"Cluster not found: {cluster_id}")
        return Cluster(**row)

    def set_cluster_status(self, cluster_id: str, status: str) -> Cluster:
        return self._update_cluster(cluster_id, "status = %s", (status,))

    def update_cluster_stats(
        self,
        cluster_id: str,
        problem_count: int,
        avg_severity: Optional[float],
    ) -> Cluster:
        return self._update_cluster(
            cluster_id,
            "problem_count = %s, avg_severity = %s",
            (problem_count, avg_severity),
        )

    def list_clusters(
        self,
        theme: Optional[str] = None,
        include_archived: bool = False,
    ) -> List[Cluster]:
        query = "SELECT * FROM problem_clusters WHERE TRUE"
        params: List[Any] = []
        if not include_archived:
            query += " AND status = 'active'"
        if theme:
            query += " AND primary_theme = %s"
            params.append(theme)
        query += " ORDER BY problem_count DESC"
        return [Cluster(**row) for row in self._fetchall(query, tuple(params))]

    # Memberships

    def upsert_memberships(self, memberships: List[ClusterMembership]) -> int:
        if not memberships:
            return 0
        with self._write("save cluster members") as cur:
            cur.executemany(
                """
                INSERT INTO problem_cluster_members (
                    cluster_id, problem_id, membership_score, is_centroid, added_by
                ) VALUES (%s, %s, %s, %s, %s)
                ON CONFLICT (cluster_id, problem_id) DO UPDATE SET
                    membership_score = EXCLUDED.membership_score,
                    added_by = EXCLUDED.added_by,
                    is_centroid = CASE
                        WHEN EXCLUDED.added_by = 'manual' THEN EXCLUDED.is_centroid
                        ELSE problem_cluster_members.is_centroid
                    END
                WHERE EXCLUDED.added_by = 'manual'
                   OR problem_cluster_members.added_by = 'auto'
                """,
                [
                    (
                        m.cluster_id,
                        m.problem_id,
                        m.membership_score,
                        m.is_centroid,
                        m.added_by,
                    )
                    for m in memberships
                ],
            )
            written = cur.rowcount
        return max(written, 0)

    def list_memberships(
        self,
        cluster_id: str,
        limit: Optional[int] = None,
    ) -> List[ClusterMembership]:
        query = """
            SELECT * FROM problem_cluster_members
            WHERE cluster_id = %s
            ORDER BY membership_score DESC, created_at
        """
        params: tuple = (cluster_id,)
        if limit is not None:
            query += " LIMIT %s"
            params = (cluster_id, limit)
        return [ClusterMembership(**row) for row in self._fetchall(query, params)]
