"""Tests for the problem bank data models."""

import pytest
from pydantic import ValidationError

from problembank.models import (
    Cluster,
    ClusterMembership,
    ClusterStatus,
    ProblemRecord,
    SimilarityEdge,
    ValidationStatus,
)
from problembank.models.similarity import canonical_pair


class TestProblemRecord:
    def test_defaults(self):
        problem = ProblemRecord(title="Slow approvals", problem_statement="Approvals take days")
        assert problem.validation_status == "unvalidated"
        assert problem.status == "open"
        assert problem.is_open_for_attempts is True
        assert problem.source_type == "cycle"
        assert problem.metadata == {}

    def test_enum_values_are_stored_as_strings(self):
        problem = ProblemRecord(
            title="t",
            problem_statement="s",
            validation_status=ValidationStatus.USER_TESTED,
        )
        assert problem.validation_status == "user_tested"
        assert isinstance(problem.validation_status, str)

    def test_title_longer_than_limit_rejected(self):
        with pytest.raises(ValidationError):
            ProblemRecord(title="x" * 201, problem_statement="s")

    def test_severity_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            ProblemRecord(title="t", problem_statement="s", severity_rating=11)

    def test_search_text_prefers_search_content(self):
        problem = ProblemRecord(title="Title", problem_statement="Body", search_content="indexed words")
        assert problem.search_text == "indexed words"

    def test_search_text_falls_back_to_title_and_statement(self):
        problem = ProblemRecord(title="Title", problem_statement="Body")
        assert problem.search_text == "Title Body"

    def test_records_are_frozen(self):
        problem = ProblemRecord(title="t", problem_statement="s")
        with pytest.raises(ValidationError):
            problem.title = "changed"


class TestSimilarityEdge:
    def test_canonical_pair_orders_ids(self):
        assert canonical_pair("b", "a") == ("a", "b")
        assert canonical_pair("a", "b") == ("a", "b")

    def test_canonical_pair_rejects_self_pair(self):
        with pytest.raises(ValueError):
            canonical_pair("a", "a")

    def test_between_is_direction_independent(self):
        forward = SimilarityEdge.between("p2", "p1", 0.4)
        backward = SimilarityEdge.between("p1", "p2", 0.4)
        assert forward.pair == backward.pair == ("p1", "p2")

    def test_non_canonical_order_rejected(self):
        with pytest.raises(ValidationError):
            SimilarityEdge(problem_id_a="p2", problem_id_b="p1", similarity_score=0.5)

    def test_score_must_be_in_unit_range(self):
        with pytest.raises(ValidationError):
            SimilarityEdge(problem_id_a="p1", problem_id_b="p2", similarity_score=1.5)

    def test_other_side(self):
        edge = SimilarityEdge.between("p1", "p2", 0.5)
        assert edge.other("p1") == "p2"
        assert edge.other("p2") == "p1"
        with pytest.raises(ValueError):
            edge.other("p3")


class TestCluster:
    def test_new_cluster_is_active(self):
        cluster = Cluster(name="Health", slug="health")
        assert cluster.status == "active"
        assert cluster.is_active

    def test_archive_returns_archived_copy(self):
        cluster = Cluster(name="Health", slug="health")
        archived = cluster.archive()
        assert archived.status == ClusterStatus.ARCHIVED
        assert not archived.is_active
        assert cluster.is_active

    def test_archive_is_terminal(self):
        archived = Cluster(name="Health", slug="health").archive()
        assert archived.archive() is archived

    def test_membership_score_range(self):
        with pytest.raises(ValidationError):
            ClusterMembership(cluster_id="c", problem_id="p", membership_score=1.2)
