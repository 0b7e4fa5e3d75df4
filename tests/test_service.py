"""Tests for the problem bank service."""

import pytest

from problembank.errors import DuplicateExtractionError, NotFoundError
from problembank.models import ProblemDiscovery


@pytest.fixture
def corpus(add_problem):
    """Three education problems and one agriculture problem."""
    return [
        add_problem(title="Exam timetable clashes", search_content="students exam timetable clashes", theme="education"),
        add_problem(title="Exam results delayed", search_content="students exam results delayed", theme="education"),
        add_problem(title="Course feedback lost", search_content="students course feedback lost", theme="education"),
        add_problem(title="Crop pests", search_content="farmers crop pests spreading", theme="agriculture"),
    ]


class TestComputeSimilarities:
    def test_recompute_all_builds_clusters(self, store, service, corpus):
        result = service.compute_similarities(recompute_all=True)

        assert result.problem_count == 4
        assert result.similarities_computed == 3
        assert result.clusters_updated == 1
        assert result.threshold == 0.3
        assert result.stages["clusters"]["success"] is True

    def test_without_recompute_all_no_clusters(self, store, service, corpus):
        result = service.compute_similarities()

        assert result.clusters_updated == 0
        assert result.stages["clusters"]["skipped"] is True
        assert result.stages["clusters"]["stats"] == {"reason": "not a full recompute"}
        assert result.stages["similarity"]["stats"]["pairs_evaluated"] == 6
        assert store.clusters == {}

    def test_repeated_full_runs_report_identical_counts(self, service, corpus):
        first = service.compute_similarities(recompute_all=True)
        second = service.compute_similarities(recompute_all=True)

        assert first.similarities_computed == second.similarities_computed
        assert first.clusters_updated == second.clusters_updated

    def test_single_problem_corpus_is_a_noop(self, store, service, add_problem):
        add_problem(theme="education")

        result = service.compute_similarities(recompute_all=True)

        assert result.problem_count == 1
        assert result.similarities_computed == 0
        assert result.stages["clusters"]["stats"] == {"reason": "fewer than two open problems"}
        assert result.clusters_updated == 0
        assert store.clusters == {}

    def test_custom_threshold(self, service, corpus):
        result = service.compute_similarities(threshold=0.9)

        assert result.threshold == 0.9
        assert result.similarities_computed == 0

    def test_failed_stage_propagates(self, service, corpus):
        with pytest.raises(NotFoundError):
            service.compute_similarities(problem_id="missing")


class TestExtract:
    def test_extract_then_duplicate(self, store, service, add_cycle):
        add_cycle("cycle-1", problem=ProblemDiscovery(q_takes_too_long="Takes too long to reconcile attendance"))

        result = service.extract("cycle-1")
        with pytest.raises(DuplicateExtractionError):
            service.extract("cycle-1")

        assert service.get_problem(result.problem_id).theme == "platform"

    def test_get_unknown_problem(self, service):
        with pytest.raises(NotFoundError):
            service.get_problem("missing")


class TestClusters:
    def test_create_returns_id(self, store, service, corpus):
        cluster_id = service.create_cluster("Exams", problem_ids=[corpus[0].id, corpus[1].id])
        assert store.get_cluster(cluster_id).problem_count == 2

    def test_list_without_problems(self, service, corpus):
        service.compute_similarities(recompute_all=True)

        listings = service.list_clusters()

        assert len(listings) == 1
        assert listings[0].cluster.slug == "education"
        assert listings[0].problems is None
        assert listings[0].institutions_list is None

    def test_list_with_problems(self, store, service, add_problem):
        store.add_institution("inst-1", "JKKN")
        store.add_institution("inst-2", "PSG")
        a = add_problem(title="A", institution_id="inst-1")
        b = add_problem(title="B", institution_id="inst-2")
        c = add_problem(title="C", institution_id="inst-1")
        service.create_cluster("Mixed", problem_ids=[b.id, a.id, c.id])

        listing = service.list_clusters(include_problems=True)[0]

        assert listing.problems[0].id == b.id
        assert listing.problems[0].is_centroid is True
        assert listing.problems[0].institution_short == "PSG"
        assert sorted(listing.institutions_list) == ["JKKN", "PSG"]

    def test_list_caps_members(self, service, add_problem):
        ids = [add_problem(title=f"P{i}").id for i in range(12)]
        service.create_cluster("Big", problem_ids=ids)

        listing = service.list_clusters(include_problems=True)[0]

        assert len(listing.problems) == 10
        assert listing.cluster.problem_count == 12

    def test_list_ordered_by_size_and_filtered_by_theme(self, service, add_problem):
        small = [add_problem().id]
        large = [add_problem().id for _ in range(3)]
        service.create_cluster("Small", problem_ids=small, primary_theme="health")
        service.create_cluster("Large", problem_ids=large, primary_theme="education")

        assert [listing.cluster.name for listing in service.list_clusters()] == ["Large", "Small"]
        assert [listing.cluster.name for listing in service.list_clusters(theme="health")] == ["Small"]

    def test_archived_clusters_hidden(self, service):
        cluster_id = service.create_cluster("Gone")
        service.archive_cluster(cluster_id)

        assert service.list_clusters() == []


class TestStats:
    def test_empty(self, service):
        stats = service.similarity_stats()

        assert stats.total_problems == 0
        assert stats.total_similarities == 0
        assert stats.avg_similarity_score == 0.0
        assert stats.last_computed is None

    def test_after_full_run(self, service, corpus):
        service.compute_similarities(recompute_all=True)

        stats = service.similarity_stats()

        assert stats.total_problems == 4
        assert stats.total_similarities == 3
        assert 0.3 <= stats.avg_similarity_score <= 1.0
        assert stats.total_clusters == 1
        assert stats.clusters[0].slug == "education"
        assert stats.last_computed is not None

    def test_similar_problems_delegates(self, service, corpus):
        service.compute_similarities()
        similar = service.similar_problems(corpus[0].id)
        assert {s.id for s in similar} == {corpus[1].id, corpus[2].id}
