"""Tests for compute-run stage bookkeeping."""

import pytest

from problembank.errors import PersistenceError
from problembank.pipeline import PipelineStage


class TestPipelineStage:
    def test_run_completes_with_recorded_counts(self):
        stage = PipelineStage("similarity", "Scoring problem pairs")

        with stage.run():
            stage.record(pairs_evaluated=3)

        summary = stage.summary()
        assert summary["success"] is True
        assert summary["skipped"] is False
        assert summary["error"] is None
        assert summary["stats"] == {"pairs_evaluated": 3}
        assert summary["duration"] >= 0.0
        assert summary["description"] == "Scoring problem pairs"

    def test_run_fails_and_reraises(self):
        stage = PipelineStage("clusters", "Building theme clusters")

        with pytest.raises(PersistenceError):
            with stage.run():
                raise PersistenceError("connection lost")

        assert stage.success is False
        assert stage.error == "connection lost"
        assert stage.end_time is not None

    def test_rerun_clears_previous_error(self):
        stage = PipelineStage("clusters", "Building theme clusters")
        with pytest.raises(ValueError):
            with stage.run():
                raise ValueError("boom")

        with stage.run():
            pass

        assert stage.success is True
        assert stage.error is None

    def test_skip_keeps_reason_and_zero_duration(self):
        stage = PipelineStage("clusters", "Building theme clusters")

        stage.skip("not a full recompute")

        summary = stage.summary()
        assert summary["skipped"] is True
        assert summary["success"] is False
        assert summary["duration"] == 0.0
        assert summary["stats"] == {"reason": "not a full recompute"}
