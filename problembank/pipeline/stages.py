"""Timing and status bookkeeping for the steps of a compute run."""

import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

logger = logging.getLogger(__name__)


class PipelineStage:
    """One timed step of a compute run (similarity scoring, cluster rebuild)."""

    def __init__(self, name: str, description: str):
        self.name = name
        self.description = description
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None
        self.success = False
        self.skipped = False
        self.error: Optional[str] = None
        self.stats: Dict[str, Any] = {}

    @contextmanager
    def run(self) -> Iterator["PipelineStage"]:
        """Time the enclosed block.

        The stage completes when the block returns and fails when it raises;
        the exception is re-raised either way. Counts recorded on the stage
        inside the block end up in its summary.
        """
        self.start()
        logger.debug("Stage %s started: %s", self.name, self.description)
        try:
            yield self
        except Exception as e:
            self.fail(str(e))
            logger.warning("Stage %s failed after %.2fs: %s", self.name, self.duration, e)
            raise
        self.complete()
        logger.debug("Stage %s finished in %.2fs", self.name, self.duration)

    def record(self, **stats: Any) -> None:
        """Add counts to the stage summary."""
        self.stats.update(stats)

    def start(self) -> None:
        self.start_time = time.monotonic()
        self.end_time = None
        self.error = None

    def complete(self, stats: Optional[Dict[str, Any]] = None) -> None:
        self.end_time = time.monotonic()
        self.success = True
        if stats:
            self.stats.update(stats)

    def skip(self, reason: Optional[str] = None) -> None:
        """Mark the stage as not needed for this run."""
        self.skipped = True
        if reason:
            self.stats["reason"] = reason

    def fail(self, error: str) -> None:
        self.end_time = time.monotonic()
        self.success = False
        self.error = error

    @property
    def duration(self) -> float:
        """Seconds between start and end; 0 for stages that never ran."""
        if self.start_time is None or self.end_time is None:
            return 0.0
        return self.end_time - self.start_time

    def summary(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "duration": self.duration,
            "success": self.success,
            "skipped": self.skipped,
            "error": self.error,
            "stats": self.stats,
        }
