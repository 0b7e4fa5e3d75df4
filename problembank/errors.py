"""Errors raised by the problem bank pipeline."""

from typing import Optional


class ProblemBankError(Exception):
    """Base class for problem bank errors."""


class ValidationError(ProblemBankError):
    """Required input is missing or malformed. Raised before any write."""


class DuplicateError(ProblemBankError):
    """A record with the same unique key already exists."""


class DuplicateExtractionError(DuplicateError):
    """The cycle has already been extracted into the problem bank."""

    def __init__(self, cycle_id: str, problem_id: Optional[str]) -> None:
        self.cycle_id = cycle_id
        self.problem_id = problem_id
        super().__init__(
            f"Problem already exists in bank for cycle {cycle_id} (problem {problem_id})"
        )


class NotFoundError(ProblemBankError):
    """A referenced cycle, problem or cluster does not exist."""


class CycleNotFoundError(NotFoundError):
    """The source cycle does not exist."""

    def __init__(self, cycle_id: str) -> None:
        self.cycle_id = cycle_id
        super().__init__(f"Cycle not found: {cycle_id}")


class PersistenceError(ProblemBankError):
    """Storage failure, surfaced with the underlying message."""
