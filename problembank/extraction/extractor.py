"""Extract problem bank records from innovation cycles."""

import logging
import math
from datetime import datetime
from typing import Any, Optional

import pendulum
from pydantic import BaseModel, Field

from ..db.store import ProblemBankStore
from ..errors import CycleNotFoundError, DuplicateExtractionError, ProblemBankError, ValidationError
from ..models import (
    CycleAggregate,
    Evidence,
    ProblemRecord,
    ProblemStatus,
)
from .heuristics import (
    build_problem_statement,
    build_title,
    calculate_desperate_user_score,
    determine_validation_status,
    question_text,
)
from .themes import classify_theme, theme_text

logger = logging.getLogger(__name__)


class ExtractionResult(BaseModel):
    """Outcome of extracting one cycle."""

    problem_id: str = Field(..., description="Created problem id")
    cycle_id: str = Field(..., description="Source cycle id")
    title: str = Field(..., description="Extracted title")
    evidence_written: int = Field(0, description="Evidence records stored")
    evidence_failed: int = Field(0, description="Evidence records that could not be stored")


def _severity(value: Optional[int]) -> Optional[int]:
    if value is None or not 1 <= value <= 10:
        return None
    return value


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _pain_level(value: Any) -> Optional[int]:
    try:
        level = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(level):
        return None
    return max(1, min(10, int(round(level))))


def _collected_at(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        parsed = pendulum.parse(str(value))
    except (TypeError, ValueError):
        logger.debug("Ignoring unparseable interview date %r", value)
        return None
    # Durations and bare times parse too; only instants are kept
    return parsed if isinstance(parsed, datetime) else None


class ProblemExtractor:
    """Turn a cycle aggregate into a problem bank record plus evidence."""

    def __init__(self, store: ProblemBankStore) -> None:
        """
        Initialize extractor.

        Args:
            store: Storage used for the cycle lookup and all writes
        """
        self.store = store

    def build_record(
        self,
        cycle: CycleAggregate,
        institution_id: Optional[str] = None,
        submitted_by: Optional[str] = None,
        source_event: Optional[str] = None,
    ) -> ProblemRecord:
        """Apply the extraction heuristics without touching storage."""
        problem = cycle.problem
        context = cycle.context
        value = cycle.value_assessment
        impact = cycle.impact_assessment

        solved = bool(impact is not None and impact.completed)
        theme_source = theme_text([
            question_text(problem),
            context.problem_description if context else None,
            context.who_affected if context else None,
            context.where_occurs if context else None,
        ])

        return ProblemRecord(
            original_cycle_id=cycle.id,
            source_type="cycle",
            source_year=pendulum.now("UTC").year,
            source_event=source_event,
            title=build_title(cycle),
            problem_statement=build_problem_statement(problem, context),
            theme=classify_theme(theme_source),
            who_affected=context.who_affected if context else None,
            when_occurs=context.when_occurs if context else None,
            where_occurs=context.where_occurs if context else None,
            frequency=context.frequency if context else None,
            severity_rating=_severity(context.severity_rating) if context else None,
            current_workaround=context.current_workaround if context else None,
            validation_status=determine_validation_status(value, impact),
            users_interviewed=(value.interviews_completed or 0) if value else 0,
            desperate_user_count=(value.desperate_user_count or 0) if value else 0,
            desperate_user_score=calculate_desperate_user_score(value),
            institution_id=institution_id,
            submitted_by=submitted_by or cycle.user_id,
            status=ProblemStatus.SOLVED if solved else ProblemStatus.OPEN,
            is_open_for_attempts=not solved,
            best_solution_cycle_id=cycle.id if solved else None,
            metadata={
                "original_cycle_name": cycle.name,
                "build_url": cycle.build_url,
                "impact_score": impact.impact_score if impact else None,
            },
        )

    def interview_evidence(
        self,
        problem_id: str,
        item: Any,
        collected_by: Optional[str] = None,
    ) -> Optional[Evidence]:
        """Map one interview entry onto an evidence record.

        Returns None for entries that carry nothing usable. Raises ValueError
        when the entry cannot be turned into a valid record.
        """
        if isinstance(item, dict):
            content = item.get("notes") or item.get("quote") or "Interview conducted"
            return Evidence(
                problem_id=problem_id,
                evidence_type="interview",
                content=str(content),
                source_name=_text(item.get("name")) or "Anonymous",
                source_role=_text(item.get("role")),
                pain_level=_pain_level(item.get("pain_level")),
                collected_at=_collected_at(item.get("date")),
                collected_by=collected_by,
            )
        if isinstance(item, str) and item.strip():
            return Evidence(
                problem_id=problem_id,
                content=item.strip(),
                source_name="Anonymous",
                collected_by=collected_by,
            )
        return None

    def extract(
        self,
        cycle_id: str,
        source_event: Optional[str] = None,
        submitted_by: Optional[str] = None,
    ) -> ExtractionResult:
        """
        Extract a cycle into the problem bank.

        Args:
            cycle_id: Cycle to extract
            source_event: Event the cycle was run under
            submitted_by: Submitting user (defaults to the cycle owner)

        Returns:
            Extraction result with the new problem id

        Raises:
            ValidationError: cycle_id is empty
            DuplicateExtractionError: the cycle was already extracted
            CycleNotFoundError: the cycle does not exist
            PersistenceError: the problem could not be stored
        """
        if not cycle_id or not cycle_id.strip():
            raise ValidationError("Missing required field: cycle_id")

        existing = self.store.find_problem_id_by_cycle(cycle_id)
        if existing is not None:
            raise DuplicateExtractionError(cycle_id, existing)

        cycle = self.store.get_cycle(cycle_id)
        if cycle is None:
            raise CycleNotFoundError(cycle_id)

        institution_id = None
        if cycle.user_id:
            institution_id = self.store.get_user_institution(cycle.user_id)

        record = self.build_record(
            cycle,
            institution_id=institution_id,
            submitted_by=submitted_by,
            source_event=source_event,
        )
        problem = self.store.insert_problem(record)
        logger.info(
            "Extracted cycle %s into problem %s (%s, %s)",
            cycle_id,
            problem.id,
            problem.theme,
            problem.validation_status,
        )

        written = failed = 0
        interviews = cycle.context.interviews if cycle.context else None
        if not isinstance(interviews, list):
            interviews = []

        for index, item in enumerate(interviews):
            try:
                evidence = self.interview_evidence(problem.id, item, problem.submitted_by)
                if evidence is None:
                    continue
                self.store.insert_evidence(evidence)
                written += 1
            except (ValueError, ProblemBankError) as e:
                failed += 1
                logger.warning(
                    "Failed to save interview %d as evidence for problem %s: %s",
                    index,
                    problem.id,
                    e,
                )

        return ExtractionResult(
            problem_id=problem.id,
            cycle_id=cycle_id,
            title=problem.title,
            evidence_written=written,
            evidence_failed=failed,
        )
