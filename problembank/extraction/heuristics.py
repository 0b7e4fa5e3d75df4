"""Fallback heuristics that turn cycle step answers into problem fields."""

from typing import List, Optional, Tuple

from ..models import (
    ContextDiscovery,
    CycleAggregate,
    ImpactAssessment,
    ProblemDiscovery,
    ValidationStatus,
    ValueAssessment,
)

MAX_TITLE_LENGTH = 200
ELLIPSIS = "…"
UNTITLED = "Untitled Problem"
EMPTY_STATEMENT = "Problem statement not provided"

# Discovery questions in the order the wizard asks them
DISCOVERY_QUESTIONS: List[Tuple[str, str]] = [
    ("q_takes_too_long", "What takes too long"),
    ("q_repetitive", "What is repetitive"),
    ("q_lookup_repeatedly", "What gets looked up repeatedly"),
    ("q_complaints", "What people complain about"),
    ("q_would_pay", "What people would pay to fix"),
]

DESPERATE_USER_CRITERIA = [
    "multiple_have_it",
    "complained_before",
    "doing_something",
    "light_up_at_solution",
    "ask_when_can_use",
]


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def discovery_answers(problem: Optional[ProblemDiscovery]) -> List[Tuple[str, str]]:
    """Non-empty discovery answers as (label, answer) in question order."""
    if problem is None:
        return []
    answers = []
    for field, label in DISCOVERY_QUESTIONS:
        answer = _clean(getattr(problem, field))
        if answer:
            answers.append((label, answer))
    return answers


def truncate_title(title: str, limit: int = MAX_TITLE_LENGTH) -> str:
    """Cut a title to the limit, marking the cut with an ellipsis."""
    if len(title) <= limit:
        return title
    return title[: limit - len(ELLIPSIS)].rstrip() + ELLIPSIS


def build_title(cycle: CycleAggregate) -> str:
    """Pick the most refined problem text available as the title."""
    problem = cycle.problem
    candidates: List[Optional[str]] = []
    if problem is not None:
        candidates.append(problem.refined_statement)
        candidates.append(problem.selected_question)
        candidates.extend(answer for _, answer in discovery_answers(problem)[:1])
    candidates.append(cycle.name)

    for candidate in candidates:
        cleaned = _clean(candidate)
        if cleaned:
            return truncate_title(cleaned)
    return UNTITLED


def build_problem_statement(
    problem: Optional[ProblemDiscovery],
    context: Optional[ContextDiscovery],
) -> str:
    """Assemble the long-form statement from every answer we have."""
    parts: List[str] = []
    seen = set()

    if problem is not None:
        refined = _clean(problem.refined_statement)
        selected = _clean(problem.selected_question)
        if refined:
            parts.append(refined)
            seen.add(refined)
        if selected and selected not in seen:
            parts.append(selected)
            seen.add(selected)

        for label, answer in discovery_answers(problem):
            if answer in seen:
                continue
            parts.append(f"{label}:\n{answer}")
            seen.add(answer)

    if context is not None:
        description = _clean(context.problem_description)
        if description:
            parts.append(description)

        who = _clean(context.who_affected)
        when = _clean(context.when_occurs)
        if who and when:
            parts.append(f"Affects {who} {when}.")

    return "\n\n".join(parts) or EMPTY_STATEMENT


def determine_validation_status(
    value: Optional[ValueAssessment],
    impact: Optional[ImpactAssessment],
) -> ValidationStatus:
    """Strongest validation the cycle has evidence for."""
    if impact is not None and impact.completed and (impact.total_users or 0) > 0:
        return ValidationStatus.MARKET_VALIDATED

    if value is not None and value.desperate_user_confirmed:
        return ValidationStatus.DESPERATE_USER_CONFIRMED

    if value is not None and (value.interviews_completed or 0) > 0:
        return ValidationStatus.USER_TESTED

    return ValidationStatus.UNVALIDATED


def calculate_desperate_user_score(value: Optional[ValueAssessment]) -> Optional[int]:
    """Count met desperate-user criteria; None when nothing is met."""
    if value is None:
        return None

    score = sum(1 for criterion in DESPERATE_USER_CRITERIA if getattr(value, criterion))
    return score if score > 0 else None


def question_text(problem: Optional[ProblemDiscovery]) -> Optional[str]:
    """The question the cycle settled on, for theme detection.

    Selected question and refined statement are both used when present;
    otherwise the first discovery answer stands in.
    """
    if problem is None:
        return None
    parts = []
    for candidate in (problem.selected_question, problem.refined_statement):
        cleaned = _clean(candidate)
        if cleaned and cleaned not in parts:
            parts.append(cleaned)
    if parts:
        return " ".join(parts)
    answers = discovery_answers(problem)
    return answers[0][1] if answers else None
