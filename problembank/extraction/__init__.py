"""Problem extraction from innovation cycles."""

from .extractor import ExtractionResult, ProblemExtractor
from .heuristics import (
    build_problem_statement,
    build_title,
    calculate_desperate_user_score,
    determine_validation_status,
)
from .themes import THEME_RULES, classify_theme

__all__ = [
    "ExtractionResult",
    "ProblemExtractor",
    "THEME_RULES",
    "build_problem_statement",
    "build_title",
    "calculate_desperate_user_score",
    "classify_theme",
    "determine_validation_status",
]
