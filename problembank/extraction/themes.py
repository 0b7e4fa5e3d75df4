"""Keyword theme classification."""

import re
from typing import Iterable, List, Optional, Pattern, Tuple

DEFAULT_THEME = "other"

# Evaluated top to bottom; the first pattern that matches decides the theme,
# so order matters more than how specific a pattern is.
THEME_RULES: List[Tuple[Pattern[str], str]] = [
    (
        re.compile(r"health|patient|hospital|clinic|medical|doctor|nurse|pharma|drug|medicine"),
        "healthcare",
    ),
    (
        re.compile(r"education|student|learner|teacher|school|college|course|exam|study"),
        "education",
    ),
    (
        re.compile(r"farm|crop|agriculture|soil|harvest|irrigation|farmer|plant"),
        "agriculture",
    ),
    (
        re.compile(r"environment|waste|pollution|water|air|climate|sustainability|recycle"),
        "environment",
    ),
    (
        re.compile(r"community|social|village|society|public|welfare|volunteer"),
        "community",
    ),
    (
        re.compile(r"myjkkn|admin|portal|erp|dashboard|platform|attendance|approval|workflow"),
        "platform",
    ),
]


def classify_theme(
    text: str,
    rules: Optional[List[Tuple[Pattern[str], str]]] = None,
) -> str:
    """Return the theme of the first rule matching the lower-cased text."""
    lowered = text.lower()
    for pattern, theme in rules or THEME_RULES:
        if pattern.search(lowered):
            return theme
    return DEFAULT_THEME


def theme_text(parts: Iterable[Optional[str]]) -> str:
    """Join the non-empty text fields used for classification."""
    return " ".join(p.strip() for p in parts if p and p.strip())
