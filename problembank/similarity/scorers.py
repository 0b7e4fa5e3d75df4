"""Individual scoring components for problem similarity."""

import re
from abc import ABC, abstractmethod
from typing import FrozenSet

from ..models import ProblemRecord

_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Lower-case, replace punctuation with spaces and collapse whitespace."""
    text = _NON_WORD.sub(" ", text.lower())
    return _WHITESPACE.sub(" ", text).strip()


def word_set(text: str, min_length: int = 4) -> FrozenSet[str]:
    """Distinct words of at least min_length characters."""
    return frozenset(w for w in normalize_text(text).split(" ") if len(w) >= min_length)


def jaccard(words_a: FrozenSet[str], words_b: FrozenSet[str]) -> float:
    """Intersection over union of two word sets."""
    union = words_a | words_b
    if not union:
        return 0.0
    return len(words_a & words_b) / len(union)


class BaseScorer(ABC):
    """Base class for pairwise scoring components."""

    @abstractmethod
    def score(self, a: ProblemRecord, b: ProblemRecord) -> float:
        """
        Score a pair of problems from 0.0 to 1.0.

        Args:
            a: First problem
            b: Second problem

        Returns:
            Score between 0.0 and 1.0
        """
        pass


class ThemeScorer(BaseScorer):
    """Fixed score when both problems carry the same theme."""

    def __init__(self, match_score: float = 0.5) -> None:
        self.match_score = match_score

    def score(self, a: ProblemRecord, b: ProblemRecord) -> float:
        if a.theme is not None and a.theme == b.theme:
            return self.match_score
        return 0.0


class KeywordScorer(BaseScorer):
    """Jaccard overlap of the problems' significant words."""

    def __init__(self, min_word_length: int = 4) -> None:
        """
        Initialize keyword scorer.

        Args:
            min_word_length: Shorter words are ignored
        """
        self.min_word_length = min_word_length

    def words(self, problem: ProblemRecord) -> FrozenSet[str]:
        return word_set(problem.search_text, self.min_word_length)

    def score(self, a: ProblemRecord, b: ProblemRecord) -> float:
        return jaccard(self.words(a), self.words(b))
