"""Problem similarity scoring."""

from .engine import SimilarityEngine
from .models import PairScore, SimilarityRunResult, SimilarProblem
from .scorers import KeywordScorer, ThemeScorer, jaccard, normalize_text, word_set

__all__ = [
    "KeywordScorer",
    "PairScore",
    "SimilarProblem",
    "SimilarityEngine",
    "SimilarityRunResult",
    "ThemeScorer",
    "jaccard",
    "normalize_text",
    "word_set",
]
