"""Pairwise keyword similarity over the open-problem corpus."""

import logging
from typing import Dict, FrozenSet, Iterator, List, Optional, Tuple

import pendulum

from ..config import SimilarityConfig
from ..db.store import ProblemBankStore
from ..errors import NotFoundError, ValidationError
from ..models import ProblemRecord, SimilarityEdge
from .models import PairScore, SimilarityRunResult, SimilarProblem
from .scorers import KeywordScorer, ThemeScorer, jaccard

logger = logging.getLogger(__name__)

THEME_FALLBACK_SCORE = 0.8
TEXT_FALLBACK_SCORE = 0.5
PREVIEW_LENGTH = 200
TITLE_KEYWORD_MIN_LENGTH = 4


def title_keyword(title: str) -> Optional[str]:
    """First word of the title long enough to search on, lower-cased."""
    for word in title.lower().split():
        if len(word) >= TITLE_KEYWORD_MIN_LENGTH:
            return word
    return None


class SimilarityEngine:
    """Score problem pairs and store edges above a threshold.

    The engine only ever adds or overwrites edges. An edge whose pair drops
    below the threshold after an edit keeps its old score until the pair
    scores above the threshold again.
    """

    def __init__(
        self,
        store: ProblemBankStore,
        config: Optional[SimilarityConfig] = None,
    ) -> None:
        """
        Initialize similarity engine.

        Args:
            store: Problem and edge storage
            config: Similarity configuration
        """
        self.store = store
        self.config = config or SimilarityConfig()
        self.theme_scorer = ThemeScorer(match_score=self.config.theme_match_score)
        self.keyword_scorer = KeywordScorer(min_word_length=self.config.min_word_length)

    def score_pair(
        self,
        a: ProblemRecord,
        b: ProblemRecord,
        words: Optional[Dict[str, FrozenSet[str]]] = None,
    ) -> PairScore:
        """Score one pair. Word sets may be passed in from a corpus snapshot."""
        first, second = (a, b) if a.id < b.id else (b, a)
        words_a = words[first.id] if words else self.keyword_scorer.words(first)
        words_b = words[second.id] if words else self.keyword_scorer.words(second)

        theme = self.theme_scorer.score(first, second)
        if not words_a or not words_b:
            text = 0.0
            total = theme
        else:
            text = jaccard(words_a, words_b)
            total = text * self.config.text_weight + theme * self.config.theme_weight

        return PairScore(
            problem_id_a=first.id,
            problem_id_b=second.id,
            text_score=text,
            theme_score=theme,
            total_score=max(0.0, min(1.0, total)),
        )

    def _pairs(
        self,
        problems: List[ProblemRecord],
        target: Optional[ProblemRecord],
    ) -> Iterator[Tuple[ProblemRecord, ProblemRecord]]:
        """Yield every pair to evaluate exactly once, smaller id first."""
        if target is not None:
            for other in problems:
                if other.id == target.id:
                    continue
                yield (target, other) if target.id < other.id else (other, target)
            return

        for source in problems:
            for other in problems:
                if source.id >= other.id:
                    continue
                yield source, other

    def compute(
        self,
        threshold: Optional[float] = None,
        problem_id: Optional[str] = None,
    ) -> SimilarityRunResult:
        """
        Compute similarities for the open-problem corpus.

        With a problem_id, every pair touching that problem is scored, on
        whichever side of the pair its id falls. This differs from a scan that
        keeps only pairs where the target holds the smaller id; edges to older
        problems are refreshed too.

        Args:
            threshold: Minimum score for an edge to be stored
            problem_id: Only evaluate pairs touching this problem

        Returns:
            Counts for the pass. Fewer than two open problems is a no-op.
        """
        if threshold is None:
            threshold = self.config.threshold
        if not 0.0 <= threshold <= 1.0:
            raise ValidationError(f"Threshold must be between 0 and 1, got {threshold}")

        computed_at = pendulum.now("UTC")
        problems = self.store.list_open_problems()

        if len(problems) < 2:
            logger.info("Not enough problems to compute similarities (%d open)", len(problems))
            return SimilarityRunResult(
                problem_count=len(problems),
                threshold=threshold,
                target_problem_id=problem_id,
                computed_at=computed_at,
            )

        target = None
        if problem_id is not None:
            target = next((p for p in problems if p.id == problem_id), None)
            if target is None:
                raise NotFoundError(f"Open problem not found: {problem_id}")

        words = {p.id: self.keyword_scorer.words(p) for p in problems}

        evaluated = 0
        written = 0
        batch: List[SimilarityEdge] = []
        for a, b in self._pairs(problems, target):
            evaluated += 1
            pair = self.score_pair(a, b, words)
            if pair.total_score < threshold:
                continue

            batch.append(SimilarityEdge(
                problem_id_a=pair.problem_id_a,
                problem_id_b=pair.problem_id_b,
                similarity_score=pair.total_score,
                similarity_type=self.config.method,
                computed_at=computed_at,
                algorithm_version=self.config.algorithm_version,
            ))
            if len(batch) >= self.config.batch_size:
                written += self.store.upsert_similarities(batch)
                batch = []

        if batch:
            written += self.store.upsert_similarities(batch)

        logger.info(
            "Similarity pass over %d problems: %d pairs evaluated, %d edges written (threshold %.2f)",
            len(problems),
            evaluated,
            written,
            threshold,
        )
        return SimilarityRunResult(
            problem_count=len(problems),
            pairs_evaluated=evaluated,
            similarities_computed=written,
            threshold=threshold,
            target_problem_id=problem_id,
            computed_at=computed_at,
        )

    def similar_problems(self, problem_id: str, limit: int = 5) -> List[SimilarProblem]:
        """
        Problems related to the given one, best first.

        Stored edges are used when any exist. Otherwise open problems sharing
        the theme come first, then problems whose title or statement mentions
        the first significant word of this title, up to the limit.
        """
        source = self.store.get_problem(problem_id)
        if source is None:
            raise NotFoundError(f"Problem not found: {problem_id}")

        edges = self.store.list_similarities(problem_id)[:limit]
        if edges:
            others = {p.id: p for p in self.store.get_problems(e.other(problem_id) for e in edges)}
            return [
                self._similar(others[e.other(problem_id)], e.similarity_score, "stored_edges")
                for e in edges
                if e.other(problem_id) in others
            ]

        candidates = [p for p in self.store.list_open_problems() if p.id != problem_id]
        similar: List[SimilarProblem] = []
        seen = set()

        if source.theme is not None:
            for problem in candidates:
                if len(similar) >= limit:
                    break
                if problem.theme == source.theme:
                    seen.add(problem.id)
                    similar.append(self._similar(problem, THEME_FALLBACK_SCORE, "theme_fallback"))

        keyword = title_keyword(source.title)
        if keyword is not None:
            for problem in candidates:
                if len(similar) >= limit:
                    break
                if problem.id in seen:
                    continue
                if keyword in problem.title.lower() or keyword in problem.problem_statement.lower():
                    seen.add(problem.id)
                    similar.append(self._similar(problem, TEXT_FALLBACK_SCORE, "text_fallback"))

        return similar

    @staticmethod
    def _similar(problem: ProblemRecord, score: float, method: str) -> SimilarProblem:
        return SimilarProblem(
            id=problem.id,
            title=problem.title,
            problem_statement=problem.problem_statement[:PREVIEW_LENGTH],
            theme=problem.theme,
            similarity_score=score,
            method=method,
        )
