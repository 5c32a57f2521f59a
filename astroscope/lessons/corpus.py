"""
Corpus index.

Holds the immutable lesson collection and answers free-text queries with a
weighted term-overlap ranking. Read-only after construction, so concurrent
searches need no locking.
"""

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from astroscope.config import DEFAULT_TOP_K, FIELD_WEIGHTS, MAX_TOP_K
from astroscope.errors import CorpusLoadError, EmptyQueryError
from astroscope.lessons.schemas import Lesson
from astroscope.utils.text import normalize_terms, tokenize_field

logger = logging.getLogger(__name__)


@dataclass
class ScoredLesson:
    """Single ranked hit."""
    lesson: Lesson
    score: float


def normalize_query(query: str) -> List[str]:
    """
    Normalize a free-text query into distinct terms (first-seen order).

    Raises:
        EmptyQueryError: query has no terms after normalization
    """
    terms = normalize_terms(query or "")
    if not terms:
        raise EmptyQueryError("Query contains no searchable terms")
    return list(dict.fromkeys(terms))


class CorpusIndex:
    """Ranked keyword search over a fixed lesson corpus."""

    def __init__(
        self,
        lessons: Iterable[Lesson],
        top_k: int = DEFAULT_TOP_K,
        field_weights: Optional[Dict[str, float]] = None,
    ):
        self.top_k = top_k
        self.field_weights = dict(field_weights or FIELD_WEIGHTS)

        by_id: Dict[int, Lesson] = {}
        for lesson in lessons:
            if lesson.id in by_id:
                raise CorpusLoadError(f"Duplicate lesson id {lesson.id}")
            by_id[lesson.id] = lesson

        self._by_id = by_id
        self._lessons: Tuple[Lesson, ...] = tuple(sorted(by_id.values(), key=lambda l: l.id))
        # Per-lesson token sets, computed once
        self._field_terms: Dict[int, Dict[str, FrozenSet[str]]] = {
            lesson.id: self._index_fields(lesson) for lesson in self._lessons
        }
        logger.info("[corpus] Indexed %d lessons", len(self._lessons))

    def __len__(self) -> int:
        return len(self._lessons)

    @property
    def lessons(self) -> Tuple[Lesson, ...]:
        return self._lessons

    def get_by_id(self, lesson_id: int) -> Optional[Lesson]:
        """Exact-match lookup. None when the id is not in the corpus."""
        return self._by_id.get(lesson_id)

    def score(self, lesson: Lesson, terms: Iterable[str]) -> float:
        """Weighted term overlap for one lesson."""
        fields = self._field_terms.get(lesson.id) or self._index_fields(lesson)
        total = 0.0
        for term in set(terms):
            for field_name, tokens in fields.items():
                if term in tokens:
                    total += self.field_weights.get(field_name, 0.0)
        return total

    def rank(self, query: str) -> List[ScoredLesson]:
        """All lessons with a positive score, best first, ties by ascending id."""
        terms = normalize_query(query)
        hits = []
        for lesson in self._lessons:
            s = self.score(lesson, terms)
            if s > 0:
                hits.append(ScoredLesson(lesson=lesson, score=s))
        hits.sort(key=lambda h: (-h.score, h.lesson.id))
        return hits

    def search(self, query: str, top_k: Optional[int] = None) -> List[Lesson]:
        """
        Search the corpus.

        Args:
            query: Free-text question
            top_k: Max results (defaults to the index's top_k)

        Returns:
            Ranked lessons, possibly empty (callers treat empty as NoResults)

        Raises:
            EmptyQueryError: query has no terms
        """
        limit = self.top_k if top_k is None else top_k
        limit = max(0, min(limit, MAX_TOP_K))
        hits = self.rank(query)
        logger.debug(
            "[corpus] query=%r matched=%d returning=%d",
            query, len(hits), min(len(hits), limit),
        )
        return [h.lesson for h in hits[:limit]]

    def _index_fields(self, lesson: Lesson) -> Dict[str, FrozenSet[str]]:
        return {
            "title": frozenset(tokenize_field(lesson.title)),
            "driving_event": frozenset(tokenize_field(lesson.driving_event)),
            "lesson_text": frozenset(tokenize_field(lesson.lesson_text)),
            "abstract": frozenset(tokenize_field(lesson.abstract)),
            "recommendation": frozenset(tokenize_field(lesson.recommendation)),
            "mission": frozenset(tokenize_field(lesson.mission)),
            "center": frozenset(tokenize_field(lesson.center)),
            "subjects": frozenset(
                term for subject in lesson.subjects for term in tokenize_field(subject)
            ),
        }
