"""
Context builder.

Turns ranked lessons into bounded, markup-free SanitizedLessons for the prompt.

CONTEXT SIZE MANAGEMENT:
The driving-event narrative and subject tags are deliberately left out of the
context. Raw driving-event text is the noisiest, most markup-heavy field in the
corpus; root cause (from the lesson text) carries the same signal in fewer
characters. Both fields stay searchable in CorpusIndex.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from astroscope.config import (
    DEFAULT_TOP_K,
    EMPTY_FIELD_PLACEHOLDER,
    MAX_ABSTRACT_CHARS,
    MAX_CENTER_CHARS,
    MAX_MISSION_CHARS,
    MAX_RECOMMENDATION_CHARS,
    MAX_ROOT_CAUSE_CHARS,
    MAX_TITLE_CHARS,
)
from astroscope.lessons.schemas import Lesson, LessonMetadata, SanitizedLesson
from astroscope.utils.text import strip_markup, truncate


@dataclass(frozen=True)
class FieldBounds:
    """Max characters per SanitizedLesson field."""
    title: int = MAX_TITLE_CHARS
    abstract: int = MAX_ABSTRACT_CHARS
    root_cause: int = MAX_ROOT_CAUSE_CHARS
    recommendation: int = MAX_RECOMMENDATION_CHARS
    mission: int = MAX_MISSION_CHARS
    center: int = MAX_CENTER_CHARS


class ContextBuilder:
    """Build bounded prompt context from search results."""

    def __init__(self, limit: int = DEFAULT_TOP_K, bounds: Optional[FieldBounds] = None):
        self.limit = limit
        self.bounds = bounds or FieldBounds()

    def build(self, lessons: Sequence[Lesson]) -> List[SanitizedLesson]:
        """
        Sanitize up to `limit` lessons, preserving rank order.

        Pure: no I/O, no shared state, never raises on malformed markup.
        """
        return [self.sanitize(lesson) for lesson in list(lessons)[: self.limit]]

    def sanitize(self, lesson: Lesson) -> SanitizedLesson:
        b = self.bounds
        return SanitizedLesson(
            id=lesson.id,
            title=truncate(strip_markup(lesson.title), b.title),
            abstract=self._clean(lesson.abstract, b.abstract),
            root_cause=self._clean(lesson.lesson_text, b.root_cause),
            recommendation=self._clean(lesson.recommendation, b.recommendation),
            metadata=LessonMetadata(
                mission=truncate(strip_markup(lesson.mission), b.mission),
                center=truncate(strip_markup(lesson.center), b.center),
                subjects=[],
            ),
        )

    def _clean(self, text: str, max_chars: int) -> str:
        cleaned = strip_markup(text)
        if not cleaned:
            return truncate(EMPTY_FIELD_PLACEHOLDER, max_chars)
        return truncate(cleaned, max_chars)


def build_context(lessons: Sequence[Lesson], limit: int = DEFAULT_TOP_K) -> List[SanitizedLesson]:
    """Convenience function."""
    return ContextBuilder(limit).build(lessons)
