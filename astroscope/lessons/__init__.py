"""Lesson corpus: records, storage and ranked search."""
from .schemas import (
    Lesson,
    LessonMetadata,
    SanitizedLesson,
    format_lesson_detail,
)
from .corpus import (
    CorpusIndex,
    ScoredLesson,
    normalize_query,
)
