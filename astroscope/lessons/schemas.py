"""
Lesson records.

Lesson is the source-of-truth record, loaded once and never mutated.
SanitizedLesson is the bounded, markup-free view built per query by
ContextBuilder and thrown away when the query completes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from astroscope.config import LLIS_LESSON_URL
from astroscope.errors import CorpusLoadError

# Seed-file key -> attribute name
_FIELD_ALIASES: Dict[str, str] = {
    "lesson_id": "id",
    "driving_event": "driving_event",
    "drivingEvent": "driving_event",
    "lesson": "lesson_text",
    "lessonText": "lesson_text",
    "subject_primary": "primary_subject",
    "primarySubject": "primary_subject",
    "subject_secondary": "secondary_subjects",
    "secondarySubjects": "secondary_subjects",
}

_TEXT_FIELDS = (
    "title",
    "abstract",
    "driving_event",
    "lesson_text",
    "recommendation",
    "mission",
    "center",
    "primary_subject",
)


@dataclass(frozen=True)
class Lesson:
    """A lessons-learned record."""
    id: int
    title: str = ""
    abstract: str = ""
    driving_event: str = ""
    lesson_text: str = ""
    recommendation: str = ""
    mission: str = ""
    center: str = ""
    primary_subject: str = ""
    secondary_subjects: Tuple[str, ...] = ()

    @property
    def subjects(self) -> List[str]:
        subjects = [self.primary_subject, *self.secondary_subjects]
        return [s for s in subjects if s]

    @property
    def llis_url(self) -> str:
        return LLIS_LESSON_URL.format(lesson_id=self.id)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Lesson":
        """
        Build a Lesson from a seed/API mapping.

        Missing or null text fields load as empty strings. A record without a
        positive integer id cannot be loaded.
        """
        values: Dict[str, Any] = {}
        for key, value in data.items():
            name = _FIELD_ALIASES.get(key, key)
            values[name] = value

        raw_id = values.get("id")
        try:
            lesson_id = int(raw_id)
        except (TypeError, ValueError):
            raise CorpusLoadError(f"Lesson record has no usable id: {raw_id!r}")
        if isinstance(raw_id, bool) or lesson_id <= 0:
            raise CorpusLoadError(f"Lesson id must be a positive integer: {raw_id!r}")

        text = {name: str(values.get(name) or "") for name in _TEXT_FIELDS}

        secondary = values.get("secondary_subjects") or ()
        if isinstance(secondary, str):
            secondary = (secondary,)

        return cls(
            id=lesson_id,
            secondary_subjects=tuple(str(s) for s in secondary if s),
            **text,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "abstract": self.abstract,
            "driving_event": self.driving_event,
            "lesson_text": self.lesson_text,
            "recommendation": self.recommendation,
            "mission": self.mission,
            "center": self.center,
            "primary_subject": self.primary_subject,
            "secondary_subjects": list(self.secondary_subjects),
        }


@dataclass
class LessonMetadata:
    mission: str = ""
    center: str = ""
    subjects: List[str] = field(default_factory=list)


@dataclass
class SanitizedLesson:
    """Bounded, display-safe view of a Lesson for prompt inclusion."""
    id: int
    title: str
    abstract: str
    root_cause: str
    recommendation: str
    metadata: LessonMetadata = field(default_factory=LessonMetadata)


def format_lesson_detail(lesson: Optional[Lesson], lesson_id: Optional[int] = None) -> str:
    """Markdown detail block used when a citation is opened in-app."""
    if lesson is None:
        return f"Lesson {lesson_id} is not in the current corpus."
    return (
        f"**Lesson {lesson.id}: {lesson.title}**\n\n"
        f"{lesson.abstract}\n\n"
        f"**Mission:** {lesson.mission or 'N/A'}\n"
        f"**Center:** {lesson.center or 'N/A'}\n\n"
        f"_Full record: {lesson.llis_url}_"
    )
