"""
SQLAlchemy model for the lesson corpus table.

The table is a storage collaborator only: the pipeline reads it once at
startup into immutable Lesson objects and never writes during a session.
"""

from sqlalchemy import JSON, Column, Integer, String, Text

from astroscope.db import Base
from astroscope.lessons.schemas import Lesson


class LessonRecord(Base):
    """One lessons-learned record."""
    __tablename__ = "lessons"

    id = Column(Integer, primary_key=True, autoincrement=False)
    title = Column(String(500), nullable=False, default="")
    abstract = Column(Text, nullable=True)
    driving_event = Column(Text, nullable=True)
    lesson_text = Column(Text, nullable=True)
    recommendation = Column(Text, nullable=True)
    mission = Column(String(255), nullable=True)
    center = Column(String(100), nullable=True)
    primary_subject = Column(String(255), nullable=True)
    secondary_subjects = Column(JSON, nullable=True)

    def to_lesson(self) -> Lesson:
        return Lesson(
            id=self.id,
            title=self.title or "",
            abstract=self.abstract or "",
            driving_event=self.driving_event or "",
            lesson_text=self.lesson_text or "",
            recommendation=self.recommendation or "",
            mission=self.mission or "",
            center=self.center or "",
            primary_subject=self.primary_subject or "",
            secondary_subjects=tuple(self.secondary_subjects or ()),
        )

    @classmethod
    def from_lesson(cls, lesson: Lesson) -> "LessonRecord":
        return cls(
            id=lesson.id,
            title=lesson.title,
            abstract=lesson.abstract,
            driving_event=lesson.driving_event,
            lesson_text=lesson.lesson_text,
            recommendation=lesson.recommendation,
            mission=lesson.mission,
            center=lesson.center,
            primary_subject=lesson.primary_subject,
            secondary_subjects=list(lesson.secondary_subjects),
        )

    def __repr__(self):
        return f"<LessonRecord {self.id}: {self.title[:40]}>"
