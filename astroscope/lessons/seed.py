"""
Corpus loading.

Two sources:
1. Seed file (data/lessons_seed.json) - {"lessons": [...]} or a bare list
2. lessons table - seeded from the file on first run
"""

import json
import logging
from pathlib import Path
from typing import Any, List

from sqlalchemy.orm import Session

from astroscope.errors import CorpusLoadError
from astroscope.lessons.models import LessonRecord
from astroscope.lessons.schemas import Lesson

logger = logging.getLogger(__name__)


def parse_lessons(payload: Any) -> List[Lesson]:
    """Convert a decoded seed payload into Lessons."""
    if isinstance(payload, dict):
        payload = payload.get("lessons")
    if not isinstance(payload, list):
        raise CorpusLoadError("Seed payload must be a list of lessons or {'lessons': [...]}")

    lessons = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            raise CorpusLoadError(f"Seed entry {index} is not an object")
        lessons.append(Lesson.from_dict(item))
    return lessons


def load_seed_lessons(path: Path) -> List[Lesson]:
    """
    Read lessons from a JSON seed file.

    Raises:
        CorpusLoadError: file missing, unreadable, or malformed
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise CorpusLoadError(f"Cannot read seed file {path}: {e}") from e

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CorpusLoadError(f"Seed file {path} is not valid JSON: {e}") from e

    lessons = parse_lessons(payload)
    logger.info("[seed] Loaded %d lessons from %s", len(lessons), path)
    return lessons


def seed_database(db: Session, lessons: List[Lesson]) -> int:
    """Upsert lessons into the lessons table. Returns the number written."""
    for lesson in lessons:
        db.merge(LessonRecord.from_lesson(lesson))
    db.commit()
    logger.info("[seed] Upserted %d lessons into database", len(lessons))
    return len(lessons)


def load_lessons_from_db(db: Session) -> List[Lesson]:
    """All lessons in the table, ordered by id."""
    records = db.query(LessonRecord).order_by(LessonRecord.id).all()
    return [r.to_lesson() for r in records]


def load_corpus(source: str, seed_path: Path, db: Session = None) -> List[Lesson]:
    """
    Load the corpus from the configured source.

    "database" reads the lessons table, seeding it from the file when empty.
    Anything else reads the seed file directly.
    """
    if source == "database":
        if db is None:
            raise CorpusLoadError("Database corpus source requires a session")
        lessons = load_lessons_from_db(db)
        if not lessons:
            logger.info("[seed] lessons table empty, seeding from %s", seed_path)
            seed_database(db, load_seed_lessons(seed_path))
            lessons = load_lessons_from_db(db)
        return lessons

    return load_seed_lessons(seed_path)
