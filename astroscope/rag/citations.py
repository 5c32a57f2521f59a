"""
Citation extraction.

Recognized reference forms (case-insensitive), stated as data:
- bracketed:  [Lesson 5001]
- lesson_id:  Lesson ID: 5001
- bare_id:    ID: 5001

A numeral only counts when it is one of the ids supplied as context for the
turn. Anything else is dropped, so the model cannot cite a lesson it was
never shown.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Pattern, Tuple

from astroscope.config import LLIS_LESSON_URL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CitationPattern:
    name: str
    regex: Pattern[str]


# Lesson ids are at most 9 digits; a longer numeral is not a reference
_ID = r"(\d{1,9})(?!\d)"

CITATION_PATTERNS: Tuple[CitationPattern, ...] = (
    CitationPattern("bracketed", re.compile(r"\[Lesson\s+" + _ID + r"\]", re.IGNORECASE)),
    CitationPattern("lesson_id", re.compile(r"Lesson\s+ID:\s*" + _ID, re.IGNORECASE)),
    CitationPattern("bare_id", re.compile(r"ID:\s*" + _ID, re.IGNORECASE)),
)

# Bracketed tag not already followed by a markdown link target
_UNLINKED_TAG = re.compile(r"\[Lesson\s+" + _ID + r"\](?!\()", re.IGNORECASE)


class CitationExtractor:
    """Resolve lesson references in generated text against supplied ids."""

    def __init__(self, patterns: Tuple[CitationPattern, ...] = CITATION_PATTERNS):
        self.patterns = patterns

    def extract(self, text: str, valid_ids: Iterable[int]) -> List[int]:
        """
        Return cited ids in first-seen order, deduplicated, limited to valid_ids.
        """
        if not text:
            return []
        allowed = set(valid_ids)

        # id -> earliest offset in text
        first_seen: Dict[int, int] = {}
        for pattern in self.patterns:
            for match in pattern.regex.finditer(text):
                lesson_id = int(match.group(1))
                if lesson_id not in allowed:
                    logger.debug(
                        "[citations] CitationOutOfRange: %s (%s) not in context",
                        lesson_id, pattern.name,
                    )
                    continue
                offset = match.start()
                if lesson_id not in first_seen or offset < first_seen[lesson_id]:
                    first_seen[lesson_id] = offset

        return sorted(first_seen, key=lambda lesson_id: first_seen[lesson_id])

    def linkify(self, text: str) -> str:
        """Rewrite [Lesson 1234] tags as markdown links to the canonical record."""
        def _link(match):
            lesson_id = int(match.group(1))
            url = LLIS_LESSON_URL.format(lesson_id=lesson_id)
            return f"[Lesson {lesson_id}]({url})"

        return _UNLINKED_TAG.sub(_link, text or "")


def extract_citations(text: str, valid_ids: Iterable[int]) -> List[int]:
    """Convenience function."""
    return CitationExtractor().extract(text, valid_ids)
