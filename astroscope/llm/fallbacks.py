# FILE: astroscope/llm/fallbacks.py
"""
Fallback handling for grounded answers.

FALLBACK SCENARIOS:

1. Generation times out:
   - Late response (if any) is discarded
   - Log "MODEL_TIMEOUT"
   - Serve the deterministic fallback answer

2. Generation raises:
   - Log "MODEL_ERROR"
   - Serve the deterministic fallback answer

3. Generation returns empty text:
   - Log "EMPTY_RESPONSE"
   - Serve the deterministic fallback answer

Timeout and failure look the same to the caller; the FailureType is kept on
the result for logging only. The fallback answer is built from the context
alone: how many lessons were considered and the most relevant title, so the
user still gets partial value.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Sequence

from astroscope.config import FALLBACK_CITATION_COUNT
from astroscope.lessons.schemas import SanitizedLesson

logger = logging.getLogger(__name__)


class FailureType(str, Enum):
    """Why the fallback path was taken."""
    MODEL_TIMEOUT = "MODEL_TIMEOUT"
    MODEL_ERROR = "MODEL_ERROR"
    EMPTY_RESPONSE = "EMPTY_RESPONSE"


@dataclass
class FallbackEvent:
    """Record of a fallback for logs."""
    failure_type: FailureType
    message: str
    context_size: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "failure_type": self.failure_type.value,
            "message": self.message,
            "context_size": self.context_size,
            "timestamp": self.timestamp.isoformat(),
        }


def build_fallback_answer(context: Sequence[SanitizedLesson]) -> str:
    """Deterministic answer naming the lesson count and the top title."""
    text = f"I found {len(context)} relevant NASA lessons for your query."
    if context:
        top = context[0]
        title = top.title or f"Lesson {top.id}"
        mission = top.metadata.mission or "a NASA mission"
        text += f' The most relevant is "{title}" from {mission}.'
    text += (
        " However, I'm currently unable to provide a detailed analysis."
        " Please try again or rephrase your question."
    )
    return text


def fallback_citations(context: Sequence[SanitizedLesson]) -> List[int]:
    """Ids of the top context lessons, used when the model produced nothing citable."""
    return [lesson.id for lesson in list(context)[:FALLBACK_CITATION_COUNT]]


def record_fallback(failure_type: FailureType, message: str, context_size: int) -> FallbackEvent:
    event = FallbackEvent(failure_type=failure_type, message=message, context_size=context_size)
    logger.warning(
        "[fallback] %s: %s (context=%d lessons)",
        failure_type.value, message, context_size,
    )
    return event
