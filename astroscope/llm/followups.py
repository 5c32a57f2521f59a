"""
Follow-up question suggestions.

Asks the generator for a few follow-up questions based on the most recent
exchanges. Suggestions are a nice-to-have: any failure returns an empty list.
"""

import asyncio
import json
import logging
import re
from typing import List, Optional, Sequence, Tuple

from astroscope.config import FOLLOW_UP_COUNT, GENERATION_TIMEOUT_MS
from astroscope.llm.clients import TextGenerator
from astroscope.rag.prompts import PromptComposer

logger = logging.getLogger(__name__)

CODE_FENCE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)


def parse_follow_ups(raw: str, limit: int = FOLLOW_UP_COUNT) -> List[str]:
    """Pull a JSON array of question strings out of model output."""
    text = CODE_FENCE.sub("", raw or "").strip()
    start, end = text.find("["), text.rfind("]")
    if start == -1 or end <= start:
        return []
    try:
        items = json.loads(text[start : end + 1])
    except json.JSONDecodeError:
        return []
    if not isinstance(items, list):
        return []
    questions = [str(item).strip() for item in items if isinstance(item, str) and item.strip()]
    return questions[:limit]


class FollowUpSuggester:
    """Suggest follow-up questions for a conversation."""

    def __init__(
        self,
        generator: TextGenerator,
        composer: Optional[PromptComposer] = None,
        timeout_ms: int = GENERATION_TIMEOUT_MS,
    ):
        self.generator = generator
        self.composer = composer or PromptComposer()
        self.timeout_ms = timeout_ms

    async def suggest(self, conversation: Sequence[Tuple[str, str]]) -> List[str]:
        if not conversation:
            return []

        prompt = self.composer.compose_follow_up(conversation)
        try:
            raw = await asyncio.wait_for(
                self.generator.generate(prompt), timeout=self.timeout_ms / 1000
            )
        except asyncio.TimeoutError:
            logger.warning("[followups] Generation timed out after %dms", self.timeout_ms)
            return []
        except Exception as e:
            logger.warning("[followups] Generation failed: %s", e)
            return []

        questions = parse_follow_ups(raw)
        if not questions:
            logger.info("[followups] No usable suggestions in model output")
        return questions
