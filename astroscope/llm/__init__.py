"""
LLM module exports.

Generation client, chunked replay, fallback policy and follow-up suggestions.
"""

from astroscope.llm.clients import (
    GenerationClient,
    GenerationConfig,
    TextGenerator,
)
from astroscope.llm.streaming import StreamEmitter, chunk_words, sse_event
from astroscope.llm.fallbacks import (
    FailureType,
    FallbackEvent,
    build_fallback_answer,
    fallback_citations,
)
