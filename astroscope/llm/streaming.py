# FILE: astroscope/llm/streaming.py
"""
Chunked replay of a completed answer.

The generation call returns the whole answer at once. StreamEmitter replays it
to a caller-supplied sink in small word batches with a short pause between
them, so the caller sees incremental delivery without a streaming channel.

CHUNK CONTRACT:
- Words are split on any whitespace
- Each chunk is up to `chunk_words` words joined by single spaces, plus one
  trailing space
- Joining every chunk in order gives the original text with whitespace
  normalized

Emissions on one emitter never interleave: answer N+1 starts only after every
chunk of answer N has been delivered.

SSE framing for the HTTP layer lives here too (sse_event).
"""

import asyncio
import inspect
import json
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from astroscope.config import STREAM_CHUNK_WORDS, STREAM_DELAY_MS

logger = logging.getLogger(__name__)

ChunkSink = Callable[[str], Union[None, Awaitable[None]]]
SleepFn = Callable[[float], Awaitable[Any]]


def chunk_words(text: str, chunk_size: int = STREAM_CHUNK_WORDS) -> List[str]:
    """Split text into word batches, each ending in a single space."""
    if chunk_size < 1:
        raise ValueError("chunk_size must be at least 1")
    words = (text or "").split()
    return [
        " ".join(words[i : i + chunk_size]) + " "
        for i in range(0, len(words), chunk_size)
    ]


class StreamEmitter:
    """Deliver a finished answer to a sink as paced word batches."""

    def __init__(
        self,
        chunk_size: int = STREAM_CHUNK_WORDS,
        delay_ms: int = STREAM_DELAY_MS,
        sleep: Optional[SleepFn] = None,
    ):
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        self.chunk_size = chunk_size
        self.delay_ms = max(0, delay_ms)
        self._sleep = sleep or asyncio.sleep
        self._lock = asyncio.Lock()

    async def emit(self, full_answer: str, on_chunk: ChunkSink) -> int:
        """
        Send every chunk of full_answer to on_chunk, in order.

        on_chunk may be a plain function or a coroutine function.

        Returns:
            Number of chunks delivered
        """
        chunks = chunk_words(full_answer, self.chunk_size)
        async with self._lock:
            for index, chunk in enumerate(chunks):
                if index and self.delay_ms:
                    await self._sleep(self.delay_ms / 1000)
                result = on_chunk(chunk)
                if inspect.isawaitable(result):
                    await result
        logger.debug("[stream] emitted %d chunks", len(chunks))
        return len(chunks)


def sse_event(payload: Dict[str, Any]) -> str:
    """Frame one event for a text/event-stream response."""
    return "data: " + json.dumps(payload) + "\n\n"
