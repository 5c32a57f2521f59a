"""
Grounded answer synthesis.

Takes a question plus sanitized context, asks the generation capability for
an answer under a bounded wait, replays it through the StreamEmitter, and
resolves citations. Any timeout, exception or empty answer is absorbed by the
deterministic fallback, so callers always get a usable answer.

States:
    COMPOSING -> GENERATING -> {SUCCEEDED | TIMED_OUT | FAILED}
              -> STREAMING -> CITING -> DONE

No state is kept between calls; the only visible effects are the on_chunk
calls and the returned SynthesisResult. Every chunk is delivered before the
result is returned.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from astroscope.config import GENERATION_TIMEOUT_MS
from astroscope.errors import GenerationFailureError, GenerationTimeoutError
from astroscope.lessons.schemas import SanitizedLesson
from astroscope.llm.clients import TextGenerator
from astroscope.llm.fallbacks import (
    FailureType,
    FallbackEvent,
    build_fallback_answer,
    fallback_citations,
    record_fallback,
)
from astroscope.llm.streaming import ChunkSink, StreamEmitter
from astroscope.rag.citations import CitationExtractor
from astroscope.rag.prompts import PromptComposer

logger = logging.getLogger(__name__)


class SynthesisStage(str, Enum):
    COMPOSING = "composing"
    GENERATING = "generating"
    SUCCEEDED = "succeeded"
    TIMED_OUT = "timed_out"
    FAILED = "failed"
    STREAMING = "streaming"
    CITING = "citing"
    DONE = "done"


@dataclass
class SynthesisResult:
    """Answer plus the citations resolved against the supplied context."""
    full_answer: str
    cited_lesson_ids: List[int]
    degraded: bool = False
    fallback: Optional[FallbackEvent] = None
    stages: List[SynthesisStage] = field(default_factory=list)

    @property
    def failure(self) -> Optional[FailureType]:
        return self.fallback.failure_type if self.fallback else None


class AnswerSynthesizer:
    """Generate, replay and cite one grounded answer."""

    def __init__(
        self,
        generator: TextGenerator,
        emitter: Optional[StreamEmitter] = None,
        composer: Optional[PromptComposer] = None,
        citations: Optional[CitationExtractor] = None,
        timeout_ms: int = GENERATION_TIMEOUT_MS,
    ):
        self.generator = generator
        self.emitter = emitter or StreamEmitter()
        self.composer = composer or PromptComposer()
        self.citations = citations or CitationExtractor()
        self.timeout_ms = timeout_ms

    async def synthesize(
        self,
        question: str,
        context: Sequence[SanitizedLesson],
        on_chunk: ChunkSink,
    ) -> SynthesisResult:
        """
        Answer `question` from `context`, streaming chunks to on_chunk.

        Raises:
            EmptyContextError: context is empty (nothing is generated or emitted)
        """
        stages: List[SynthesisStage] = [SynthesisStage.COMPOSING]
        prompt = self.composer.compose(question, context)

        stages.append(SynthesisStage.GENERATING)
        fallback: Optional[FallbackEvent] = None
        answer = ""
        try:
            answer = (await self._generate(prompt) or "").strip()
        except GenerationTimeoutError as e:
            stages.append(SynthesisStage.TIMED_OUT)
            fallback = record_fallback(FailureType.MODEL_TIMEOUT, str(e), len(context))
        except GenerationFailureError as e:
            stages.append(SynthesisStage.FAILED)
            fallback = record_fallback(FailureType.MODEL_ERROR, str(e), len(context))
        except Exception as e:
            # Capability errors of any type end in the fallback answer
            stages.append(SynthesisStage.FAILED)
            logger.exception("[answerer] Unexpected generation error: %s", e)
            fallback = record_fallback(FailureType.MODEL_ERROR, str(e), len(context))
        else:
            if answer:
                stages.append(SynthesisStage.SUCCEEDED)
            else:
                stages.append(SynthesisStage.FAILED)
                fallback = record_fallback(
                    FailureType.EMPTY_RESPONSE, "Generation returned empty text", len(context)
                )

        if fallback is not None:
            answer = build_fallback_answer(context)

        stages.append(SynthesisStage.STREAMING)
        await self.emitter.emit(answer, on_chunk)

        stages.append(SynthesisStage.CITING)
        if fallback is not None:
            cited = fallback_citations(context)
        else:
            cited = self.citations.extract(answer, [lesson.id for lesson in context])

        stages.append(SynthesisStage.DONE)
        logger.info(
            "[answerer] %s: %d chars, %d citations",
            "fallback" if fallback else "generated", len(answer), len(cited),
        )
        return SynthesisResult(
            full_answer=answer,
            cited_lesson_ids=cited,
            degraded=fallback is not None,
            fallback=fallback,
            stages=stages,
        )

    async def _generate(self, prompt: str) -> str:
        """Await the generator, abandoning it once the timeout expires."""
        timeout = self.timeout_ms / 1000
        try:
            return await asyncio.wait_for(self.generator.generate(prompt), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise GenerationTimeoutError(f"Generation exceeded {self.timeout_ms}ms") from e
