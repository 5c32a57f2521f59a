"""
Lessons Q&A pipeline.

One call per user question, run to completion before the next:

    search -> build context -> synthesize (generate or fallback) -> cite

Raises EmptyQueryError for blank questions and NoResultsError when search
finds nothing; in the NoResults case the generation capability is never
called. Generation failures never escape: they come back as a degraded answer.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from astroscope.errors import NoResultsError
from astroscope.lessons.corpus import CorpusIndex, normalize_query
from astroscope.lessons.schemas import Lesson, SanitizedLesson
from astroscope.llm.streaming import ChunkSink
from astroscope.rag.answerer import AnswerSynthesizer, SynthesisResult
from astroscope.rag.context_builder import ContextBuilder

logger = logging.getLogger(__name__)


@dataclass
class PipelineOutcome:
    """Everything one question produced."""
    question: str
    answer: str
    cited_lesson_ids: List[int]
    lessons: List[Lesson] = field(default_factory=list)
    context: List[SanitizedLesson] = field(default_factory=list)
    degraded: bool = False
    synthesis: Optional[SynthesisResult] = None


def _discard_chunk(chunk: str) -> None:
    return None


class LessonsPipeline:
    """Wire CorpusIndex, ContextBuilder and AnswerSynthesizer together."""

    def __init__(
        self,
        corpus: CorpusIndex,
        synthesizer: AnswerSynthesizer,
        context_builder: Optional[ContextBuilder] = None,
    ):
        self.corpus = corpus
        self.synthesizer = synthesizer
        self.context_builder = context_builder or ContextBuilder(limit=corpus.top_k)

    async def ask(self, question: str, on_chunk: Optional[ChunkSink] = None) -> PipelineOutcome:
        """
        Answer a question from the corpus.

        Args:
            question: Free-text user question
            on_chunk: Sink for streamed answer chunks (optional)

        Returns:
            PipelineOutcome with answer, citations and the lessons used

        Raises:
            EmptyQueryError: question has no searchable terms
            NoResultsError: nothing in the corpus matched
        """
        normalize_query(question)
        lessons = self.corpus.search(question)
        if not lessons:
            logger.info("[pipeline] No results for %r", question)
            raise NoResultsError(question)

        context = self.context_builder.build(lessons)
        logger.info(
            "[pipeline] %d lessons in context: %s",
            len(context), [lesson.id for lesson in context],
        )

        result = await self.synthesizer.synthesize(question, context, on_chunk or _discard_chunk)

        return PipelineOutcome(
            question=question,
            answer=result.full_answer,
            cited_lesson_ids=result.cited_lesson_ids,
            lessons=lessons,
            context=context,
            degraded=result.degraded,
            synthesis=result,
        )
