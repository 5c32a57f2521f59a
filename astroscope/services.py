# FILE: astroscope/services.py
"""
Process-wide service container.

Built once at startup by init_services() and read by the routers through
get_services(). Tests build their own container with a fake generator and
install it with set_services().
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from astroscope.chat.session import ChatSessionStore
from astroscope.config import CORPUS_SOURCE, SEED_PATH
from astroscope.errors import CorpusUnavailableError
from astroscope.lessons.corpus import CorpusIndex
from astroscope.llm.clients import (
    GenerationClient,
    GenerationConfig,
    TextGenerator,
)
from astroscope.llm.followups import FollowUpSuggester
from astroscope.llm.streaming import StreamEmitter
from astroscope.rag.answerer import AnswerSynthesizer
from astroscope.rag.pipeline import LessonsPipeline

logger = logging.getLogger(__name__)


@dataclass
class AppServices:
    corpus: CorpusIndex
    generator: TextGenerator
    pipeline: LessonsPipeline
    sessions: ChatSessionStore
    follow_ups: FollowUpSuggester
    corpus_source: str = CORPUS_SOURCE

    @property
    def provider(self) -> str:
        return getattr(self.generator, "provider", "custom")

    @property
    def model(self) -> str:
        return getattr(self.generator, "model", "custom")

    @property
    def api_configured(self) -> bool:
        return bool(getattr(self.generator, "is_configured", True))


def build_services(
    corpus: CorpusIndex,
    generator: TextGenerator,
    emitter: Optional[StreamEmitter] = None,
    timeout_ms: Optional[int] = None,
    corpus_source: str = CORPUS_SOURCE,
) -> AppServices:
    """Wire the pipeline around an already-built corpus and generator."""
    synthesizer_kwargs = {}
    if timeout_ms is not None:
        synthesizer_kwargs["timeout_ms"] = timeout_ms
    synthesizer = AnswerSynthesizer(generator, emitter=emitter, **synthesizer_kwargs)
    pipeline = LessonsPipeline(corpus, synthesizer)
    return AppServices(
        corpus=corpus,
        generator=generator,
        pipeline=pipeline,
        sessions=ChatSessionStore(pipeline),
        follow_ups=FollowUpSuggester(generator, **synthesizer_kwargs),
        corpus_source=corpus_source,
    )


_services: Optional[AppServices] = None


def init_services(db=None, source: str = CORPUS_SOURCE, seed_path: Path = SEED_PATH) -> AppServices:
    """Load the corpus, build the generation client, install the container."""
    from astroscope.lessons.seed import load_corpus

    lessons = load_corpus(source, seed_path, db=db)
    corpus = CorpusIndex(lessons)

    config = GenerationConfig.from_env()
    client = GenerationClient(config)

    services = build_services(corpus, client, timeout_ms=config.timeout_ms, corpus_source=source)
    set_services(services)
    logger.info(
        "[services] Ready: %d lessons from %s, provider=%s model=%s",
        len(corpus), source, config.provider, config.model,
    )
    return services


def set_services(services: Optional[AppServices]) -> None:
    global _services
    _services = services


def get_services() -> AppServices:
    """
    FastAPI dependency.

    Raises:
        CorpusUnavailableError: startup has not loaded a corpus
    """
    if _services is None:
        raise CorpusUnavailableError("Lesson corpus is not loaded")
    return _services
