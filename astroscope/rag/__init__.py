"""Grounded answering: context, prompts, synthesis, citations."""
from .context_builder import (
    ContextBuilder,
    FieldBounds,
    build_context,
)
from .prompts import PromptComposer
from .citations import (
    CITATION_PATTERNS,
    CitationExtractor,
    CitationPattern,
    extract_citations,
)
from .answerer import (
    AnswerSynthesizer,
    SynthesisResult,
    SynthesisStage,
)
from .pipeline import (
    LessonsPipeline,
    PipelineOutcome,
)
