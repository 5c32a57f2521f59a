"""
AstroScope - grounded Q&A over the space-mission lessons-learned corpus.

Core API:
    LessonsPipeline(corpus, synthesizer).ask(question, on_chunk) -> PipelineOutcome

HTTP API:
    GET  /lessons/search
    GET  /lessons/{lesson_id}
    POST /chat/sessions
    POST /chat/sessions/{session_id}/ask   (SSE)
    GET  /status

Data Flow:
    question -> CorpusIndex.search -> ContextBuilder -> PromptComposer
             -> AnswerSynthesizer (generate or fallback) -> StreamEmitter
             -> CitationExtractor
"""

__version__ = "0.3.0"
