# FILE: astroscope/errors.py
class AstroScopeError(Exception):
    """Base class for AstroScope errors."""


class EmptyQueryError(AstroScopeError):
    """Raised when a question normalizes to zero search terms."""


class NoResultsError(AstroScopeError):
    """Raised when search found nothing relevant; generation is never attempted."""

    def __init__(self, question: str):
        super().__init__(f"No lessons matched: {question!r}")
        self.question = question


class EmptyContextError(AstroScopeError):
    """Raised when a prompt is composed without any grounding lessons."""


class GenerationError(AstroScopeError):
    """Base class for generation-capability failures."""


class GenerationTimeoutError(GenerationError):
    pass


class GenerationFailureError(GenerationError):
    """Capability raised, was misconfigured, or returned empty text."""


class CorpusUnavailableError(AstroScopeError):
    """Raised when search cannot run because no corpus is loaded."""


class CorpusLoadError(AstroScopeError):
    """Raised when lesson records cannot be read or are malformed."""


class QueryInFlightError(AstroScopeError):
    """Raised when a session receives a question while one is still running."""


class SessionNotFoundError(AstroScopeError):
    pass
