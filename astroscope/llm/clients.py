# FILE: astroscope/llm/clients.py
"""
Generation client (one per process, built at startup and injected).

The pipeline only needs one capability:

    await generator.generate(prompt) -> str

GenerationClient implements it on top of Gemini (default) or OpenAI. It is
built once at startup from GenerationConfig and injected into the
AnswerSynthesizer, so tests can pass any object with the same method instead.

Provider SDK objects are created lazily on the first call, so a missing API
key is reported as a GenerationFailureError at call time (and absorbed by the
fallback path) rather than crashing startup.

Provider info:
- GenerationConfig.from_env()
- GenerationClient.is_configured
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Optional, Protocol, runtime_checkable

from astroscope.config import (
    API_KEY_PLACEHOLDER,
    GEMINI_MODEL,
    GEMINI_TOP_K,
    GEMINI_TOP_P,
    GENERATION_TIMEOUT_MS,
    LLM_PROVIDER,
    MAX_OUTPUT_TOKENS,
    OPENAI_MODEL,
    TEMPERATURE,
)
from astroscope.errors import GenerationFailureError

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("google", "openai")


@runtime_checkable
class TextGenerator(Protocol):
    async def generate(self, prompt: str) -> str:
        ...


# =============================================================================
# CONFIGURATION
# =============================================================================


def _google_api_key() -> Optional[str]:
    return os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")


@dataclass(frozen=True)
class GenerationConfig:
    """Snapshot of generation settings taken at startup."""
    provider: str = "google"
    model: str = GEMINI_MODEL
    temperature: float = TEMPERATURE
    max_output_tokens: int = MAX_OUTPUT_TOKENS
    timeout_ms: int = GENERATION_TIMEOUT_MS
    api_key: Optional[str] = None

    @classmethod
    def from_env(cls) -> "GenerationConfig":
        provider = LLM_PROVIDER if LLM_PROVIDER in SUPPORTED_PROVIDERS else "google"
        if provider != LLM_PROVIDER:
            logger.warning("[clients] Unknown provider %r, using google", LLM_PROVIDER)

        if provider == "openai":
            return cls(provider="openai", model=OPENAI_MODEL, api_key=os.getenv("OPENAI_API_KEY"))
        return cls(provider="google", model=GEMINI_MODEL, api_key=_google_api_key())

    @property
    def api_key_configured(self) -> bool:
        return bool(self.api_key) and self.api_key != API_KEY_PLACEHOLDER


# =============================================================================
# CLIENT
# =============================================================================


class GenerationClient:
    """Awaitable text generation over a single provider/model."""

    def __init__(self, config: GenerationConfig):
        if config.provider not in SUPPORTED_PROVIDERS:
            raise ValueError(f"Unsupported provider '{config.provider}'")
        self.config = config
        self._backend: Any = None

        if not config.api_key_configured:
            logger.warning(
                "[clients] No API key configured for provider=%s; generation will fall back",
                config.provider,
            )

    @property
    def is_configured(self) -> bool:
        return self.config.api_key_configured

    @property
    def provider(self) -> str:
        return self.config.provider

    @property
    def model(self) -> str:
        return self.config.model

    async def generate(self, prompt: str) -> str:
        """
        Run one completion and return its full text.

        Raises:
            GenerationFailureError: not configured, or the provider call failed
        """
        if not self.is_configured:
            raise GenerationFailureError(f"{self.provider} API key is not set")

        started = time.monotonic()
        logger.info("[clients] provider=%s model=%s prompt_chars=%d", self.provider, self.model, len(prompt))
        try:
            if self.provider == "openai":
                text = await self._generate_openai(prompt)
            else:
                text = await self._generate_google(prompt)
        except GenerationFailureError:
            raise
        except Exception as e:
            logger.warning("[clients] %s call failed: %s", self.provider, e)
            raise GenerationFailureError(str(e)) from e

        logger.info(
            "[clients] completed in %dms (%d chars)",
            int((time.monotonic() - started) * 1000), len(text or ""),
        )
        return text or ""

    async def _generate_google(self, prompt: str) -> str:
        if self._backend is None:
            import google.generativeai as genai

            genai.configure(api_key=self.config.api_key)
            self._backend = genai.GenerativeModel(
                model_name=self.config.model,
                generation_config={
                    "temperature": self.config.temperature,
                    "top_k": GEMINI_TOP_K,
                    "top_p": GEMINI_TOP_P,
                    "max_output_tokens": self.config.max_output_tokens,
                },
            )

        response = await self._backend.generate_content_async(prompt)
        # .text raises ValueError when the candidate was blocked or empty
        try:
            return response.text
        except ValueError as e:
            raise GenerationFailureError(f"Gemini returned no text: {e}") from e

    async def _generate_openai(self, prompt: str) -> str:
        if self._backend is None:
            from openai import AsyncOpenAI

            self._backend = AsyncOpenAI(api_key=self.config.api_key)

        response = await self._backend.chat.completions.create(
            model=self.config.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.config.temperature,
            max_tokens=self.config.max_output_tokens,
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

