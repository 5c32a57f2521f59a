# FILE: tests/test_llm_clients.py
"""
Tests for astroscope/llm/clients.py

Provider SDKs are never called: backends are replaced with mocks.
"""

import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest

from astroscope.config import API_KEY_PLACEHOLDER
from astroscope.errors import GenerationFailureError
from astroscope.llm import clients
from astroscope.llm.clients import (
    GenerationClient,
    GenerationConfig,
    TextGenerator,
)


class TestGenerationConfig:
    def test_placeholder_key_not_configured(self):
        assert not GenerationConfig(api_key=API_KEY_PLACEHOLDER).api_key_configured
        assert not GenerationConfig(api_key=None).api_key_configured
        assert GenerationConfig(api_key="real-key").api_key_configured

    def test_from_env_google(self, monkeypatch):
        monkeypatch.setattr(clients, "LLM_PROVIDER", "google")
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.setenv("GEMINI_API_KEY", "gem-key")
        config = GenerationConfig.from_env()
        assert config.provider == "google"
        assert config.api_key == "gem-key"

    def test_from_env_openai(self, monkeypatch):
        monkeypatch.setattr(clients, "LLM_PROVIDER", "openai")
        monkeypatch.setenv("OPENAI_API_KEY", "oa-key")
        config = GenerationConfig.from_env()
        assert config.provider == "openai"
        assert config.model == clients.OPENAI_MODEL
        assert config.api_key == "oa-key"

    def test_from_env_unknown_provider_falls_back_to_google(self, monkeypatch):
        monkeypatch.setattr(clients, "LLM_PROVIDER", "mystery")
        assert GenerationConfig.from_env().provider == "google"


class TestGenerationClient:
    def test_unsupported_provider(self):
        with pytest.raises(ValueError):
            GenerationClient(GenerationConfig(provider="mystery", api_key="k"))

    def test_satisfies_protocol(self):
        assert isinstance(GenerationClient(GenerationConfig(api_key="k")), TextGenerator)

    @pytest.mark.asyncio
    async def test_missing_key_raises_failure(self):
        client = GenerationClient(GenerationConfig(api_key=None))
        assert client.is_configured is False
        with pytest.raises(GenerationFailureError):
            await client.generate("prompt")

    @pytest.mark.asyncio
    async def test_google_backend(self):
        client = GenerationClient(GenerationConfig(provider="google", api_key="k"))
        backend = MagicMock()
        backend.generate_content_async = AsyncMock(return_value=SimpleNamespace(text="answer"))
        client._backend = backend

        assert await client.generate("prompt") == "answer"
        backend.generate_content_async.assert_awaited_once_with("prompt")

    @pytest.mark.asyncio
    async def test_google_blocked_response(self):
        class Blocked:
            @property
            def text(self):
                raise ValueError("no candidates")

        client = GenerationClient(GenerationConfig(provider="google", api_key="k"))
        backend = MagicMock()
        backend.generate_content_async = AsyncMock(return_value=Blocked())
        client._backend = backend

        with pytest.raises(GenerationFailureError):
            await client.generate("prompt")

    @pytest.mark.asyncio
    async def test_openai_backend(self):
        client = GenerationClient(GenerationConfig(provider="openai", model="gpt-4.1-mini", api_key="k"))
        response = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="openai answer"))]
        )
        backend = MagicMock()
        backend.chat.completions.create = AsyncMock(return_value=response)
        client._backend = backend

        assert await client.generate("prompt") == "openai answer"
        kwargs = backend.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == "gpt-4.1-mini"
        assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]

    @pytest.mark.asyncio
    async def test_provider_exception_wrapped(self):
        client = GenerationClient(GenerationConfig(provider="openai", api_key="k"))
        backend = MagicMock()
        backend.chat.completions.create = AsyncMock(side_effect=RuntimeError("rate limited"))
        client._backend = backend

        with pytest.raises(GenerationFailureError, match="rate limited"):
            await client.generate("prompt")


class TestClientInjection:
    def test_init_services_injects_one_client(self, monkeypatch):
        from astroscope.services import init_services, set_services

        monkeypatch.setattr(clients, "LLM_PROVIDER", "google")
        monkeypatch.setenv("GOOGLE_API_KEY", "k")
        try:
            services = init_services(source="seed", seed_path=_project_root / "data" / "lessons_seed.json")
            assert isinstance(services.generator, GenerationClient)
            assert services.pipeline.synthesizer.generator is services.generator
            assert services.follow_ups.generator is services.generator
        finally:
            set_services(None)
