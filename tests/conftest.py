# FILE: tests/conftest.py
"""
Pytest configuration for AstroScope test suite.

Configures:
- pytest-asyncio for async test support
- Seed corpus and a fake generation capability
"""
import asyncio
import sys
from pathlib import Path

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest

pytest_plugins = ["pytest_asyncio"]

SEED_PATH = _project_root / "data" / "lessons_seed.json"


class FakeGenerator:
    """Test double for the generation capability."""

    def __init__(self, response="", error=None, delay=0.0):
        self.response = response
        self.error = error
        self.delay = delay
        self.prompts = []

    @property
    def calls(self):
        return len(self.prompts)

    async def generate(self, prompt):
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def seed_lessons():
    from astroscope.lessons.seed import load_seed_lessons
    return load_seed_lessons(SEED_PATH)


@pytest.fixture
def corpus(seed_lessons):
    from astroscope.lessons.corpus import CorpusIndex
    return CorpusIndex(seed_lessons)


@pytest.fixture
def fast_emitter():
    """StreamEmitter with pacing disabled."""
    from astroscope.llm.streaming import StreamEmitter
    return StreamEmitter(delay_ms=0)


@pytest.fixture
def make_generator():
    return FakeGenerator


@pytest.fixture
def mock_db():
    """In-memory database session."""
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker
    from astroscope.db import Base
    from astroscope.lessons import models  # noqa: F401

    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine)()
    yield session
    session.close()
