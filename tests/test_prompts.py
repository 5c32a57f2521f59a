# FILE: tests/test_prompts.py
"""
Tests for astroscope/rag/prompts.py
"""

import sys
from pathlib import Path

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest

from astroscope.errors import EmptyContextError
from astroscope.rag.context_builder import build_context
from astroscope.rag.prompts import PERSONA, PromptComposer


@pytest.fixture
def context(corpus):
    return build_context(corpus.search("unit conversion mars"))


class TestCompose:
    def test_contains_question_and_every_lesson(self, context):
        prompt = PromptComposer().compose("What about unit errors?", context)
        assert "USER QUESTION: What about unit errors?" in prompt
        for ordinal, lesson in enumerate(context, start=1):
            assert f"LESSON {ordinal} [ID: {lesson.id}]:" in prompt
            assert f"Title: {lesson.title}" in prompt

    def test_persona_first_and_closing_line(self, context):
        prompt = PromptComposer().compose("q", context)
        assert prompt.startswith(PERSONA)
        assert prompt.endswith("Now answer the user's question:")

    def test_asks_for_citation_tags(self, context):
        prompt = PromptComposer().compose("q", context)
        assert f"[Lesson {context[0].id}]" in prompt
        assert "150-200 words" in prompt
        assert "**Bottom line:**" in prompt

    def test_mentions_lesson_count(self, context):
        prompt = PromptComposer().compose("q", context)
        assert f"Based on {len(context)} NASA missions" in prompt

    def test_deterministic(self, context):
        composer = PromptComposer()
        assert composer.compose("q", context) == composer.compose("q", context)

    def test_empty_context_rejected(self):
        with pytest.raises(EmptyContextError):
            PromptComposer().compose("q", [])


class TestComposeFollowUp:
    def test_uses_last_three_exchanges(self):
        conversation = [(f"question {i}", f"answer {i}") for i in range(5)]
        prompt = PromptComposer().compose_follow_up(conversation)
        assert "question 0" not in prompt
        assert "question 1" not in prompt
        assert "Q1: question 2" in prompt
        assert "Q3: question 4" in prompt

    def test_truncates_long_answers(self):
        prompt = PromptComposer().compose_follow_up([("q", "x" * 500)])
        assert "x" * 200 + "..." in prompt
        assert "x" * 201 not in prompt

    def test_requests_json_array(self):
        prompt = PromptComposer().compose_follow_up([("q", "a")])
        assert "JSON array" in prompt
