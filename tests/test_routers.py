# FILE: tests/test_routers.py
"""
HTTP tests for the lessons and chat routers.

The app's startup hook is not run: each test installs its own service
container with a fake generator.
"""

import asyncio
import json
import sys
from pathlib import Path

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import httpx
import pytest
from fastapi.testclient import TestClient

from astroscope.services import build_services, set_services
from main import app


def _events(response):
    """Decode every SSE data line of a streamed response."""
    return [
        json.loads(line[len("data: "):])
        for line in response.text.splitlines()
        if line.startswith("data: ")
    ]


@pytest.fixture
def install_services(corpus, fast_emitter, make_generator):
    def _install(response="", error=None, delay=0.0):
        generator = make_generator(response, error=error, delay=delay)
        services = build_services(corpus, generator, emitter=fast_emitter, corpus_source="seed")
        set_services(services)
        return services, generator
    yield _install
    set_services(None)


@pytest.fixture
def client():
    return TestClient(app)


class TestStatus:
    def test_status(self, client, install_services):
        install_services("x")
        body = client.get("/status").json()
        assert body["corpus_size"] == 10
        assert body["corpus_source"] == "seed"
        assert body["provider"] == "custom"

    def test_corpus_not_loaded_is_503(self, client):
        set_services(None)
        assert client.get("/lessons/search", params={"q": "mars"}).status_code == 503


class TestLessonsRouter:
    def test_search(self, client, install_services):
        install_services()
        body = client.get("/lessons/search", params={"q": "unit conversion"}).json()
        assert body["lessons"][0]["id"] == 1002
        assert body["lessons"][0]["llis_url"] == "https://llis.nasa.gov/lesson/1002"
        assert body["total"] == len(body["lessons"])

    def test_search_no_match_is_empty_not_error(self, client, install_services):
        install_services()
        response = client.get("/lessons/search", params={"q": "xyzxyz-no-match"})
        assert response.status_code == 200
        assert response.json()["lessons"] == []

    def test_blank_search_is_400(self, client, install_services):
        install_services()
        assert client.get("/lessons/search", params={"q": "  "}).status_code == 400

    def test_search_limit(self, client, install_services):
        install_services()
        body = client.get("/lessons/search", params={"q": "landing", "limit": 2}).json()
        assert len(body["lessons"]) == 2

    def test_lesson_detail(self, client, install_services):
        install_services()
        body = client.get("/lessons/1002").json()
        assert body["lesson"]["title"] == "Mars Climate Orbiter Unit Error"
        assert "**Lesson 1002" in body["detail_markdown"]

    def test_unknown_lesson_is_404(self, client, install_services):
        install_services()
        assert client.get("/lessons/999999").status_code == 404


class TestChatRouter:
    def _session(self, client):
        return client.post("/chat/sessions").json()["session_id"]

    def test_ask_streams_tokens_citations_done(self, client, install_services):
        install_services("Unit mixups lost the orbiter [Lesson 1002].")
        session_id = self._session(client)

        response = client.post(f"/chat/sessions/{session_id}/ask", json={"question": "unit conversion"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        events = _events(response)
        tokens = [e["text"] for e in events if e["type"] == "token"]
        assert "".join(tokens).strip() == "Unit mixups lost the orbiter [Lesson 1002]."
        citations = next(e for e in events if e["type"] == "citations")
        assert citations["lesson_ids"] == [1002]
        assert citations["urls"] == ["https://llis.nasa.gov/lesson/1002"]
        assert events[-1]["type"] == "done"
        assert events[-1]["outcome"] == "answered"

    def test_ask_no_results(self, client, install_services):
        _, generator = install_services("unused")
        session_id = self._session(client)

        events = _events(client.post(f"/chat/sessions/{session_id}/ask", json={"question": "xyzxyz-no-match"}))

        assert [e["type"] for e in events] == ["no_results", "done"]
        assert events[-1]["outcome"] == "no_results"
        assert generator.calls == 0

    def test_ask_degraded(self, client, install_services):
        install_services(error=RuntimeError("down"))
        session_id = self._session(client)

        events = _events(client.post(f"/chat/sessions/{session_id}/ask", json={"question": "asteroid landing"}))

        assert events[-1]["outcome"] == "degraded"
        assert events[-1]["degraded"] is True
        citations = next(e for e in events if e["type"] == "citations")
        assert 1 <= len(citations["lesson_ids"]) <= 3

    def test_blank_question_is_400(self, client, install_services):
        install_services()
        session_id = self._session(client)
        response = client.post(f"/chat/sessions/{session_id}/ask", json={"question": "  ?? "})
        assert response.status_code == 400

    def test_unknown_session_is_404(self, client, install_services):
        install_services()
        response = client.post("/chat/sessions/nope/ask", json={"question": "mars"})
        assert response.status_code == 404

    def test_question_in_flight_is_409(self, client, install_services):
        services, _ = install_services()
        session_id = self._session(client)
        services.sessions.get(session_id)._in_flight = True

        response = client.post(f"/chat/sessions/{session_id}/ask", json={"question": "mars"})
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_concurrent_asks_second_is_409(self, install_services):
        _, generator = install_services("Slow answer [Lesson 1002].", delay=0.3)
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
            session_id = (await ac.post("/chat/sessions")).json()["session_id"]
            url = f"/chat/sessions/{session_id}/ask"
            first, second = await asyncio.gather(
                ac.post(url, json={"question": "unit conversion"}),
                ac.post(url, json={"question": "thermal"}),
            )

            assert sorted([first.status_code, second.status_code]) == [200, 409]
            ok = first if first.status_code == 200 else second
            assert _events(ok)[-1]["type"] == "done"
            assert "error" not in [e["type"] for e in _events(ok)]
            assert generator.calls == 1

            messages = (await ac.get(f"/chat/sessions/{session_id}/messages")).json()["messages"]
            assert len(messages) == 2

    def test_messages_are_linkified(self, client, install_services):
        install_services("See [Lesson 1002].")
        session_id = self._session(client)
        client.post(f"/chat/sessions/{session_id}/ask", json={"question": "unit conversion"})

        messages = client.get(f"/chat/sessions/{session_id}/messages").json()["messages"]

        assert [m["role"] for m in messages] == ["user", "assistant"]
        assistant = messages[1]
        assert assistant["cited_lesson_ids"] == [1002]
        assert assistant["is_pending"] is False
        assert "(https://llis.nasa.gov/lesson/1002)" in assistant["content_markdown"]

    def test_follow_ups(self, client, install_services):
        install_services('["What about Mars?"]')
        session_id = self._session(client)
        client.post(f"/chat/sessions/{session_id}/ask", json={"question": "unit conversion"})

        body = client.get(f"/chat/sessions/{session_id}/follow-ups").json()
        assert body["questions"] == ["What about Mars?"]

    def test_delete_session(self, client, install_services):
        install_services()
        session_id = self._session(client)
        assert client.delete(f"/chat/sessions/{session_id}").status_code == 200
        assert client.delete(f"/chat/sessions/{session_id}").status_code == 404
