"""
FastAPI endpoints for chat sessions.

POST /chat/sessions - Start a session
POST /chat/sessions/{session_id}/ask - Ask a question (SSE stream)
GET  /chat/sessions/{session_id}/messages - Session history
GET  /chat/sessions/{session_id}/follow-ups - Suggested next questions
DELETE /chat/sessions/{session_id} - Drop a session

SSE EVENT SCHEMA (one JSON object per "data:" line):

{"type": "token", "text": "<chunk>"}
    - One per streamed chunk, in order
{"type": "citations", "lesson_ids": [...], "urls": [...]}
    - Sent once, after every token
{"type": "no_results", "message": "..."}
    - Search found nothing; no tokens are sent
{"type": "error", "message": "..."}
    - Unexpected failure
{"type": "done", "outcome": "answered|degraded|no_results", "degraded": bool, "message_id": "..."}
    - Always last (except after "error")
"""

import asyncio
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from astroscope.chat.schemas import (
    AskRequest,
    FollowUpsResponse,
    MessageOut,
    MessagesResponse,
    SessionResponse,
    TurnOutcome,
)
from astroscope.chat.session import ChatSession
from astroscope.config import LLIS_LESSON_URL
from astroscope.errors import EmptyQueryError, QueryInFlightError, SessionNotFoundError
from astroscope.lessons.corpus import normalize_query
from astroscope.llm.streaming import sse_event
from astroscope.rag.citations import CitationExtractor
from astroscope.services import AppServices, get_services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])

_citations = CitationExtractor()


def _get_session(session_id: str, services: AppServices) -> ChatSession:
    try:
        return services.sessions.get(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


async def generate_chat_stream(
    session: ChatSession,
    question: str,
    reserved: bool = False,
) -> AsyncGenerator[str, None]:
    """Run one question and relay its chunks as SSE events."""
    queue: asyncio.Queue = asyncio.Queue()

    async def _on_chunk(chunk: str) -> None:
        await queue.put({"type": "token", "text": chunk})

    async def _run() -> None:
        try:
            turn = await session.ask(question, on_chunk=_on_chunk, reserved=reserved)
            if turn.outcome == TurnOutcome.NO_RESULTS:
                await queue.put({"type": "no_results", "message": turn.assistant_message.content})
            else:
                ids = turn.assistant_message.cited_lesson_ids or []
                await queue.put({
                    "type": "citations",
                    "lesson_ids": ids,
                    "urls": [LLIS_LESSON_URL.format(lesson_id=i) for i in ids],
                })
            await queue.put({
                "type": "done",
                "outcome": turn.outcome.value,
                "degraded": turn.outcome == TurnOutcome.DEGRADED,
                "message_id": turn.assistant_message.id,
            })
        except Exception as e:
            logger.exception("[chat] Stream failed: %s", e)
            await queue.put({"type": "error", "message": str(e)})
        finally:
            await queue.put(None)

    task = asyncio.create_task(_run())
    try:
        while True:
            event = await queue.get()
            if event is None:
                break
            yield sse_event(event)
    finally:
        await task


@router.post("/sessions", response_model=SessionResponse)
def create_session(services: AppServices = Depends(get_services)):
    session = services.sessions.create()
    return SessionResponse(session_id=session.id)


@router.delete("/sessions/{session_id}")
def delete_session(session_id: str, services: AppServices = Depends(get_services)):
    try:
        services.sessions.delete(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"deleted": session_id}


@router.post("/sessions/{session_id}/ask")
async def ask_question(
    session_id: str,
    request: AskRequest,
    services: AppServices = Depends(get_services),
) -> StreamingResponse:
    """
    Ask a question in a session.

    Blank questions are rejected up front (400); a question while another is
    still streaming gets 409.
    """
    session = _get_session(session_id, services)
    try:
        normalize_query(request.question)
    except EmptyQueryError as e:
        raise HTTPException(status_code=400, detail=str(e))
    try:
        session.reserve()
    except QueryInFlightError:
        raise HTTPException(status_code=409, detail="A question is already in progress")

    return StreamingResponse(
        generate_chat_stream(session, request.question, reserved=True),
        media_type="text/event-stream",
    )


@router.get("/sessions/{session_id}/messages", response_model=MessagesResponse)
def get_messages(session_id: str, services: AppServices = Depends(get_services)):
    session = _get_session(session_id, services)
    messages = []
    for m in session.history():
        data = m.to_dict()
        data["content_markdown"] = _citations.linkify(m.content)
        messages.append(MessageOut(**data))
    return MessagesResponse(session_id=session.id, messages=messages)


@router.get("/sessions/{session_id}/follow-ups", response_model=FollowUpsResponse)
async def get_follow_ups(session_id: str, services: AppServices = Depends(get_services)):
    session = _get_session(session_id, services)
    questions = await services.follow_ups.suggest(session.exchanges())
    return FollowUpsResponse(session_id=session.id, questions=questions)
