"""
In-memory chat sessions.

A ChatSession owns the messages of one active conversation and runs at most
one question at a time; a second question while one is in flight is rejected
(the HTTP layer maps this to 409). Nothing is persisted: sessions live only as
long as the process.
"""

import inspect
import logging
from typing import Dict, List, Optional, Tuple
from uuid import uuid4

from astroscope.chat.schemas import ChatMessage, ChatTurn, MessageRole, TurnOutcome
from astroscope.errors import (
    EmptyQueryError,
    NoResultsError,
    QueryInFlightError,
    SessionNotFoundError,
)
from astroscope.lessons.corpus import normalize_query
from astroscope.llm.streaming import ChunkSink
from astroscope.rag.pipeline import LessonsPipeline

logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = (
    "I couldn't find any lessons relevant to \"{question}\". "
    "Try different keywords, such as a mission name, subsystem or failure type."
)

ERROR_MESSAGE = "I encountered an issue processing your request: {error}"


class ChatSession:
    """One conversation: ordered messages plus a single in-flight question."""

    def __init__(self, pipeline: LessonsPipeline, session_id: Optional[str] = None):
        self.id = session_id or uuid4().hex
        self.pipeline = pipeline
        self.messages: List[ChatMessage] = []
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def reserve(self) -> None:
        """
        Claim the session for one question.

        The HTTP layer reserves before it starts the response so an overlapping
        request is refused with 409 rather than inside the stream.

        Raises:
            QueryInFlightError: another question is still running
        """
        if self._in_flight:
            raise QueryInFlightError(f"Session {self.id} is already answering a question")
        self._in_flight = True

    def release(self) -> None:
        self._in_flight = False

    async def ask(
        self,
        question: str,
        on_chunk: Optional[ChunkSink] = None,
        reserved: bool = False,
    ) -> ChatTurn:
        """
        Run one question through the pipeline and record both messages.

        Pass reserved=True when reserve() was already called for this question.

        Raises:
            EmptyQueryError: blank question (no messages are recorded)
            QueryInFlightError: another question is still running
        """
        question = (question or "").strip()
        try:
            normalize_query(question)
            if not reserved:
                self.reserve()
        except EmptyQueryError:
            if reserved:
                self.release()
            raise

        user_message = ChatMessage(role=MessageRole.USER, content=question)
        assistant_message = ChatMessage(role=MessageRole.ASSISTANT, is_pending=True)
        self.messages.extend([user_message, assistant_message])

        async def _sink(chunk: str) -> None:
            assistant_message.content += chunk
            if on_chunk is not None:
                result = on_chunk(chunk)
                if inspect.isawaitable(result):
                    await result

        try:
            outcome = await self.pipeline.ask(question, _sink)
        except NoResultsError:
            assistant_message.content = NO_RESULTS_MESSAGE.format(question=question)
            assistant_message.cited_lesson_ids = []
            turn_outcome = TurnOutcome.NO_RESULTS
        except Exception as e:
            assistant_message.content = ERROR_MESSAGE.format(error=e)
            assistant_message.cited_lesson_ids = []
            logger.error("[chat] Session %s question failed: %s", self.id, e)
            raise
        else:
            assistant_message.content = outcome.answer
            assistant_message.cited_lesson_ids = list(outcome.cited_lesson_ids)
            turn_outcome = TurnOutcome.DEGRADED if outcome.degraded else TurnOutcome.ANSWERED
        finally:
            assistant_message.is_pending = False
            self.release()

        logger.info(
            "[chat] Session %s: %s (%d citations)",
            self.id, turn_outcome.value, len(assistant_message.cited_lesson_ids or []),
        )
        return ChatTurn(
            user_message=user_message,
            assistant_message=assistant_message,
            outcome=turn_outcome,
        )

    def history(self) -> List[ChatMessage]:
        return list(self.messages)

    def exchanges(self) -> List[Tuple[str, str]]:
        """Completed (question, answer) pairs, oldest first."""
        pairs = []
        for user, assistant in zip(self.messages[::2], self.messages[1::2]):
            if assistant.is_pending:
                continue
            pairs.append((user.content, assistant.content))
        return pairs


class ChatSessionStore:
    """Active sessions by id."""

    def __init__(self, pipeline: LessonsPipeline):
        self.pipeline = pipeline
        self._sessions: Dict[str, ChatSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self) -> ChatSession:
        session = ChatSession(self.pipeline)
        self._sessions[session.id] = session
        logger.info("[chat] Created session %s", session.id)
        return session

    def get(self, session_id: str) -> ChatSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Unknown session {session_id}")
        return session

    def delete(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFoundError(f"Unknown session {session_id}")
