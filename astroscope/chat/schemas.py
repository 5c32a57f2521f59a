"""
Chat message and API schemas.

ChatMessage is the in-memory conversation record (dataclass); the Pydantic
models are the request/response contracts of the chat API.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class TurnOutcome(str, Enum):
    ANSWERED = "answered"
    DEGRADED = "degraded"
    NO_RESULTS = "no_results"


@dataclass
class ChatMessage:
    """One message in the active session. Content grows while streaming."""
    role: MessageRole
    content: str = ""
    id: str = field(default_factory=lambda: uuid4().hex)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    cited_lesson_ids: Optional[List[int]] = None
    is_pending: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role.value,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
            "cited_lesson_ids": list(self.cited_lesson_ids) if self.cited_lesson_ids is not None else None,
            "is_pending": self.is_pending,
        }


@dataclass
class ChatTurn:
    """Result of one question in a session."""
    user_message: ChatMessage
    assistant_message: ChatMessage
    outcome: TurnOutcome


# =============================================================================
# API MODELS
# =============================================================================


class AskRequest(BaseModel):
    question: str = Field(..., max_length=500)


class SessionResponse(BaseModel):
    session_id: str


class MessageOut(BaseModel):
    id: str
    role: str
    content: str
    content_markdown: str
    timestamp: str
    cited_lesson_ids: Optional[List[int]] = None
    is_pending: bool = False


class MessagesResponse(BaseModel):
    session_id: str
    messages: List[MessageOut]


class FollowUpsResponse(BaseModel):
    session_id: str
    questions: List[str]
