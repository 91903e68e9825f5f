"""Chat schemas."""

from datetime import datetime
from enum import Enum

from pydantic import ConfigDict
from pydantic.alias_generators import to_camel

from focusflow.schemas.roadmap import CamelModel


class MessageRole(str, Enum):
    """Who sent a persisted message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ChatRequest(CamelModel):
    """One chat turn."""

    message: str
    session_id: str | None = None
    journey_id: str | None = None
    current_topic_id: str | None = None


class ChatResponse(CamelModel):
    session_id: str
    reply: str


class ChatMessageResponse(CamelModel):
    """Persisted message."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    role: MessageRole
    content: str
    created_at: datetime
