"""Database models."""

from focusflow.models.chat import ChatMessage, ChatSession
from focusflow.models.journey import Day, Journey, JourneyProgress, Topic

__all__ = [
    "Journey",
    "JourneyProgress",
    "Day",
    "Topic",
    "ChatSession",
    "ChatMessage",
]
