"""Pydantic schemas."""

from focusflow.schemas.chat import (
    ChatMessageResponse,
    ChatRequest,
    ChatResponse,
    MessageRole,
)
from focusflow.schemas.content import (
    GenerationStatusResponse,
    InitialContentResponse,
    ParsedResumeResponse,
    SimplifyRequest,
    SimplifyResponse,
    TopicContentResponse,
)
from focusflow.schemas.roadmap import (
    DayResponse,
    GeneratedDay,
    GeneratedRoadmap,
    GeneratedTopic,
    JourneyRoadmapResponse,
    JourneySummary,
    RoadmapGenerateRequest,
    RoadmapSaveRequest,
    RoadmapSaveResponse,
    TopicCompletionResponse,
    TopicCompletionUpdate,
    TopicResponse,
)

__all__ = [
    "ChatMessageResponse",
    "ChatRequest",
    "ChatResponse",
    "MessageRole",
    "GenerationStatusResponse",
    "InitialContentResponse",
    "ParsedResumeResponse",
    "SimplifyRequest",
    "SimplifyResponse",
    "TopicContentResponse",
    "DayResponse",
    "GeneratedDay",
    "GeneratedRoadmap",
    "GeneratedTopic",
    "JourneyRoadmapResponse",
    "JourneySummary",
    "RoadmapGenerateRequest",
    "RoadmapSaveRequest",
    "RoadmapSaveResponse",
    "TopicCompletionResponse",
    "TopicCompletionUpdate",
    "TopicResponse",
]
