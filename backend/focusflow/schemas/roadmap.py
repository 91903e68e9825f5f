"""Roadmap schemas for API requests, responses and LLM output."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys, as the web client expects."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# LLM output
# ============================================================================


class GeneratedTopic(CamelModel):
    """A topic as returned by the roadmap prompt."""

    id: str | None = None
    title: str = Field(min_length=1)
    description: str = ""
    completed: bool = False


class GeneratedDay(CamelModel):
    """A day as returned by the roadmap prompt."""

    id: str | None = None
    title: str = ""
    description: str = ""
    summary: str | None = None
    completed: bool = False
    duration: str = "1 day"
    topics: list[GeneratedTopic] = Field(default_factory=list)


class GeneratedRoadmap(CamelModel):
    """Full roadmap payload produced by the LLM."""

    title: str
    timeline: str = ""
    prep_type: str = "general"
    roadmap: list[GeneratedDay]


# ============================================================================
# Requests
# ============================================================================


class RoadmapGenerateRequest(CamelModel):
    """Ask the LLM for a new roadmap."""

    goal: str
    resume_text: str | None = None
    timeline_in_days: int | None = None


class RoadmapSaveRequest(CamelModel):
    """Persist a roadmap previously returned by /roadmap/generate."""

    goal: str
    timeline_in_days: int
    resume: str | None = None
    roadmap: GeneratedRoadmap


class TopicCompletionUpdate(CamelModel):
    """Toggle topic completion."""

    is_completed: bool = Field(strict=True)


# ============================================================================
# Responses
# ============================================================================


class RoadmapSaveResponse(CamelModel):
    message: str
    journey_id: str


class TopicResponse(CamelModel):
    id: str
    name: str
    description: str | None = None
    content: str | None = None
    is_completed: bool


class DayResponse(CamelModel):
    id: str
    day_number: int
    title: str | None = None
    summary: str = ""
    is_completed: bool
    topics: list[TopicResponse]


class JourneyRoadmapResponse(CamelModel):
    """A persisted journey with its day/topic graph."""

    id: str
    goal: str
    title: str | None = None
    duration: int
    prep_type: str
    progress: int
    progress_percentage: int
    is_completed: bool
    days: list[DayResponse]


class JourneySummary(CamelModel):
    """Journey list entry."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    goal: str
    title: str | None
    prep_type: str
    duration_days: int
    is_completed: bool
    created_at: datetime


class TopicCompletionResponse(CamelModel):
    success: bool = True
    is_completed: bool
    progress: int
    all_topics_completed: bool
