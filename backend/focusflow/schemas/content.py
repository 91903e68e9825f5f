"""Topic content schemas."""

from focusflow.schemas.roadmap import CamelModel


class TopicContentResponse(CamelModel):
    """Content for a single topic."""

    id: str
    name: str
    content: str
    is_generating: bool = False


class InitialContentResponse(CamelModel):
    """Result of kicking off content generation for a journey."""

    success: bool = True
    message: str
    day_one_generated: int
    queued: int


class GenerationStatusResponse(CamelModel):
    """How much of a journey's content exists."""

    journey_id: str
    total_topics: int
    generated_topics: int
    percent_complete: int
    is_complete: bool


class SimplifyRequest(CamelModel):
    text: str


class SimplifyResponse(CamelModel):
    simplified: str


class ParsedResumeResponse(CamelModel):
    raw_text: str
