"""Service layer modules."""

from focusflow.services import (
    chat_service,
    content_generator,
    content_store,
    generation_queue,
    resume_service,
    roadmap_service,
    topic_content_service,
)

__all__ = [
    "chat_service",
    "content_generator",
    "content_store",
    "generation_queue",
    "resume_service",
    "roadmap_service",
    "topic_content_service",
]
