"""API routes."""

from focusflow.api.routes import ai, resume, roadmaps, topic_content

__all__ = ["ai", "resume", "roadmaps", "topic_content"]
