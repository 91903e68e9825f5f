"""API dependencies."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from focusflow.agent.llm import LLMClient
from focusflow.core.auth import get_auth_user
from focusflow.core.config import get_settings
from focusflow.core.database import SessionFactory, get_db_session, get_session
from focusflow.services.chat_service import ChatContextAssembler, ChatService, SessionStore
from focusflow.services.content_generator import ContentGenerator
from focusflow.services.content_store import ContentStore, SqlContentStore
from focusflow.services.generation_queue import GenerationQueue
from focusflow.services.topic_content_service import InitialContentOrchestrator


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    async for session in get_session():
        yield session


def get_llm_client(request: Request) -> LLMClient:
    """Process-wide LLM client created at startup."""
    return request.app.state.llm_client


def get_generation_queue(request: Request) -> GenerationQueue:
    """Process-wide background generation queue created at startup."""
    return request.app.state.generation_queue


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.chat_sessions


def get_session_factory() -> SessionFactory:
    """Session scope for work that outlives or runs beside the request session."""
    return get_db_session


def get_content_store(
    session_factory: Annotated[SessionFactory, Depends(get_session_factory)],
) -> ContentStore:
    return SqlContentStore(session_factory)


def get_content_generator(
    llm: Annotated[LLMClient, Depends(get_llm_client)],
) -> ContentGenerator:
    return ContentGenerator(llm)


def get_initial_content_orchestrator(
    generator: Annotated[ContentGenerator, Depends(get_content_generator)],
    store: Annotated[ContentStore, Depends(get_content_store)],
    queue: Annotated[GenerationQueue, Depends(get_generation_queue)],
    session_factory: Annotated[SessionFactory, Depends(get_session_factory)],
) -> InitialContentOrchestrator:
    return InitialContentOrchestrator(generator, store, queue, session_factory)


def get_chat_service(
    llm: Annotated[LLMClient, Depends(get_llm_client)],
    sessions: Annotated[SessionStore, Depends(get_session_store)],
) -> ChatService:
    settings = get_settings()
    return ChatService(
        llm,
        sessions,
        ChatContextAssembler(settings.CHAT_RESUME_CHAR_LIMIT, settings.CHAT_TOPIC_CHAR_LIMIT),
        history_limit=settings.CHAT_HISTORY_LIMIT,
        pin_system_message=settings.CHAT_PIN_SYSTEM_MESSAGE,
    )


DBDep = Annotated[AsyncSession, Depends(get_db)]

# Auth user dependency - subject id from the identity provider, or "guest"
CurrentUser = Annotated[str, Depends(get_auth_user)]
