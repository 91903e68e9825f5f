"""AI assistant routes: chat and text simplification."""

from typing import Annotated

from fastapi import APIRouter, Depends

from focusflow.agent.llm import LLMClient
from focusflow.api.deps import DBDep, get_chat_service, get_llm_client
from focusflow.api.errors import to_http_exception
from focusflow.core.errors import FocusFlowError
from focusflow.core.logging import get_logger
from focusflow.schemas.chat import ChatMessageResponse, ChatRequest, ChatResponse
from focusflow.schemas.content import SimplifyRequest, SimplifyResponse
from focusflow.services.chat_service import ChatService, get_chat_history
from focusflow.services.content_generator import simplify_text

logger = get_logger(__name__)
router = APIRouter(prefix="/ai", tags=["ai"])


@router.post("/chat", response_model=ChatResponse, response_model_by_alias=True)
async def chat(
    data: ChatRequest,
    db: DBDep,
    service: Annotated[ChatService, Depends(get_chat_service)],
) -> ChatResponse:
    """Send a message to the study assistant."""
    try:
        result = await service.reply(
            db,
            message=data.message,
            session_id=data.session_id,
            journey_id=data.journey_id,
            current_topic_id=data.current_topic_id,
        )
    except FocusFlowError as e:
        logger.error("Chat failed", session_id=data.session_id, error=str(e))
        raise to_http_exception(e) from e
    return ChatResponse.model_validate(result)


@router.get(
    "/chat/{session_id}/history",
    response_model=list[ChatMessageResponse],
    response_model_by_alias=True,
)
async def chat_history(session_id: str, db: DBDep) -> list[ChatMessageResponse]:
    """Persisted messages of a chat session, oldest first."""
    messages = await get_chat_history(db, session_id)
    return [ChatMessageResponse.model_validate(m) for m in messages]


@router.post("/simplify", response_model=SimplifyResponse, response_model_by_alias=True)
async def simplify(
    data: SimplifyRequest,
    llm: Annotated[LLMClient, Depends(get_llm_client)],
) -> SimplifyResponse:
    try:
        simplified = await simplify_text(llm, data.text)
    except FocusFlowError as e:
        raise to_http_exception(e) from e
    return SimplifyResponse(simplified=simplified)
