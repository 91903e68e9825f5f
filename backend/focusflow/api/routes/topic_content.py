"""Topic content API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from focusflow.api.deps import (
    DBDep,
    get_content_generator,
    get_content_store,
    get_initial_content_orchestrator,
)
from focusflow.api.errors import to_http_exception
from focusflow.core.errors import FocusFlowError
from focusflow.schemas.content import (
    GenerationStatusResponse,
    InitialContentResponse,
    TopicContentResponse,
)
from focusflow.services.content_generator import ContentGenerator
from focusflow.services.content_store import ContentStore
from focusflow.services.topic_content_service import (
    InitialContentOrchestrator,
    get_generation_status,
    get_or_generate_topic_content,
)

router = APIRouter(prefix="/topic-content", tags=["topic-content"])


@router.post(
    "/generate-initial/{journey_id}",
    response_model=InitialContentResponse,
    response_model_by_alias=True,
)
async def generate_initial_content(
    journey_id: str,
    orchestrator: Annotated[InitialContentOrchestrator, Depends(get_initial_content_orchestrator)],
) -> InitialContentResponse:
    """Generate Day 1 content now and queue the rest of the journey."""
    try:
        result = await orchestrator.run(journey_id)
    except FocusFlowError as e:
        raise to_http_exception(e) from e
    return InitialContentResponse(
        message="Day 1 content generated, remaining days queued",
        day_one_generated=result.day_one_generated,
        queued=result.queued,
    )


@router.get("/topic/{topic_id}", response_model=TopicContentResponse, response_model_by_alias=True)
async def get_topic_content(
    topic_id: str,
    db: DBDep,
    generator: Annotated[ContentGenerator, Depends(get_content_generator)],
    store: Annotated[ContentStore, Depends(get_content_store)],
) -> TopicContentResponse:
    """Return a topic's content, generating it on demand if missing."""
    try:
        topic, content = await get_or_generate_topic_content(db, generator, store, topic_id)
    except FocusFlowError as e:
        raise to_http_exception(e) from e
    return TopicContentResponse(id=topic.id, name=topic.name, content=content)


@router.get(
    "/status/{journey_id}",
    response_model=GenerationStatusResponse,
    response_model_by_alias=True,
)
async def get_content_status(journey_id: str, db: DBDep) -> GenerationStatusResponse:
    """Report how many topics of a journey have content."""
    return GenerationStatusResponse.model_validate(await get_generation_status(db, journey_id))
