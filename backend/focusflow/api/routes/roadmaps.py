"""Roadmap API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from focusflow.agent.llm import LLMClient
from focusflow.api.deps import CurrentUser, DBDep, get_llm_client
from focusflow.api.errors import to_http_exception
from focusflow.core.config import get_settings
from focusflow.core.errors import FocusFlowError
from focusflow.core.logging import get_logger
from focusflow.schemas.roadmap import (
    GeneratedRoadmap,
    JourneyRoadmapResponse,
    JourneySummary,
    RoadmapGenerateRequest,
    RoadmapSaveRequest,
    RoadmapSaveResponse,
    TopicCompletionResponse,
    TopicCompletionUpdate,
)
from focusflow.services import roadmap_service

logger = get_logger(__name__)
router = APIRouter(prefix="/roadmap", tags=["roadmap"])


@router.post("/generate", response_model=GeneratedRoadmap, response_model_by_alias=True)
async def generate_roadmap(
    data: RoadmapGenerateRequest,
    llm: Annotated[LLMClient, Depends(get_llm_client)],
) -> GeneratedRoadmap:
    """Generate a personalized roadmap (not yet persisted)."""
    timeline = data.timeline_in_days or get_settings().DEFAULT_TIMELINE_DAYS
    try:
        return await roadmap_service.RoadmapBuildOrchestrator(llm).build(
            data.goal, data.resume_text, timeline
        )
    except FocusFlowError as e:
        logger.error("Roadmap generation failed", error=str(e))
        raise to_http_exception(e) from e


@router.post(
    "/save",
    response_model=RoadmapSaveResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
)
async def save_roadmap(
    data: RoadmapSaveRequest,
    db: DBDep,
    user_id: CurrentUser,
) -> RoadmapSaveResponse:
    """Persist a generated roadmap as a new journey."""
    try:
        journey_id = await roadmap_service.save_roadmap(
            db,
            user_id=user_id,
            goal=data.goal,
            roadmap=data.roadmap,
            timeline_days=data.timeline_in_days,
            resume=data.resume,
        )
    except FocusFlowError as e:
        raise to_http_exception(e) from e
    return RoadmapSaveResponse(message="Roadmap saved successfully", journey_id=journey_id)


@router.get("/user/journeys", response_model=list[JourneySummary], response_model_by_alias=True)
async def list_journeys(db: DBDep, user_id: CurrentUser) -> list[JourneySummary]:
    """List the current user's journeys."""
    journeys = await roadmap_service.list_user_journeys(db, user_id)
    return [JourneySummary.model_validate(j) for j in journeys]


@router.get("/{journey_id}", response_model=JourneyRoadmapResponse, response_model_by_alias=True)
async def get_roadmap(journey_id: str, db: DBDep) -> JourneyRoadmapResponse:
    """Get a complete roadmap with days and topics."""
    try:
        data = await roadmap_service.get_journey_roadmap(db, journey_id)
    except FocusFlowError as e:
        raise to_http_exception(e) from e
    return JourneyRoadmapResponse.model_validate(data)


@router.patch(
    "/{journey_id}/topic/{topic_id}",
    response_model=TopicCompletionResponse,
    response_model_by_alias=True,
)
async def update_topic_status(
    journey_id: str,
    topic_id: str,
    data: TopicCompletionUpdate,
    db: DBDep,
) -> TopicCompletionResponse:
    """Update topic completion status and journey progress."""
    try:
        result = await roadmap_service.update_topic_completion(
            db,
            journey_id=journey_id,
            topic_id=topic_id,
            is_completed=data.is_completed,
        )
    except FocusFlowError as e:
        raise to_http_exception(e) from e
    return TopicCompletionResponse.model_validate(result)
