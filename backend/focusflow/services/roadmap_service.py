"""Roadmap generation, persistence and progress tracking."""

import math

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from focusflow.agent.llm_utils import extract_json_object
from focusflow.core.config import get_settings
from focusflow.core.errors import GenerationError, StorageError, ValidationError
from focusflow.core.logging import get_logger
from focusflow.models.journey import Day, Journey, JourneyProgress, Topic
from focusflow.schemas.roadmap import GeneratedRoadmap
from focusflow.services.content_generator import TextGenerator

logger = get_logger(__name__)

RESUME_PROMPT_CHAR_LIMIT = 2000

ROADMAP_PROMPT = """\
You are an expert learning path creator. Create a personalized learning roadmap \
for a user with the following goal:
"{goal}"

{resume_section}

Create a detailed day-by-day learning roadmap for exactly {days} days. First, determine:
1. A concise title for this learning journey
2. The preparation type (e.g., "Technical Interview Preparation", "Full-Stack Development Learning", etc.)

Then create the daily roadmap structured as follows:
1. Create exactly {days} sections, one for each day (Day 1, Day 2, etc.)
2. Each day should have a title, a one or two sentence summary, and duration of 1 day
3. Each day should contain specific topics to learn on that day
4. Each topic should have a title and description (DO NOT include detailed content)

Respond with a JSON object in this exact format:
{{
  "title": "Concise title of the learning journey",
  "timeline": "{days} days",
  "prepType": "Type of preparation/study",
  "roadmap": [
    {{
      "id": "day-1",
      "title": "Day 1: [Focus Area]",
      "summary": "What will be covered on Day 1",
      "completed": false,
      "duration": "1 day",
      "topics": [
        {{"id": "topic-1-1", "title": "Topic Title", "description": "Topic description", "completed": false}}
      ]
    }}
  ]
}}

Make sure the roadmap is tailored to the user's goal and background (if a resume is provided).
You MUST create exactly {days} days, with a logical progression of topics.
Each day should have 2-4 specific topics to learn.
Only respond with the JSON object, no additional text."""


# ============================================================================
# Roadmap generation
# ============================================================================


def _resume_section(resume_text: str | None) -> str:
    if not resume_text or not resume_text.strip():
        return "The user has not provided a resume."
    excerpt = resume_text.strip()
    if len(excerpt) > RESUME_PROMPT_CHAR_LIMIT:
        excerpt = excerpt[:RESUME_PROMPT_CHAR_LIMIT] + "..."
    return f"The user has provided their resume, here is the extracted text:\n{excerpt}"


def validate_timeline(timeline_days: int) -> None:
    """Raise ValidationError unless 1 <= timeline_days <= MAX_TIMELINE_DAYS."""
    max_days = get_settings().MAX_TIMELINE_DAYS
    if timeline_days < 1 or timeline_days > max_days:
        raise ValidationError(f"Timeline must be between 1 and {max_days} days")


class RoadmapBuildOrchestrator:
    """One LLM call -> parsed, validated day-by-day roadmap."""

    def __init__(self, llm: TextGenerator) -> None:
        self._llm = llm

    async def build(
        self,
        goal: str,
        resume_text: str | None,
        timeline_days: int,
    ) -> GeneratedRoadmap:
        """Generate a roadmap for a goal.

        Raises:
            ValidationError: If the goal is empty or the timeline out of range
            GenerationError: If the LLM fails or returns an unusable roadmap
        """
        if not goal or not goal.strip():
            raise ValidationError("Goal is required")
        validate_timeline(timeline_days)

        prompt = ROADMAP_PROMPT.format(
            goal=goal.strip(),
            resume_section=_resume_section(resume_text),
            days=timeline_days,
        )
        text = await self._llm.generate(prompt)
        logger.info("Roadmap response received", length=len(text))

        payload = extract_json_object(text)
        try:
            roadmap = GeneratedRoadmap.model_validate(payload)
        except PydanticValidationError as e:
            logger.error("Roadmap response failed validation", errors=e.error_count())
            raise GenerationError(f"Invalid roadmap structure: {e}") from e

        if len(roadmap.roadmap) != timeline_days:
            raise GenerationError(
                f"Roadmap has {len(roadmap.roadmap)} days, expected {timeline_days}"
            )

        logger.info("Roadmap generated", title=roadmap.title, days=timeline_days)
        return roadmap


# ============================================================================
# Persistence
# ============================================================================


async def save_roadmap(
    db: AsyncSession,
    *,
    user_id: str,
    goal: str,
    roadmap: GeneratedRoadmap,
    timeline_days: int,
    resume: str | None = None,
) -> str:
    """Persist a generated roadmap as Journey -> Days -> Topics.

    Topics are created with empty content; the generation queue fills them in.

    Returns:
        Created journey ID

    Note: This function commits the transaction.
    """
    if not goal or not goal.strip():
        raise ValidationError("Goal is required")
    validate_timeline(timeline_days)
    if len(roadmap.roadmap) != timeline_days:
        raise ValidationError(
            f"Roadmap has {len(roadmap.roadmap)} days but the timeline is {timeline_days}"
        )

    journey = Journey(
        user_id=user_id,
        goal=goal.strip(),
        title=roadmap.title,
        prep_type=roadmap.prep_type or "general",
        duration_days=timeline_days,
        resume=resume,
    )
    journey.progress = JourneyProgress(user_id=user_id, last_visited_day=1)

    for number, item in enumerate(roadmap.roadmap, start=1):
        day = Day(
            day_number=number,
            title=item.title or f"Day {number}",
            summary=item.summary or item.description or None,
        )
        day.topics = [
            Topic(position=i, name=t.title, description=t.description or None, content="")
            for i, t in enumerate(item.topics)
        ]
        journey.days.append(day)

    db.add(journey)
    await db.commit()

    logger.info(
        "Roadmap saved",
        journey_id=journey.id,
        user_id=user_id,
        days=timeline_days,
        topics=sum(len(d.topics) for d in roadmap.roadmap),
    )
    return journey.id


async def _load_journey(db: AsyncSession, journey_id: str) -> Journey:
    result = await db.execute(
        select(Journey)
        .where(Journey.id == journey_id)
        .options(
            selectinload(Journey.days).selectinload(Day.topics),
            selectinload(Journey.progress),
        )
    )
    journey = result.scalar_one_or_none()
    if journey is None:
        raise StorageError(f"Journey {journey_id} not found", not_found=True)
    return journey


async def get_journey_roadmap(db: AsyncSession, journey_id: str) -> dict:
    """Get a journey with its days (ordered by number) and topics."""
    journey = await _load_journey(db, journey_id)
    progress = journey.progress
    return {
        "id": journey.id,
        "goal": journey.goal,
        "title": journey.title,
        "duration": journey.duration_days,
        "prep_type": journey.prep_type,
        "progress": progress.last_visited_day if progress else 1,
        "progress_percentage": progress.progress_percentage if progress else 0,
        "is_completed": journey.is_completed,
        "days": [
            {
                "id": day.id,
                "day_number": day.day_number,
                "title": day.title,
                "summary": day.summary or "",
                "is_completed": day.is_completed,
                "topics": [
                    {
                        "id": topic.id,
                        "name": topic.name,
                        "description": topic.description,
                        "content": topic.content,
                        "is_completed": topic.is_completed,
                    }
                    for topic in day.topics
                ],
            }
            for day in journey.days
        ],
    }


async def list_user_journeys(db: AsyncSession, user_id: str) -> list[Journey]:
    """List a user's journeys, newest first."""
    result = await db.execute(
        select(Journey).where(Journey.user_id == user_id).order_by(Journey.created_at.desc())
    )
    return list(result.scalars().all())


# ============================================================================
# Progress
# ============================================================================


async def update_topic_completion(
    db: AsyncSession,
    *,
    journey_id: str,
    topic_id: str,
    is_completed: bool,
) -> dict:
    """Set a topic's completion flag and roll progress up to day and journey.

    Returns:
        Completion data: is_completed, progress (percent), all_topics_completed

    Note: This function commits the transaction.
    """
    journey = await _load_journey(db, journey_id)

    found = next(((d, t) for d in journey.days for t in d.topics if t.id == topic_id), None)
    if found is None:
        raise StorageError(f"Topic {topic_id} not found in journey {journey_id}", not_found=True)
    day_of_topic, topic = found
    topic.is_completed = is_completed

    all_topics = [t for d in journey.days for t in d.topics]
    completed = sum(1 for t in all_topics if t.is_completed)
    all_completed = bool(all_topics) and completed == len(all_topics)
    progress = math.floor(completed / len(all_topics) * 100 + 0.5) if all_topics else 0

    for day in journey.days:
        day.is_completed = bool(day.topics) and all(t.is_completed for t in day.topics)
    # The journey flag only ever flips on; un-ticking a topic later keeps it.
    if all_completed:
        journey.is_completed = True

    if journey.progress is None:
        journey.progress = JourneyProgress(user_id=journey.user_id)
    journey.progress.progress_percentage = progress
    journey.progress.last_visited_day = day_of_topic.day_number

    await db.commit()

    logger.info(
        "Topic completion updated",
        journey_id=journey_id,
        topic_id=topic_id,
        is_completed=is_completed,
        progress=progress,
    )
    return {
        "is_completed": is_completed,
        "progress": progress,
        "all_topics_completed": all_completed,
    }
