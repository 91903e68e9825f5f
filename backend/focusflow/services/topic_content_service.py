"""Topic content orchestration: initial kick-off, on-demand reads, status."""

import asyncio
import math
from dataclasses import dataclass, field

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from focusflow.core.database import SessionFactory, get_db_session
from focusflow.core.errors import GenerationError, StorageError, ValidationError
from focusflow.core.logging import get_logger
from focusflow.models.journey import Day, Journey, Topic
from focusflow.services.content_generator import ContentGenerator
from focusflow.services.content_store import ContentStore
from focusflow.services.generation_queue import GenerationQueue, GenerationTask

logger = get_logger(__name__)


# ============================================================================
# Journey snapshot
# ============================================================================


@dataclass(frozen=True)
class TopicSnapshot:
    id: str
    name: str
    has_content: bool


@dataclass(frozen=True)
class DaySnapshot:
    day_number: int
    summary: str
    topics: list[TopicSnapshot] = field(default_factory=list)


@dataclass(frozen=True)
class JourneySnapshot:
    """Detached copy of a journey's outline, safe to use after the session closes."""

    id: str
    goal: str
    days: list[DaySnapshot]


async def load_journey_snapshot(db: AsyncSession, journey_id: str) -> JourneySnapshot:
    """Load a journey's goal and its days (ordered by number) with topics.

    Raises:
        StorageError: If the journey does not exist or has no days
    """
    journey = await db.get(Journey, journey_id)
    if journey is None:
        raise StorageError(f"Journey {journey_id} not found", not_found=True)

    result = await db.execute(
        select(Day)
        .where(Day.journey_id == journey_id)
        .options(selectinload(Day.topics))
        .order_by(Day.day_number)
    )
    days = result.scalars().all()
    if not days:
        raise StorageError(f"No days found for journey {journey_id}", not_found=True)

    return JourneySnapshot(
        id=journey.id,
        goal=journey.goal,
        days=[
            DaySnapshot(
                day_number=day.day_number,
                summary=day.summary or "",
                topics=[TopicSnapshot(t.id, t.name, bool(t.content)) for t in day.topics],
            )
            for day in days
        ],
    )


# ============================================================================
# Initial content
# ============================================================================


@dataclass
class InitialContentResult:
    day_one_generated: int
    queued: int


class InitialContentOrchestrator:
    """Generates Day 1 synchronously and hands every later day to the queue."""

    def __init__(
        self,
        generator: ContentGenerator,
        store: ContentStore,
        queue: GenerationQueue,
        session_factory: SessionFactory = get_db_session,
    ) -> None:
        self._generator = generator
        self._store = store
        self._queue = queue
        self._session_factory = session_factory

    async def run(self, journey_id: str) -> InitialContentResult:
        """Kick off content generation for a journey.

        Blocks until every Day 1 topic lacking content has been generated and
        saved, then enqueues the remaining topics without waiting for them.

        Raises:
            ValidationError: If journey_id is empty
            StorageError: If the journey or its days cannot be loaded
            GenerationError: If any Day 1 topic failed; later days are still queued
        """
        if not journey_id or not journey_id.strip():
            raise ValidationError("Journey ID is required")

        try:
            async with self._session_factory() as db:
                journey = await load_journey_snapshot(db, journey_id)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to load journey {journey_id}: {e}") from e

        day_one = next((d for d in journey.days if d.day_number == 1), None)
        failed: list[str] = []
        generated = 0
        if day_one is not None:
            todo = [t for t in day_one.topics if not t.has_content]
            results = await asyncio.gather(
                *(self._generate_now(t, journey.goal, day_one) for t in todo),
                return_exceptions=True,
            )
            for topic, outcome in zip(todo, results):
                if isinstance(outcome, BaseException):
                    logger.error(
                        "Day 1 topic generation failed",
                        journey_id=journey_id,
                        topic_id=topic.id,
                        error=str(outcome),
                    )
                    failed.append(topic.name)
                else:
                    generated += 1

        queued = 0
        for day in journey.days:
            if day.day_number == 1:
                continue
            for topic in day.topics:
                if topic.has_content:
                    continue
                self._queue.enqueue(
                    GenerationTask(
                        topic_id=topic.id,
                        topic_name=topic.name,
                        journey_goal=journey.goal,
                        day_number=day.day_number,
                        day_summary=day.summary,
                    )
                )
                queued += 1

        logger.info(
            "Initial content generation started",
            journey_id=journey_id,
            day_one_generated=generated,
            day_one_failed=len(failed),
            queued=queued,
        )
        if failed:
            raise GenerationError(f"Failed to generate Day 1 content for: {', '.join(failed)}")
        return InitialContentResult(day_one_generated=generated, queued=queued)

    async def _generate_now(self, topic: TopicSnapshot, goal: str, day: DaySnapshot) -> None:
        content = await self._generator.generate(topic.name, goal, day.day_number, day.summary)
        await self._store.save(topic.id, content)


# ============================================================================
# On-demand content and status
# ============================================================================


async def get_or_generate_topic_content(
    db: AsyncSession,
    generator: ContentGenerator,
    store: ContentStore,
    topic_id: str,
) -> tuple[Topic, str]:
    """Return a topic's content, generating it synchronously when missing.

    This path can race with the background queue for the same topic; both
    writes are valid content and the last one wins.

    Raises:
        StorageError: If the topic (or its day/journey) does not exist
        GenerationError: If generation fails
    """
    result = await db.execute(
        select(Topic)
        .where(Topic.id == topic_id)
        .options(selectinload(Topic.day).selectinload(Day.journey))
    )
    topic = result.scalar_one_or_none()
    if topic is None:
        raise StorageError(f"Topic {topic_id} not found", not_found=True)

    if topic.content:
        return topic, topic.content

    day = topic.day
    logger.info("Generating topic content on demand", topic_id=topic_id, day_number=day.day_number)
    content = await generator.generate(topic.name, day.journey.goal, day.day_number, day.summary or "")
    await store.save(topic.id, content)
    return topic, content


async def get_generation_status(db: AsyncSession, journey_id: str) -> dict:
    """Count generated topics across a journey."""
    has_content = func.coalesce(func.length(Topic.content), 0) > 0
    result = await db.execute(
        select(
            func.count(Topic.id),
            func.coalesce(func.sum(case((has_content, 1), else_=0)), 0),
        )
        .join(Day, Topic.day_id == Day.id)
        .where(Day.journey_id == journey_id)
    )
    total, generated = result.one()

    # Half-up rounding, matching what the web client displays
    percent = math.floor(generated / total * 100 + 0.5) if total else 0
    return {
        "journey_id": journey_id,
        "total_topics": total,
        "generated_topics": generated,
        "percent_complete": percent,
        "is_complete": total > 0 and total == generated,
    }
