"""Shared fixtures: a throwaway SQLite database per test and a seeded journey."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import focusflow.models  # noqa: F401  (registers tables on Base.metadata)
from focusflow.core.database import Base
from focusflow.models import Day, Journey, JourneyProgress, Topic


@pytest_asyncio.fixture
async def session_maker(tmp_path) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Session maker bound to a fresh file-backed database."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", connect_args={"timeout": 15}
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def session_factory(session_maker: async_sessionmaker[AsyncSession]):
    """Committing session scope with the same contract as get_db_session."""

    @asynccontextmanager
    async def factory() -> AsyncGenerator[AsyncSession, None]:
        session = session_maker()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    return factory


@pytest_asyncio.fixture
async def seed_journey(test_session: AsyncSession) -> Journey:
    """A committed three-day journey with two topics per day and no content."""
    journey = Journey(
        user_id="user-1",
        goal="Prepare for a backend engineering interview",
        title="Backend Interview Prep",
        prep_type="Technical Interview Preparation",
        duration_days=3,
        resume="Five years of Python and Go.",
    )
    journey.progress = JourneyProgress(user_id="user-1")
    for number in range(1, 4):
        day = Day(day_number=number, title=f"Day {number}", summary=f"Summary of day {number}")
        day.topics = [
            Topic(position=i, name=f"Topic {number}.{i + 1}", description="", content="")
            for i in range(2)
        ]
        journey.days.append(day)
    test_session.add(journey)
    await test_session.commit()
    return journey
