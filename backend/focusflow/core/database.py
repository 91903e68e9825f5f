"""Database engine and session scopes."""

from collections.abc import AsyncGenerator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from focusflow.core.config import get_settings
from focusflow.core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # Request sessions and generation-queue workers write concurrently;
        # wait for the file lock instead of failing with "database is locked".
        return {"connect_args": {"timeout": settings.SQLITE_BUSY_TIMEOUT_SECONDS}}
    return {"pool_pre_ping": True}


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DATABASE_ECHO,
    future=True,
    **_engine_options(settings.DATABASE_URL),
)

if engine.dialect.name == "sqlite":

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

# Anything that opens a committing session scope, e.g. get_db_session.
# Background workers take one of these instead of a request-scoped session.
SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class Base(DeclarativeBase):
    pass


async def init_db() -> None:
    """Create any missing tables for the journey and chat models."""
    import focusflow.models  # noqa: F401  (registers tables on Base.metadata)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database ready", tables=sorted(Base.metadata.tables))


async def close_db() -> None:
    logger.info("Closing database connections")
    await engine.dispose()


@asynccontextmanager
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Session scope that commits on success and rolls back on error.

    Used directly by background work (content store, orchestrator) and, via
    ``get_session``, once per HTTP request.
    """
    session = AsyncSessionLocal()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session for FastAPI dependency injection."""
    async with get_db_session() as session:
        yield session
