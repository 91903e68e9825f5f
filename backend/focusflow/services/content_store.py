"""Persistence contract for generated topic content."""

from typing import Protocol

from sqlalchemy import select

from focusflow.core.database import SessionFactory, get_db_session
from focusflow.core.errors import StorageError
from focusflow.core.logging import get_logger
from focusflow.models.journey import Topic

logger = get_logger(__name__)


class ContentStore(Protocol):
    """Key-value view of topic content, keyed by topic id."""

    async def has_content(self, topic_id: str) -> bool: ...

    async def save(self, topic_id: str, content: str) -> None: ...


class SqlContentStore:
    """ContentStore backed by the ``topics`` table.

    Each call opens its own session, so it is safe to use from background
    tasks that outlive the request that enqueued them.
    """

    def __init__(self, session_factory: SessionFactory = get_db_session) -> None:
        self._session_factory = session_factory

    async def has_content(self, topic_id: str) -> bool:
        """Return True iff the topic's content is non-empty.

        Read failures are logged and reported as False: a transient error
        costs a duplicate generation, not a failed request.
        """
        try:
            async with self._session_factory() as db:
                result = await db.execute(select(Topic.content).where(Topic.id == topic_id))
                content = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Failed to check topic content", topic_id=topic_id, error=str(e))
            return False
        return bool(content)

    async def save(self, topic_id: str, content: str) -> None:
        """Overwrite the topic's content.

        Raises:
            StorageError: If the topic does not exist or the write fails
        """
        try:
            async with self._session_factory() as db:
                topic = await db.get(Topic, topic_id)
                if topic is None:
                    raise StorageError(f"Topic {topic_id} not found", not_found=True)
                topic.content = content
        except StorageError:
            raise
        except Exception as e:
            logger.error("Failed to save topic content", topic_id=topic_id, error=str(e))
            raise StorageError(f"Failed to save content for topic {topic_id}: {e}") from e

        logger.info("Topic content saved", topic_id=topic_id, length=len(content))
