"""In-process background queue for topic content generation.

Topics outside Day 1 are generated lazily through this queue. It holds a FIFO
of pending ``GenerationTask``s and runs at most ``concurrency`` of them at a
time as asyncio tasks, so outbound LLM calls stay bounded while the request
that enqueued the work returns immediately.

All queue state is touched only from the event loop thread; there is no await
between reading and updating it, so no lock is needed.

Pending work lives in memory only. A process restart drops it, and a failed
task is logged and dropped rather than retried; the on-demand read path
regenerates such topics when a user opens them.
"""

import asyncio
from collections import deque
from dataclasses import dataclass

from focusflow.core.logging import get_logger
from focusflow.services.content_generator import ContentGenerator
from focusflow.services.content_store import ContentStore

logger = get_logger(__name__)

DEFAULT_CONCURRENCY = 2


@dataclass(frozen=True)
class GenerationTask:
    """One pending topic-content generation."""

    topic_id: str
    topic_name: str
    journey_goal: str
    day_number: int
    day_summary: str = ""


class GenerationQueue:
    """Bounded-concurrency, self-draining generation worker."""

    def __init__(
        self,
        generator: ContentGenerator,
        store: ContentStore,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._generator = generator
        self._store = store
        self._concurrency = concurrency

        self._pending: deque[GenerationTask] = deque()
        self._active = 0
        self._processing = False
        self._idle = asyncio.Event()
        self._idle.set()

        # Strong references so running tasks are not garbage collected
        self._running: set[asyncio.Task[None]] = set()

    @property
    def concurrency(self) -> int:
        return self._concurrency

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def active_count(self) -> int:
        return self._active

    @property
    def is_processing(self) -> bool:
        return self._processing

    def enqueue(self, task: GenerationTask) -> None:
        """Add a task and kick dispatch. Never blocks.

        Must be called from code running inside the event loop.
        """
        self._pending.append(task)
        logger.debug("Topic queued for generation", topic_id=task.topic_id, pending=len(self._pending))
        self._dispatch()

    async def join(self) -> None:
        """Wait until nothing is pending or in flight."""
        await self._idle.wait()

    def _dispatch(self) -> None:
        while self._active < self._concurrency and self._pending:
            task = self._pending.popleft()
            self._active += 1
            self._processing = True
            self._idle.clear()
            running = asyncio.get_running_loop().create_task(
                self._run(task), name=f"generate-topic-{task.topic_id}"
            )
            self._running.add(running)
            running.add_done_callback(self._running.discard)

        if not self._pending and self._active == 0:
            if self._processing:
                logger.info("Generation queue drained")
            self._processing = False
            self._idle.set()

    async def _run(self, task: GenerationTask) -> None:
        try:
            # Re-checked here, right before generating, to narrow the race with
            # the on-demand path that may have filled the topic meanwhile.
            if await self._store.has_content(task.topic_id):
                logger.info("Content already exists, skipping", topic_id=task.topic_id)
                return

            content = await self._generator.generate(
                task.topic_name,
                task.journey_goal,
                task.day_number,
                task.day_summary,
            )
            await self._store.save(task.topic_id, content)
            logger.info(
                "Generated and saved topic content",
                topic_id=task.topic_id,
                day_number=task.day_number,
            )
        except Exception as e:
            logger.error(
                "Topic content generation failed",
                topic_id=task.topic_id,
                topic=task.topic_name,
                error=str(e),
                exc_info=True,
            )
        finally:
            self._active -= 1
            self._dispatch()
