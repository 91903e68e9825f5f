"""Chat about a journey: bounded prompt context, capped history, persistence."""

import time
from collections import OrderedDict, deque
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Literal, Protocol

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from focusflow.agent.llm import LLMClient
from focusflow.core.errors import StorageError, ValidationError
from focusflow.core.logging import get_logger
from focusflow.models.chat import ChatMessage, ChatSession
from focusflow.models.journey import Day, Journey, Topic

logger = get_logger(__name__)

DEFAULT_RESUME_LIMIT = 2000
DEFAULT_TOPIC_LIMIT = 1000
DEFAULT_HISTORY_LIMIT = 20

RESUME_TRUNCATION_MARKER = "... (truncated)"
TOPIC_TRUNCATION_MARKER = "..."

CHAT_SYSTEM_PROMPT = """\
You are FocusFlow's study assistant. Help the learner with their roadmap: \
explain concepts, suggest how to approach the current topic, and keep answers \
concise and practical. Use the learner context below when it is relevant."""

TurnRole = Literal["user", "model", "system"]


# ============================================================================
# Context assembly
# ============================================================================


@dataclass(frozen=True)
class OutlineDay:
    day_number: int
    topics: list[tuple[str, bool]]  # (topic name, completed)


@dataclass(frozen=True)
class ChatContext:
    """Optional fragments a chat prompt can be built from."""

    goal: str | None = None
    deadline: str | None = None
    completed_topics: int | None = None
    total_topics: int | None = None
    resume: str | None = None
    outline: list[OutlineDay] = field(default_factory=list)
    topic_name: str | None = None
    topic_content: str | None = None


def _truncate(text: str, limit: int, marker: str) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + marker


class ChatContextAssembler:
    """Builds one bounded-size context block from optional fragments.

    Order: goal/deadline/progress, resume excerpt, roadmap outline, current
    topic. Empty fragments produce no section at all.
    """

    def __init__(
        self,
        resume_limit: int = DEFAULT_RESUME_LIMIT,
        topic_limit: int = DEFAULT_TOPIC_LIMIT,
    ) -> None:
        self.resume_limit = resume_limit
        self.topic_limit = topic_limit

    def assemble(self, ctx: ChatContext) -> str:
        sections = [
            self._learner_section(ctx),
            self._resume_section(ctx),
            self._outline_section(ctx),
            self._topic_section(ctx),
        ]
        return "\n\n".join(s for s in sections if s)

    def resume_excerpt(self, resume: str) -> str:
        return _truncate(resume.strip(), self.resume_limit, RESUME_TRUNCATION_MARKER)

    def topic_excerpt(self, content: str) -> str:
        return _truncate(content.strip(), self.topic_limit, TOPIC_TRUNCATION_MARKER)

    def _learner_section(self, ctx: ChatContext) -> str:
        lines = []
        if ctx.goal and ctx.goal.strip():
            lines.append(f"Learning goal: {ctx.goal.strip()}")
        if ctx.deadline:
            lines.append(f"Deadline: {ctx.deadline}")
        if ctx.total_topics:
            lines.append(f"Progress: {ctx.completed_topics or 0}/{ctx.total_topics} topics completed")
        return "\n".join(lines)

    def _resume_section(self, ctx: ChatContext) -> str:
        if not ctx.resume or not ctx.resume.strip():
            return ""
        return f"Learner background (resume):\n{self.resume_excerpt(ctx.resume)}"

    def _outline_section(self, ctx: ChatContext) -> str:
        days = [d for d in ctx.outline if d.topics]
        if not days:
            return ""
        lines = ["Roadmap:"]
        for day in days:
            names = ", ".join(f"[{'x' if done else ' '}] {name}" for name, done in day.topics)
            lines.append(f"Day {day.day_number}: {names}")
        return "\n".join(lines)

    def _topic_section(self, ctx: ChatContext) -> str:
        name = (ctx.topic_name or "").strip()
        content = (ctx.topic_content or "").strip()
        if not name and not content:
            return ""
        lines = [f"Current topic: {name}" if name else "Current topic:"]
        if content:
            lines.append(self.topic_excerpt(content))
        return "\n".join(lines)


# ============================================================================
# History
# ============================================================================


@dataclass(frozen=True)
class ChatTurn:
    role: TurnRole
    text: str


class ChatHistory:
    """Sliding window over the most recent turns.

    With ``pin_system_message`` the latest system turn is kept outside the
    window and always emitted first; otherwise it is an ordinary turn and is
    evicted like any other once it falls out of the window.
    """

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT, pin_system_message: bool = False) -> None:
        if limit < 1:
            raise ValueError("history limit must be at least 1")
        self.limit = limit
        self.pin_system_message = pin_system_message
        self._turns: deque[ChatTurn] = deque()
        self._pinned: ChatTurn | None = None
        self.last_context: str | None = None

    def __len__(self) -> int:
        return len(self._turns)

    def append(self, role: TurnRole, text: str) -> None:
        turn = ChatTurn(role, text)
        if role == "system" and self.pin_system_message:
            self._pinned = turn
            return
        self._turns.append(turn)
        while len(self._turns) > self.limit:
            self._turns.popleft()

    def set_context(self, context: str) -> None:
        """Record a context message unless it matches the last one recorded."""
        if not context or context == self.last_context:
            return
        self.last_context = context
        self.append("system", context)

    def copy(self) -> "ChatHistory":
        """Copy of the window, pinned turn and last context."""
        clone = ChatHistory(self.limit, self.pin_system_message)
        clone._turns = deque(self._turns)
        clone._pinned = self._pinned
        clone.last_context = self.last_context
        return clone

    def turns(self) -> list[ChatTurn]:
        pinned = [self._pinned] if self._pinned else []
        return pinned + list(self._turns)

    def to_messages(self) -> list[BaseMessage]:
        messages: list[BaseMessage] = []
        for turn in self.turns():
            if turn.role == "system":
                messages.append(SystemMessage(content=turn.text))
            elif turn.role == "model":
                messages.append(AIMessage(content=turn.text))
            else:
                messages.append(HumanMessage(content=turn.text))
        return messages


# ============================================================================
# Session store
# ============================================================================


class SessionStore(Protocol):
    def get(self, session_id: str) -> ChatHistory | None: ...

    def put(self, session_id: str, history: ChatHistory) -> None: ...

    def evict(self, session_id: str) -> None: ...


class InMemorySessionStore:
    """LRU + TTL bounded map of session id to chat history."""

    def __init__(
        self,
        max_sessions: int = 1000,
        ttl_seconds: float = 6 * 60 * 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_sessions = max_sessions
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, ChatHistory]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, session_id: str) -> ChatHistory | None:
        entry = self._entries.get(session_id)
        if entry is None:
            return None
        touched, history = entry
        now = self._clock()
        if now - touched > self.ttl_seconds:
            del self._entries[session_id]
            return None
        self._entries[session_id] = (now, history)
        self._entries.move_to_end(session_id)
        return history

    def put(self, session_id: str, history: ChatHistory) -> None:
        self._entries[session_id] = (self._clock(), history)
        self._entries.move_to_end(session_id)
        while len(self._entries) > self.max_sessions:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Chat session evicted", session_id=evicted)

    def evict(self, session_id: str) -> None:
        self._entries.pop(session_id, None)


def new_session_id() -> str:
    """Synthesize a session id from the current time (not collision-proof)."""
    return f"session_{int(time.time() * 1000)}"


# ============================================================================
# Persistence
# ============================================================================


async def create_chat_session(db: AsyncSession, journey_id: str, session_id: str | None = None) -> ChatSession:
    """Create a persisted chat session for a journey."""
    if not journey_id:
        raise ValidationError("journeyId is required to create a chat session")
    if await db.get(Journey, journey_id) is None:
        raise StorageError(f"Journey {journey_id} not found", not_found=True)

    session = ChatSession(id=session_id or new_session_id(), journey_id=journey_id)
    db.add(session)
    await db.flush()
    logger.info("Chat session created", session_id=session.id, journey_id=journey_id)
    return session


async def get_or_create_session(
    db: AsyncSession, session_id: str | None, journey_id: str | None
) -> ChatSession:
    """Return the existing session, or create one for the journey.

    A session is bound to the journey it was created for.

    Raises:
        ValidationError: If the session belongs to another journey, or a new
            session is needed and no journey id is given
    """
    if session_id:
        existing = await db.get(ChatSession, session_id)
        if existing is not None:
            if journey_id and existing.journey_id != journey_id:
                raise ValidationError(
                    f"Chat session {session_id} belongs to a different journey"
                )
            return existing
    if not journey_id:
        raise ValidationError("journeyId is required to create a new chat session")
    return await create_chat_session(db, journey_id, session_id)


async def save_chat_message(db: AsyncSession, *, session_id: str, role: str, content: str) -> ChatMessage:
    """Save a chat message."""
    msg = ChatMessage(session_id=session_id, role=role, content=content)
    db.add(msg)
    await db.flush()
    return msg


async def get_chat_history(db: AsyncSession, session_id: str) -> list[ChatMessage]:
    """Get a session's messages in chronological order."""
    result = await db.execute(
        select(ChatMessage)
        .where(ChatMessage.session_id == session_id)
        .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
    )
    return list(result.scalars().all())


async def load_chat_context(
    db: AsyncSession, journey_id: str, current_topic_id: str | None = None
) -> ChatContext:
    """Collect chat context fragments for a journey."""
    result = await db.execute(
        select(Journey)
        .where(Journey.id == journey_id)
        .options(selectinload(Journey.days).selectinload(Day.topics))
    )
    journey = result.scalar_one_or_none()
    if journey is None:
        raise StorageError(f"Journey {journey_id} not found", not_found=True)

    all_topics: list[Topic] = [t for d in journey.days for t in d.topics]
    current = next((t for t in all_topics if t.id == current_topic_id), None)
    deadline = journey.created_at + timedelta(days=journey.duration_days)

    return ChatContext(
        goal=journey.goal,
        deadline=deadline.date().isoformat(),
        completed_topics=sum(1 for t in all_topics if t.is_completed),
        total_topics=len(all_topics),
        resume=journey.resume,
        outline=[
            OutlineDay(d.day_number, [(t.name, t.is_completed) for t in d.topics])
            for d in journey.days
        ],
        topic_name=current.name if current else None,
        topic_content=current.content if current else None,
    )


# ============================================================================
# Chat turn
# ============================================================================


class ChatService:
    """Runs one chat turn against the LLM."""

    def __init__(
        self,
        llm: LLMClient,
        sessions: SessionStore,
        assembler: ChatContextAssembler | None = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        pin_system_message: bool = False,
    ) -> None:
        self._llm = llm
        self._sessions = sessions
        self._assembler = assembler or ChatContextAssembler()
        self._history_limit = history_limit
        self._pin_system_message = pin_system_message

    def _history(self, session_id: str) -> ChatHistory:
        history = self._sessions.get(session_id)
        if history is None:
            history = ChatHistory(self._history_limit, self._pin_system_message)
        return history

    async def reply(
        self,
        db: AsyncSession,
        *,
        message: str,
        session_id: str | None = None,
        journey_id: str | None = None,
        current_topic_id: str | None = None,
    ) -> dict:
        """Answer a user message, updating in-memory and persisted history.

        Returns:
            ``{"session_id": ..., "reply": ...}``
        """
        message = (message or "").strip()
        if not message:
            raise ValidationError("Message is required")

        persisted = None
        if journey_id:
            persisted = await get_or_create_session(db, session_id, journey_id)
            session_id = persisted.id
        session_id = session_id or new_session_id()

        # The stored history only changes once the LLM has replied
        history = self._history(session_id).copy()
        context = ""
        if journey_id:
            ctx = await load_chat_context(db, journey_id, current_topic_id)
            context = self._assembler.assemble(ctx)
        history.set_context(f"{CHAT_SYSTEM_PROMPT}\n\n{context}" if context else CHAT_SYSTEM_PROMPT)
        history.append("user", message)

        reply = await self._llm.chat(history.to_messages())
        history.append("model", reply)
        self._sessions.put(session_id, history)

        if persisted is not None:
            await save_chat_message(db, session_id=session_id, role="user", content=message)
            await save_chat_message(db, session_id=session_id, role="assistant", content=reply)

        logger.info("Chat reply generated", session_id=session_id, history_turns=len(history))
        return {"session_id": session_id, "reply": reply}
