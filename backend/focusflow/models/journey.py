"""Learning journey models: a journey is split into days, a day into topics."""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from focusflow.core.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class Journey(Base):
    """A user's learning roadmap instance spanning a fixed number of days."""

    __tablename__ = "journeys"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String, index=True)

    goal: Mapped[str] = mapped_column(Text)
    title: Mapped[str | None] = mapped_column(String)
    prep_type: Mapped[str] = mapped_column(String, default="general")
    duration_days: Mapped[int] = mapped_column(Integer)
    resume: Mapped[str | None] = mapped_column(Text)

    is_completed: Mapped[bool] = mapped_column(Boolean, default=False)

    days: Mapped[list["Day"]] = relationship(
        back_populates="journey",
        cascade="all, delete-orphan",
        order_by="Day.day_number",
    )
    progress: Mapped["JourneyProgress | None"] = relationship(
        back_populates="journey",
        cascade="all, delete-orphan",
        uselist=False,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class Day(Base):
    """One day of a journey."""

    __tablename__ = "days"
    __table_args__ = (UniqueConstraint("journey_id", "day_number"),)

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid)
    journey_id: Mapped[str] = mapped_column(ForeignKey("journeys.id"), index=True)
    day_number: Mapped[int] = mapped_column(Integer)

    title: Mapped[str | None] = mapped_column(String)
    summary: Mapped[str | None] = mapped_column(Text)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False)

    journey: Mapped[Journey] = relationship(back_populates="days")
    topics: Mapped[list["Topic"]] = relationship(
        back_populates="day",
        cascade="all, delete-orphan",
        order_by="Topic.position",
    )


class Topic(Base):
    """Smallest learning unit; content is generated lazily by the LLM."""

    __tablename__ = "topics"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid)
    day_id: Mapped[str] = mapped_column(ForeignKey("days.id"), index=True)
    position: Mapped[int] = mapped_column(Integer, default=0)

    name: Mapped[str] = mapped_column(String)
    description: Mapped[str | None] = mapped_column(Text)
    content: Mapped[str | None] = mapped_column(Text)  # NULL or "" until generated
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False)

    day: Mapped[Day] = relationship(back_populates="topics")


class JourneyProgress(Base):
    """Where the user is in a journey."""

    __tablename__ = "journey_progress"

    id: Mapped[int] = mapped_column(primary_key=True)
    journey_id: Mapped[str] = mapped_column(ForeignKey("journeys.id"), unique=True)
    user_id: Mapped[str] = mapped_column(String)

    last_visited_day: Mapped[int] = mapped_column(Integer, default=1)
    progress_percentage: Mapped[int] = mapped_column(Integer, default=0)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    journey: Mapped[Journey] = relationship(back_populates="progress")
