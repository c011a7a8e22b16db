"""
Habit — a recurring behaviour tracked per calendar day.

completion_history is a JSON list of {"date", "completed", "notes"} dicts,
stored most-recent-first with at most one entry per calendar day. streak and
the streak_* columns are derived from it on every tracking call
(see app/services/streaks.py) and are never written by API callers.
"""
from datetime import datetime, date
from sqlalchemy import Integer, String, Text, DateTime, Date, Enum, JSON, func
from sqlalchemy.orm import Mapped, mapped_column
import enum

from app.db.base import Base


class HabitFrequency(str, enum.Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"


class HabitDifficulty(str, enum.Enum):
    easy = "easy"
    medium = "medium"
    hard = "hard"


class Habit(Base):
    __tablename__ = "habits"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    frequency: Mapped[str] = mapped_column(
        Enum(HabitFrequency, name="habit_frequency_enum"),
        nullable=False,
        default=HabitFrequency.daily,
        index=True,
    )
    difficulty: Mapped[str] = mapped_column(
        Enum(HabitDifficulty, name="habit_difficulty_enum"),
        nullable=False,
        default=HabitDifficulty.medium,
    )
    time_of_day: Mapped[str | None] = mapped_column(String(32), nullable=True)
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    completion_history: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    streak_current: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    streak_longest: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    streak_last_completed: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
