from datetime import datetime, date
from sqlalchemy import Integer, String, Float, DateTime, Date, func, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class ProductivityMetrics(Base):
    """Per-user daily roll-up of tasks, habits, focus time and self-rating."""

    __tablename__ = "productivity_metrics"
    __table_args__ = (
        UniqueConstraint("user_id", "day", name="uq_productivity_user_day"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    day: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    tasks_completed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tasks_created: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    habits_completed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    habit_completion_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    focus_time: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, comment="Minutes of focused work."
    )
    productivity_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    day_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
