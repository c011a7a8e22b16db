"""
Productivity metrics service — one roll-up row per (user, day).

Public API
----------
adjust_habits_completed(db, user_id, day, delta)   atomic counter update, no commit
get_metrics_range(db, user_id, start, end)         -> list[ProductivityMetrics]
get_daily_metrics(db, user_id, day)                -> ProductivityMetrics | None
add_focus_time(db, user_id, minutes, day)          -> ProductivityMetrics
set_day_rating(db, user_id, rating, day)           -> ProductivityMetrics
generate_daily_metrics(db, user_id, day)           -> ProductivityMetrics
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy import case, or_, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from app.core.errors import InvalidDateRangeError
from app.models.habit import Habit
from app.models.productivity import ProductivityMetrics
from app.services.completion_history import CompletionHistory

logger = logging.getLogger(__name__)

DEFAULT_RANGE_DAYS = 7
POINTS_PER_TASK = 10

_DIALECT_INSERTS = {"postgresql": pg_insert, "sqlite": sqlite_insert}


def _today() -> date:
    return datetime.now(tz=timezone.utc).date()


def _get(db: Session, user_id: str, day: date) -> Optional[ProductivityMetrics]:
    return (
        db.query(ProductivityMetrics)
        .filter(ProductivityMetrics.user_id == user_id, ProductivityMetrics.day == day)
        .first()
    )


def _get_or_create(db: Session, user_id: str, day: date) -> ProductivityMetrics:
    """
    Return the row for (user_id, day), inserting a zeroed one if missing.
    The insert is ON CONFLICT DO NOTHING, so a row created by a concurrent
    request between the lookup and the insert is picked up by the re-select.
    """
    row = _get(db, user_id, day)
    if row is not None:
        return row
    insert = _DIALECT_INSERTS[db.get_bind().dialect.name]
    db.execute(
        insert(ProductivityMetrics)
        .values(
            user_id=user_id,
            day=day,
            tasks_completed=0,
            tasks_created=0,
            habits_completed=0,
            habit_completion_rate=0.0,
            focus_time=0,
            productivity_score=0.0,
        )
        .on_conflict_do_nothing(index_elements=["user_id", "day"])
    )
    return _get(db, user_id, day)


# ---------------------------------------------------------------------------
# Counters
# ---------------------------------------------------------------------------

def adjust_habits_completed(db: Session, user_id: str, day: date, delta: int) -> None:
    """
    Add `delta` to habits_completed for (user_id, day) with a single UPDATE,
    floored at zero. The caller owns the commit.
    """
    if delta == 0:
        return
    row = _get_or_create(db, user_id, day)
    new_value = ProductivityMetrics.habits_completed + delta
    db.execute(
        update(ProductivityMetrics)
        .where(ProductivityMetrics.user_id == user_id, ProductivityMetrics.day == day)
        .values(habits_completed=case((new_value < 0, 0), else_=new_value))
        .execution_options(synchronize_session=False)
    )
    db.expire(row)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

def get_metrics_range(
    db: Session,
    user_id: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> list[ProductivityMetrics]:
    end = end or _today()
    start = start or end - timedelta(days=DEFAULT_RANGE_DAYS)
    if start > end:
        raise InvalidDateRangeError(start=start, end=end)
    return (
        db.query(ProductivityMetrics)
        .filter(
            ProductivityMetrics.user_id == user_id,
            ProductivityMetrics.day >= start,
            ProductivityMetrics.day <= end,
        )
        .order_by(ProductivityMetrics.day.asc())
        .all()
    )


def get_daily_metrics(db: Session, user_id: str, day: date) -> Optional[ProductivityMetrics]:
    return _get(db, user_id, day)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

def add_focus_time(
    db: Session,
    user_id: str,
    minutes: float,
    day: Optional[date] = None,
) -> ProductivityMetrics:
    target = day or _today()
    row = _get_or_create(db, user_id, target)
    row.focus_time = (row.focus_time or 0) + int(
        Decimal(str(minutes)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    )
    db.commit()
    db.refresh(row)
    logger.info("Focus time user=%s day=%s total=%s", user_id, target, row.focus_time)
    return row


def set_day_rating(
    db: Session,
    user_id: str,
    rating: float,
    day: Optional[date] = None,
) -> ProductivityMetrics:
    target = day or _today()
    row = _get_or_create(db, user_id, target)
    row.day_rating = int(Decimal(str(rating)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    db.commit()
    db.refresh(row)
    return row


def _habit_completion_rate(db: Session, user_id: str, day: date) -> float:
    """Percentage of the user's habits active on `day` that were completed that day."""
    habits = (
        db.query(Habit)
        .filter(
            Habit.user_id == user_id,
            Habit.start_date <= day,
            or_(Habit.end_date.is_(None), Habit.end_date >= day),
        )
        .all()
    )
    if not habits:
        return 0.0
    completed = 0
    for habit in habits:
        entry = CompletionHistory.from_json(habit.completion_history).get(day)
        if entry is not None and entry.completed:
            completed += 1
    return completed / len(habits) * 100


def generate_daily_metrics(
    db: Session,
    user_id: str,
    day: Optional[date] = None,
) -> ProductivityMetrics:
    """
    Refresh the derived fields of a day's row:
      habit_completion_rate  from the user's active habits
      productivity_score     min(100, (tasks_completed * 10 + habit rate) / 2)
    """
    target = day or _today()
    row = _get_or_create(db, user_id, target)
    rate = _habit_completion_rate(db, user_id, target)
    row.habit_completion_rate = rate
    row.productivity_score = min(100.0, ((row.tasks_completed or 0) * POINTS_PER_TASK + rate) / 2)
    db.commit()
    db.refresh(row)
    logger.info(
        "Generated metrics user=%s day=%s habit_rate=%.2f score=%.2f",
        user_id, target, row.habit_completion_rate, row.productivity_score,
    )
    return row
