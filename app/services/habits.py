"""
Habit service: CRUD, completion tracking and statistics.

Tracking flow (track_habit)
---------------------------
  1. Reject dates after `now`.
  2. Load the habit for (habit_id, user_id) or raise HabitNotFoundError.
  3. Upsert the entry for that calendar day; adjust the day's
     habits_completed counter by the change in completed entries.
  4. Store history most-recent-first and recompute the derived streak
     fields (app/services/streaks.py).
  5. Commit once and return the habit plus its consistency score.

Consistency is never persisted: it depends on the current date, so every
read computes it fresh.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.core.errors import FutureDateError, HabitNotFoundError, InvalidDateRangeError
from app.models.habit import Habit, HabitFrequency
from app.schemas.habit import HabitCreate, HabitUpdate, TrackRequest
from app.services import streaks
from app.services.completion_history import CompletionHistory, as_utc
from app.services.productivity import adjust_habits_completed

logger = logging.getLogger(__name__)

STREAK_WINDOW_DAYS = 30

_NON_NULLABLE = {"title", "frequency", "difficulty", "start_date"}


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass
class HabitStats:
    current_streak: int
    longest_streak: int
    completion_rate: float
    total_entries: int
    completed_entries: int
    consistency: int
    completions_by_day: dict[str, int]
    completions_by_time: dict[str, int]


@dataclass
class HabitStreak:
    current_streak: int
    longest_streak: int
    last_30_days: list[tuple[date, bool]]   # oldest → newest
    total_completions: int


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

def get_habit(db: Session, user_id: str, habit_id: int) -> Habit:
    habit = (
        db.query(Habit)
        .filter(Habit.id == habit_id, Habit.user_id == user_id)
        .first()
    )
    if habit is None:
        raise HabitNotFoundError(habit_id=habit_id)
    return habit


def list_habits(
    db: Session,
    user_id: str,
    frequency: Optional[HabitFrequency] = None,
) -> list[Habit]:
    q = db.query(Habit).filter(Habit.user_id == user_id)
    if frequency is not None:
        q = q.filter(Habit.frequency == frequency)
    return q.order_by(Habit.created_at.desc(), Habit.id.desc()).all()


def consistency_for(habit: Habit, today: Optional[date] = None) -> int:
    history = CompletionHistory.from_json(habit.completion_history)
    return streaks.compute_consistency(history, habit.frequency, today or _now().date())


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------

def _check_active_range(habit: Habit) -> None:
    if habit.end_date is not None and habit.end_date < habit.start_date:
        raise InvalidDateRangeError(start=habit.start_date, end=habit.end_date)


def create_habit(db: Session, user_id: str, payload: HabitCreate) -> Habit:
    habit = Habit(
        user_id=user_id,
        title=payload.title,
        description=payload.description,
        frequency=payload.frequency,
        difficulty=payload.difficulty,
        time_of_day=payload.time_of_day,
        category=payload.category,
        start_date=payload.start_date or _now().date(),
        end_date=payload.end_date,
        completion_history=[],
        streak=0,
        streak_current=0,
        streak_longest=0,
    )
    _check_active_range(habit)
    db.add(habit)
    db.commit()
    db.refresh(habit)
    logger.info("Habit created id=%s user=%s frequency=%s", habit.id, user_id, habit.frequency)
    return habit


def update_habit(db: Session, user_id: str, habit_id: int, payload: HabitUpdate) -> Habit:
    habit = get_habit(db, user_id, habit_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is None and field in _NON_NULLABLE:
            continue
        setattr(habit, field, value)
    _check_active_range(habit)
    db.commit()
    db.refresh(habit)
    return habit


def delete_habit(db: Session, user_id: str, habit_id: int) -> None:
    habit = get_habit(db, user_id, habit_id)
    db.delete(habit)
    db.commit()
    logger.info("Habit deleted id=%s user=%s", habit_id, user_id)


# ---------------------------------------------------------------------------
# Tracking
# ---------------------------------------------------------------------------

def track_habit(
    db: Session,
    user_id: str,
    habit_id: int,
    payload: TrackRequest,
    now: Optional[datetime] = None,
) -> Habit:
    now = now or _now()
    when = as_utc(payload.date)
    if when > now:
        logger.warning("Rejected future tracking habit=%s date=%s", habit_id, when.isoformat())
        raise FutureDateError(when)

    habit = get_habit(db, user_id, habit_id)

    history = CompletionHistory.from_json(habit.completion_history)
    result = history.upsert(when, payload.completed, payload.notes)
    adjust_habits_completed(db, user_id, result.entry.day, result.completed_delta)

    # Reassign so the JSON column is flagged dirty
    habit.completion_history = history.to_json()

    summary = streaks.recompute(history, habit.streak_longest, now.date())
    habit.streak = summary.current
    habit.streak_current = summary.current
    habit.streak_longest = summary.longest
    if payload.completed:
        habit.streak_last_completed = now

    db.commit()
    db.refresh(habit)
    logger.info(
        "Tracked habit=%s day=%s completed=%s created=%s streak=%s longest=%s",
        habit.id, result.entry.day, payload.completed, result.created,
        habit.streak, habit.streak_longest,
    )
    return habit


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

def get_habit_stats(
    db: Session,
    user_id: str,
    habit_id: int,
    today: Optional[date] = None,
) -> HabitStats:
    habit = get_habit(db, user_id, habit_id)
    today = today or _now().date()
    history = list(CompletionHistory.from_json(habit.completion_history))
    return HabitStats(
        current_streak=streaks.compute_current_streak(history, today),
        longest_streak=streaks.longest_streak(history),
        completion_rate=streaks.completion_rate(history),
        total_entries=len(history),
        completed_entries=sum(1 for e in history if e.completed),
        consistency=streaks.compute_consistency(history, habit.frequency, today),
        completions_by_day=streaks.completions_by_day_of_week(history),
        completions_by_time=streaks.completions_by_time_of_day(history),
    )


def get_habit_streak(
    db: Session,
    user_id: str,
    habit_id: int,
    today: Optional[date] = None,
) -> HabitStreak:
    habit = get_habit(db, user_id, habit_id)
    today = today or _now().date()
    history = CompletionHistory.from_json(habit.completion_history)
    days = [today - timedelta(days=i) for i in range(STREAK_WINDOW_DAYS - 1, -1, -1)]
    last_30 = []
    for d in days:
        entry = history.get(d)
        last_30.append((d, bool(entry and entry.completed)))
    entries = list(history)
    return HabitStreak(
        current_streak=streaks.compute_current_streak(entries, today),
        longest_streak=max(habit.streak_longest or 0, streaks.longest_streak(entries)),
        last_30_days=last_30,
        total_completions=sum(1 for e in entries if e.completed),
    )
