"""
Habits router.

GET    /habits                 — list the caller's habits
POST   /habits                 — create
GET    /habits/{id}            — fetch one
PUT    /habits/{id}            — partial update
DELETE /habits/{id}            — delete
POST   /habits/{id}/track      — record completion for a day
GET    /habits/{id}/stats      — streaks, rates and breakdowns
GET    /habits/{id}/streak     — streaks plus a 30-day calendar
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.auth import get_current_user_id
from app.db.base import get_db
from app.models.habit import Habit, HabitFrequency
from app.schemas.habit import (
    CompletionEntryOut,
    DayCompletionOut,
    DeleteResponse,
    HabitCreate,
    HabitResponse,
    HabitStatsResponse,
    HabitStreakResponse,
    HabitUpdate,
    StreakDataOut,
    TrackRequest,
)
from app.services.habits import (
    consistency_for,
    create_habit,
    delete_habit,
    get_habit,
    get_habit_stats,
    get_habit_streak,
    list_habits,
    track_habit,
    update_habit,
)

router = APIRouter(prefix="/habits", tags=["habits"])


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def _ev(v) -> str:
    """Extract bare string value from a str-enum or plain str."""
    return v.value if hasattr(v, "value") else str(v)


def _habit_to_response(h: Habit) -> HabitResponse:
    return HabitResponse(
        id=h.id,
        user_id=h.user_id,
        title=h.title,
        description=h.description,
        frequency=_ev(h.frequency),
        difficulty=_ev(h.difficulty),
        time_of_day=h.time_of_day,
        category=h.category,
        start_date=str(h.start_date),
        end_date=str(h.end_date) if h.end_date else None,
        completion_history=[CompletionEntryOut(**e) for e in h.completion_history or []],
        streak=h.streak,
        streak_data=StreakDataOut(
            current=h.streak_current,
            longest=h.streak_longest,
            last_completed=(
                h.streak_last_completed.isoformat() if h.streak_last_completed else None
            ),
        ),
        consistency=consistency_for(h),
        created_at=h.created_at.isoformat() if h.created_at else None,
        updated_at=h.updated_at.isoformat() if h.updated_at else None,
    )


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------

@router.get("", response_model=list[HabitResponse], summary="List habits (newest first)")
def habits_list(
    frequency: Optional[HabitFrequency] = Query(
        default=None, description="Only habits with this frequency."
    ),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return [_habit_to_response(h) for h in list_habits(db, user_id, frequency)]


@router.post(
    "",
    response_model=HabitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a habit",
)
def habits_create(
    payload: HabitCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Create a habit with an empty completion history and a zero streak."""
    return _habit_to_response(create_habit(db, user_id, payload))


@router.get(
    "/{habit_id}",
    response_model=HabitResponse,
    summary="Fetch a habit",
    responses={404: {"description": "Habit not found for this user."}},
)
def habits_get(
    habit_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return _habit_to_response(get_habit(db, user_id, habit_id))


@router.put(
    "/{habit_id}",
    response_model=HabitResponse,
    summary="Update a habit",
    responses={404: {"description": "Habit not found for this user."}},
)
def habits_update(
    habit_id: int,
    payload: HabitUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return _habit_to_response(update_habit(db, user_id, habit_id, payload))


@router.delete(
    "/{habit_id}",
    response_model=DeleteResponse,
    summary="Delete a habit",
    responses={404: {"description": "Habit not found for this user."}},
)
def habits_delete(
    habit_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    delete_habit(db, user_id, habit_id)
    return DeleteResponse(success=True)


# ---------------------------------------------------------------------------
# POST /habits/{id}/track
# ---------------------------------------------------------------------------

@router.post(
    "/{habit_id}/track",
    response_model=HabitResponse,
    summary="Record completion for a day",
    responses={
        200: {"description": "Updated habit with recomputed streak and consistency."},
        404: {"description": "Habit not found for this user."},
        422: {"description": "Missing field or date in the future."},
    },
)
def habits_track(
    habit_id: int,
    payload: TrackRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Record whether the habit was performed on `date`.

    - One entry per calendar day: tracking a day again amends its entry
      (notes are kept when omitted).
    - The day's `habits_completed` productivity counter moves by +1 / −1
      only when the completed flag actually changes.
    - `streak`, `streak_data` and `consistency` are recomputed.
    """
    return _habit_to_response(track_habit(db, user_id, habit_id, payload))


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

@router.get(
    "/{habit_id}/stats",
    response_model=HabitStatsResponse,
    summary="Habit statistics",
    responses={404: {"description": "Habit not found for this user."}},
)
def habits_stats(
    habit_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    stats = get_habit_stats(db, user_id, habit_id)
    return HabitStatsResponse(
        current_streak=stats.current_streak,
        longest_streak=stats.longest_streak,
        completion_rate=stats.completion_rate,
        total_entries=stats.total_entries,
        completed_entries=stats.completed_entries,
        consistency=stats.consistency,
        completions_by_day=stats.completions_by_day,
        completions_by_time=stats.completions_by_time,
    )


@router.get(
    "/{habit_id}/streak",
    response_model=HabitStreakResponse,
    summary="Streaks plus the last 30 days",
    responses={404: {"description": "Habit not found for this user."}},
)
def habits_streak(
    habit_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    s = get_habit_streak(db, user_id, habit_id)
    return HabitStreakResponse(
        current_streak=s.current_streak,
        longest_streak=s.longest_streak,
        last_30_days=[DayCompletionOut(date=str(d), completed=c) for d, c in s.last_30_days],
        total_completions=s.total_completions,
    )
