"""
Productivity router — daily roll-ups per user.

GET  /productivity              — rows in a date range (default: last 7 days)
GET  /productivity/{day}        — one day (zeroed placeholder if none)
POST /productivity/focus        — add focus minutes
POST /productivity/rating       — set the day's self-rating
POST /productivity/generate     — recompute habit rate and productivity score
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.auth import get_current_user_id
from app.db.base import get_db
from app.models.productivity import ProductivityMetrics
from app.schemas.productivity import (
    DayRatingRequest,
    FocusTimeRequest,
    GenerateMetricsRequest,
    ProductivityMetricsResponse,
)
from app.services.productivity import (
    add_focus_time,
    generate_daily_metrics,
    get_daily_metrics,
    get_metrics_range,
    set_day_rating,
)

router = APIRouter(prefix="/productivity", tags=["productivity"])


def _metrics_to_response(m: ProductivityMetrics) -> ProductivityMetricsResponse:
    return ProductivityMetricsResponse(
        id=m.id,
        user_id=m.user_id,
        day=str(m.day),
        tasks_completed=m.tasks_completed,
        tasks_created=m.tasks_created,
        habits_completed=m.habits_completed,
        habit_completion_rate=m.habit_completion_rate,
        focus_time=m.focus_time,
        productivity_score=m.productivity_score,
        day_rating=m.day_rating,
    )


def _empty_response(user_id: str, day: date) -> ProductivityMetricsResponse:
    return ProductivityMetricsResponse(
        user_id=user_id,
        day=str(day),
        tasks_completed=0,
        tasks_created=0,
        habits_completed=0,
        habit_completion_rate=0.0,
        focus_time=0,
        productivity_score=0.0,
        day_rating=None,
    )


@router.get(
    "",
    response_model=list[ProductivityMetricsResponse],
    summary="Daily metrics for a date range",
    responses={422: {"description": "start_date after end_date."}},
)
def productivity_range(
    start_date: Optional[date] = Query(
        default=None,
        description="First day (inclusive). Defaults to end_date − 7 days.",
        examples=["2026-10-12"],
    ),
    end_date: Optional[date] = Query(
        default=None,
        description="Last day (inclusive). Defaults to today (UTC).",
        examples=["2026-10-19"],
    ),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    rows = get_metrics_range(db, user_id, start=start_date, end=end_date)
    return [_metrics_to_response(m) for m in rows]


@router.post("/focus", response_model=ProductivityMetricsResponse, summary="Add focus time")
def productivity_focus(
    payload: FocusTimeRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return _metrics_to_response(add_focus_time(db, user_id, payload.minutes, payload.date))


@router.post("/rating", response_model=ProductivityMetricsResponse, summary="Rate the day (1–5)")
def productivity_rating(
    payload: DayRatingRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return _metrics_to_response(set_day_rating(db, user_id, payload.rating, payload.date))


@router.post(
    "/generate",
    response_model=ProductivityMetricsResponse,
    summary="Recompute a day's derived metrics",
)
def productivity_generate(
    payload: GenerateMetricsRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Recompute `habit_completion_rate` (share of the caller's habits active on
    the day that were completed) and
    `productivity_score = min(100, (tasks_completed × 10 + habit_completion_rate) / 2)`.
    """
    return _metrics_to_response(generate_daily_metrics(db, user_id, payload.date))


@router.get(
    "/{day}",
    response_model=ProductivityMetricsResponse,
    summary="Metrics for a single day",
)
def productivity_day(
    day: date,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    row = get_daily_metrics(db, user_id, day)
    if row is None:
        return _empty_response(user_id, day)
    return _metrics_to_response(row)
