"""
Habit request / response schemas.

POST /habits                 → HabitCreate   → HabitResponse
PUT  /habits/{id}            → HabitUpdate   → HabitResponse
POST /habits/{id}/track      → TrackRequest  → HabitResponse
GET  /habits/{id}/stats      → HabitStatsResponse
GET  /habits/{id}/streak     → HabitStreakResponse
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.models.habit import HabitDifficulty, HabitFrequency


def _strip_title(v):
    stripped = v.strip() if isinstance(v, str) else v
    if not stripped:
        raise ValueError("title must not be empty after stripping whitespace")
    return stripped


def _check_date_order(model):
    if model.start_date and model.end_date and model.end_date < model.start_date:
        raise ValueError("end_date must not be before start_date")
    return model


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class HabitCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    title: Annotated[str, Field(
        min_length=1,
        max_length=256,
        examples=["Morning meditation"],
    )]
    description: Optional[str] = None
    frequency: HabitFrequency = Field(
        default=HabitFrequency.daily,
        description="Declared cadence. Picks the consistency target.",
    )
    difficulty: HabitDifficulty = HabitDifficulty.medium
    time_of_day: Optional[str] = Field(default=None, max_length=32, examples=["07:30"])
    category: Optional[str] = Field(default=None, max_length=64)
    start_date: Optional[date] = Field(
        default=None,
        description="First day the habit is active. Defaults to today (UTC).",
    )
    end_date: Optional[date] = None

    @field_validator("title", mode="before")
    @classmethod
    def strip_and_check_empty(cls, v: str) -> str:
        return _strip_title(v)

    @model_validator(mode="after")
    def end_not_before_start(self) -> "HabitCreate":
        return _check_date_order(self)


class HabitUpdate(BaseModel):
    """Partial update. Streak fields and history are not editable here."""
    model_config = ConfigDict(use_enum_values=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=256)
    description: Optional[str] = None
    frequency: Optional[HabitFrequency] = None
    difficulty: Optional[HabitDifficulty] = None
    time_of_day: Optional[str] = Field(default=None, max_length=32)
    category: Optional[str] = Field(default=None, max_length=64)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("title", mode="before")
    @classmethod
    def strip_and_check_empty(cls, v):
        if v is None:
            return v
        return _strip_title(v)

    @model_validator(mode="after")
    def end_not_before_start(self) -> "HabitUpdate":
        return _check_date_order(self)


class TrackRequest(BaseModel):
    """Record whether the habit was performed on a given day."""
    date: datetime = Field(
        description="ISO date or timestamp of the completion. Must not be in the future.",
        examples=["2026-10-19T07:45:00Z"],
    )
    completed: bool
    notes: Optional[str] = Field(default=None, max_length=2_000)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class CompletionEntryOut(BaseModel):
    date: str
    completed: bool
    notes: Optional[str] = None


class StreakDataOut(BaseModel):
    current: int
    longest: int
    last_completed: Optional[str] = None


class HabitResponse(BaseModel):
    id: int
    user_id: str
    title: str
    description: Optional[str]
    frequency: str
    difficulty: str
    time_of_day: Optional[str]
    category: Optional[str]
    start_date: str
    end_date: Optional[str]
    completion_history: list[CompletionEntryOut] = Field(
        description="One entry per calendar day, most recent first."
    )
    streak: int
    streak_data: StreakDataOut
    consistency: int = Field(
        description="Completed days in the last 30 vs. the frequency target. Range: 0–100.",
        examples=[50],
    )
    created_at: Optional[str]
    updated_at: Optional[str]


class HabitStatsResponse(BaseModel):
    current_streak: int
    longest_streak: int
    completion_rate: float = Field(
        description="Completed entries / all entries, percent with 2 decimals.",
        examples=[66.67],
    )
    total_entries: int
    completed_entries: int
    consistency: int
    completions_by_day: dict[str, int] = Field(description="Sunday … Saturday.")
    completions_by_time: dict[str, int] = Field(
        description="morning [05,12) · afternoon [12,17) · evening [17,21) · night [21,05), UTC."
    )


class DayCompletionOut(BaseModel):
    date: str
    completed: bool


class HabitStreakResponse(BaseModel):
    current_streak: int
    longest_streak: int
    last_30_days: list[DayCompletionOut] = Field(description="Oldest first, today last.")
    total_completions: int


class DeleteResponse(BaseModel):
    success: bool
