"""
Productivity metrics schemas.

GET  /productivity              → list[ProductivityMetricsResponse]
GET  /productivity/{day}        → ProductivityMetricsResponse
POST /productivity/focus        → FocusTimeRequest
POST /productivity/rating       → DayRatingRequest
POST /productivity/generate     → GenerateMetricsRequest
"""
import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FocusTimeRequest(BaseModel):
    minutes: float = Field(gt=0, description="Focused minutes to add. Rounded to whole minutes.")
    date: Optional[dt.date] = Field(default=None, description="Defaults to today (UTC).")


class DayRatingRequest(BaseModel):
    rating: float = Field(ge=1, le=5, description="Self-rating of the day, 1–5. Rounded.")
    date: Optional[dt.date] = None


class GenerateMetricsRequest(BaseModel):
    date: Optional[dt.date] = None


class ProductivityMetricsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = Field(default=None, description="None when no row exists yet.")
    user_id: str
    day: str
    tasks_completed: int
    tasks_created: int
    habits_completed: int
    habit_completion_rate: float
    focus_time: int = Field(description="Minutes.")
    productivity_score: float
    day_rating: Optional[int]
