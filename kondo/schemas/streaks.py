"""Streak Schemas — activity request and streak state responses."""

from datetime import datetime

from pydantic import BaseModel, Field


class ActivityRequest(BaseModel):
    timezone: str | None = Field(None, max_length=64)


class StreakResponse(BaseModel):
    current_streak: int
    max_streak: int
    last_activity_date: datetime | None = None
    is_new_streak: bool
    was_streak_broken: bool


class StreakTotalsResponse(BaseModel):
    current_streak: int
    max_streak: int
