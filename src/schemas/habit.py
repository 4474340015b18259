"""Habit schemas."""

from datetime import date as Date
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.enums import HabitFrequency


class HabitCreate(BaseModel):
    """Create a habit."""

    name: str = Field(..., min_length=1, max_length=200)
    frequency: HabitFrequency


class HabitUpdate(BaseModel):
    """Update a habit."""

    name: str | None = Field(None, min_length=1, max_length=200)
    frequency: HabitFrequency | None = None


class HabitResponse(BaseModel):
    """Habit response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    frequency: HabitFrequency
    created_at: datetime


class HabitLogToggle(BaseModel):
    """Mark a habit done or not done for one day."""

    habit_id: int
    date: Date
    completed: bool


class HabitLogResponse(BaseModel):
    """Habit log response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    habit_id: int
    user_id: int
    date: Date
    completed: bool
    created_at: datetime
