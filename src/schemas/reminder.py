"""Reminder list and reminder schemas."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


def to_utc(value: datetime | None) -> datetime | None:
    """Normalize to UTC; naive datetimes are taken to be UTC already."""
    if value is None:
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class ReminderListCreate(BaseModel):
    """Create a reminder list."""

    name: str = Field(..., min_length=1, max_length=100)


class ReminderListUpdate(BaseModel):
    """Rename a reminder list."""

    name: str = Field(..., min_length=1, max_length=100)


class ReminderListResponse(BaseModel):
    """Reminder list response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    created_at: datetime


class ReminderCreate(BaseModel):
    """Create a reminder."""

    list_id: int
    title: str = Field(..., min_length=1, max_length=500)
    due_date: datetime | None = None
    relevance: int = Field(1, ge=1, le=3)

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value: datetime | None) -> datetime | None:
        return to_utc(value)


class ReminderUpdate(BaseModel):
    """Update a reminder."""

    title: str | None = Field(None, min_length=1, max_length=500)
    due_date: datetime | None = None
    relevance: int | None = Field(None, ge=1, le=3)
    completed: bool | None = None

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value: datetime | None) -> datetime | None:
        return to_utc(value)


class ReminderResponse(BaseModel):
    """Reminder response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    list_id: int
    user_id: int
    title: str
    due_date: datetime | None
    relevance: int
    completed: bool
    notified_at: datetime | None
    created_at: datetime
