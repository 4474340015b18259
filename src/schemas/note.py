"""Note schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NoteCreate(BaseModel):
    """Create a note."""

    title: str = Field(..., min_length=1, max_length=200)
    content: str | None = Field(None, max_length=50000)

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Title is required")
        return value


class NoteUpdate(BaseModel):
    """Update a note. content may be set to null to clear it."""

    title: str | None = Field(None, min_length=1, max_length=200)
    content: str | None = Field(None, max_length=50000)

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str | None) -> str | None:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("Title is required")
        return value


class NoteResponse(BaseModel):
    """Note response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    content: str | None
    created_at: datetime
    updated_at: datetime
