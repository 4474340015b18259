"""Notification-related Pydantic schemas."""

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.models.enums import DevicePlatform, NotificationCategory, ScheduledNotificationStatus
from src.schemas.reminder import to_utc

# "HH:mm", 00:00 - 23:59
TIME_PATTERN = r"^([01]\d|2[0-3]):([0-5]\d)$"

TimeOfDay = Annotated[str, Field(pattern=TIME_PATTERN, examples=["22:00"])]


class CategorySettings(BaseModel):
    """Per-category notification preferences."""

    model_config = ConfigDict(populate_by_name=True)

    enabled: bool
    real_time: bool | None = Field(None, alias="realTime")
    scheduled: bool | None = None
    scheduled_time: TimeOfDay | None = Field(None, alias="scheduledTime")


class NotificationCategoriesUpdate(BaseModel):
    """Categories to replace. Omitted categories keep their current settings."""

    reminders: CategorySettings | None = None
    habits: CategorySettings | None = None
    expenses: CategorySettings | None = None
    notes: CategorySettings | None = None


class NotificationSettingsUpdate(BaseModel):
    """Schema for updating notification settings."""

    notifications_enabled: bool | None = None
    notification_categories: NotificationCategoriesUpdate | None = None
    quiet_hours_start: TimeOfDay | None = None
    quiet_hours_end: TimeOfDay | None = None


class NotificationSettingsResponse(BaseModel):
    """Notification settings merged with defaults."""

    notifications_enabled: bool
    notification_categories: dict[str, CategorySettings]
    quiet_hours_start: str | None
    quiet_hours_end: str | None


class DeviceRegister(BaseModel):
    """Schema for registering a device for push notifications."""

    push_token: str = Field(..., min_length=1, max_length=500)
    platform: DevicePlatform
    device_name: str | None = Field(None, max_length=100)


class DeviceUnregister(BaseModel):
    """Schema for unregistering a device."""

    push_token: str = Field(..., min_length=1, max_length=500)


class DeviceTokenResponse(BaseModel):
    """Registered device."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    push_token: str
    platform: DevicePlatform
    device_name: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class DeviceListResponse(BaseModel):
    """Active devices of the current user."""

    devices: list[DeviceTokenResponse]


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str


class ScheduledNotificationCreate(BaseModel):
    """Schema for scheduling a notification."""

    category: NotificationCategory
    title: str = Field(..., min_length=1, max_length=200)
    body: str | None = Field(None, max_length=500)
    reference_id: str | None = Field(None, max_length=100)
    scheduled_for: datetime

    @field_validator("scheduled_for")
    @classmethod
    def normalize_scheduled_for(cls, value: datetime) -> datetime:
        return to_utc(value)


class ScheduledNotificationResponse(BaseModel):
    """Scheduled notification."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    category: NotificationCategory
    reference_id: str | None
    title: str
    body: str | None
    scheduled_for: datetime
    status: ScheduledNotificationStatus
    sent_at: datetime | None
    error_message: str | None
    created_at: datetime


class CronRunResponse(BaseModel):
    """Summary of one notification sweep."""

    success: bool
    results: dict[str, dict[str, Any]]
    timestamp: datetime
