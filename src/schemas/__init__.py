"""Pydantic schemas for API requests and responses."""

from src.schemas.auth import (
    AuthResponse,
    RefreshTokenRequest,
    UserLogin,
    UserRegister,
    UserResponse,
)
from src.schemas.expense import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    CategoryUsage,
    ExpenseCreate,
    ExpenseResponse,
)
from src.schemas.habit import (
    HabitCreate,
    HabitLogResponse,
    HabitLogToggle,
    HabitResponse,
    HabitUpdate,
)
from src.schemas.note import NoteCreate, NoteResponse, NoteUpdate
from src.schemas.notification import (
    DeviceRegister,
    DeviceTokenResponse,
    DeviceUnregister,
    NotificationSettingsResponse,
    NotificationSettingsUpdate,
    ScheduledNotificationCreate,
    ScheduledNotificationResponse,
)
from src.schemas.reminder import (
    ReminderCreate,
    ReminderListCreate,
    ReminderListResponse,
    ReminderListUpdate,
    ReminderResponse,
    ReminderUpdate,
)

__all__ = [
    "UserRegister",
    "UserLogin",
    "UserResponse",
    "AuthResponse",
    "RefreshTokenRequest",
    "NotificationSettingsUpdate",
    "NotificationSettingsResponse",
    "DeviceRegister",
    "DeviceUnregister",
    "DeviceTokenResponse",
    "ScheduledNotificationCreate",
    "ScheduledNotificationResponse",
    "ReminderListCreate",
    "ReminderListUpdate",
    "ReminderListResponse",
    "ReminderCreate",
    "ReminderUpdate",
    "ReminderResponse",
    "HabitCreate",
    "HabitUpdate",
    "HabitResponse",
    "HabitLogToggle",
    "HabitLogResponse",
    "NoteCreate",
    "NoteUpdate",
    "NoteResponse",
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryResponse",
    "CategoryUsage",
    "ExpenseCreate",
    "ExpenseResponse",
]
