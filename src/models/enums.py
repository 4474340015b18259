"""Enums for model fields."""

from enum import Enum


class NotificationCategory(str, Enum):
    """Notification categories, each with its own enable/schedule settings."""

    REMINDERS = "reminders"
    HABITS = "habits"
    EXPENSES = "expenses"
    NOTES = "notes"


class DevicePlatform(str, Enum):
    """Platforms a push token can belong to."""

    IOS = "ios"
    ANDROID = "android"
    WEB = "web"


class ScheduledNotificationStatus(str, Enum):
    """Delivery state of a scheduled notification.

    pending -> sent | failed | cancelled. The last three are terminal.
    """

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
    CANCELLED = "cancelled"


class HabitFrequency(str, Enum):
    """How often a habit is meant to be completed."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
