"""SQLAlchemy models."""

from src.models.device_token import DeviceToken
from src.models.expense import Expense, ExpenseCategory
from src.models.habit import Habit, HabitLog
from src.models.note import Note
from src.models.notification_history import NotificationHistory
from src.models.reminder import Reminder, ReminderList
from src.models.scheduled_notification import ScheduledNotification
from src.models.user import User
from src.models.user_notification_settings import UserNotificationSettings

__all__ = [
    "User",
    "UserNotificationSettings",
    "DeviceToken",
    "ScheduledNotification",
    "NotificationHistory",
    "ReminderList",
    "Reminder",
    "Habit",
    "HabitLog",
    "Note",
    "ExpenseCategory",
    "Expense",
]
