"""Periodic sweep that turns due work into push notifications."""

import logging
from collections import defaultdict
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy.orm import Session

from src.config import Settings, get_settings
from src.models import Habit, NotificationHistory, Reminder, ScheduledNotification
from src.models.enums import HabitFrequency, NotificationCategory, ScheduledNotificationStatus
from src.services.notification_service import (
    NotificationMessage,
    NotificationService,
    local_time,
)

logger = logging.getLogger(__name__)


def format_habit_summary(names: list[str], preview: int = 3) -> str:
    """Body for the daily habit notification, e.g. "Time to complete: A, B, C and 2 more"."""
    listed = ", ".join(names[:preview])
    remaining = len(names) - preview
    more = f" and {remaining} more" if remaining > 0 else ""
    return f"Time to complete: {listed}{more}"


def scheduled_hour(scheduled_time: str) -> int | None:
    """Hour component of an "HH:mm" string, or None if it cannot be parsed."""
    try:
        return int(scheduled_time.split(":", 1)[0])
    except (AttributeError, ValueError):
        return None


class NotificationScheduler:
    """Runs the scheduled, due-reminder and daily-habit sweeps.

    Each sweep is independent: a failure in one is logged and reported in the
    summary without stopping the others. Items are processed one at a time.
    """

    def __init__(
        self,
        db: Session,
        notification_service: NotificationService,
        settings: Settings | None = None,
    ) -> None:
        self.db = db
        self.notification_service = notification_service
        self.settings = settings or get_settings()

    def run(self, now: datetime | None = None) -> dict[str, dict[str, Any]]:
        """Run all three sweeps against the same instant and return their counts."""
        now = now or datetime.now(UTC)
        sweeps = (
            ("scheduled_notifications", self.process_scheduled_notifications),
            ("reminder_notifications", self.process_due_reminders),
            ("habit_notifications", self.process_daily_habits),
        )

        results: dict[str, dict[str, Any]] = {}
        for name, sweep in sweeps:
            try:
                results[name] = sweep(now)
            except Exception as e:
                logger.error(f"Notification sweep {name} failed: {e}", exc_info=True)
                self.db.rollback()
                results[name] = {"sent": 0, "failed": 0, "error": "Sweep failed"}

        logger.info(f"Notification sweep complete: {results}")
        return results

    def process_scheduled_notifications(self, now: datetime) -> dict[str, int]:
        """Send due scheduled notifications and move each to sent or failed."""
        due = self.notification_service.get_due_notifications(
            now, limit=self.settings.scheduled_batch_size
        )
        stats = {"processed": 0, "sent": 0, "failed": 0}

        for notification in due:
            # Earlier sends commit, so the row may have been cancelled since it was loaded
            self.db.refresh(notification)
            if notification.status != ScheduledNotificationStatus.PENDING:
                logger.info(
                    f"Skipping scheduled notification {notification.id}: "
                    f"now {notification.status.value}"
                )
                continue

            stats["processed"] += 1
            try:
                result = self.notification_service.send(
                    notification.user_id,
                    NotificationMessage(
                        category=notification.category,
                        title=notification.title,
                        body=notification.body,
                        reference_id=notification.reference_id,
                    ),
                    now=now,
                )
            except Exception as e:
                logger.error(
                    f"Error sending scheduled notification {notification.id}: {e}", exc_info=True
                )
                self.db.rollback()
                self._finish(notification, ScheduledNotificationStatus.FAILED, error_message=str(e))
                stats["failed"] += 1
                continue

            if result.sent:
                self._finish(notification, ScheduledNotificationStatus.SENT, sent_at=now)
                stats["sent"] += 1
            else:
                # Terminal: suppressed notifications are not rescheduled
                self._finish(
                    notification,
                    ScheduledNotificationStatus.FAILED,
                    error_message=result.reason or "Unknown error",
                )
                stats["failed"] += 1

        return stats

    def _finish(
        self,
        notification: ScheduledNotification,
        status: ScheduledNotificationStatus,
        sent_at: datetime | None = None,
        error_message: str | None = None,
    ) -> bool:
        """Move a notification out of pending. Returns False if it already left pending."""
        values: dict[Any, Any] = {ScheduledNotification.status: status}
        if sent_at is not None:
            values[ScheduledNotification.sent_at] = sent_at
        if error_message is not None:
            values[ScheduledNotification.error_message] = error_message

        # Conditional update so a cancel that landed during the send is kept
        updated = (
            self.db.query(ScheduledNotification)
            .filter(
                ScheduledNotification.id == notification.id,
                ScheduledNotification.status == ScheduledNotificationStatus.PENDING,
            )
            .update(values, synchronize_session=False)
        )
        self.db.commit()

        if not updated:
            logger.warning(
                f"Scheduled notification {notification.id} left pending during the sweep; "
                f"keeping its current state"
            )
        return bool(updated)

    def process_due_reminders(self, now: datetime) -> dict[str, int]:
        """Notify users about incomplete reminders due within the lookahead window.

        A reminder is notified once: notified_at is stamped after a successful send.
        """
        window_end = now + timedelta(minutes=self.settings.reminder_lookahead_minutes)
        reminders = (
            self.db.query(Reminder)
            .filter(
                Reminder.completed == False,  # noqa: E712
                Reminder.notified_at.is_(None),
                Reminder.due_date >= now,
                Reminder.due_date <= window_end,
            )
            .order_by(Reminder.user_id, Reminder.due_date)
            .all()
        )

        reminders_by_user: dict[int, list[Reminder]] = defaultdict(list)
        for reminder in reminders:
            reminders_by_user[reminder.user_id].append(reminder)

        stats = {"sent": 0, "failed": 0}
        for user_id, user_reminders in reminders_by_user.items():
            for reminder in user_reminders:
                try:
                    result = self.notification_service.send(
                        user_id,
                        NotificationMessage(
                            category=NotificationCategory.REMINDERS,
                            title="Reminder Due",
                            body=reminder.title,
                            data={"reminder_id": reminder.id},
                            reference_id=str(reminder.id),
                        ),
                        now=now,
                    )
                except Exception as e:
                    logger.error(f"Error notifying reminder {reminder.id}: {e}", exc_info=True)
                    self.db.rollback()
                    stats["failed"] += 1
                    continue

                if result.sent:
                    reminder.notified_at = now
                    self.db.commit()
                    stats["sent"] += 1
                else:
                    stats["failed"] += 1

        return stats

    def process_daily_habits(self, now: datetime) -> dict[str, int]:
        """Send one aggregated daily-habit notification per user at their scheduled hour.

        Only runs during the first habit_window_minutes of the local hour.
        """
        stats = {"sent": 0, "failed": 0, "skipped": 0}
        local_now = local_time(now, self.settings.notification_timezone)
        if local_now.minute >= self.settings.habit_window_minutes:
            return stats

        habits = (
            self.db.query(Habit)
            .filter(Habit.frequency == HabitFrequency.DAILY)
            .order_by(Habit.user_id, Habit.id)
            .all()
        )

        habits_by_user: dict[int, list[str]] = defaultdict(list)
        for habit in habits:
            habits_by_user[habit.user_id].append(habit.name)

        hour_start = local_now.replace(minute=0, second=0, microsecond=0).astimezone(UTC)

        for user_id, names in habits_by_user.items():
            try:
                settings = self.notification_service.get_settings(user_id)
                habit_settings = settings["notification_categories"].get("habits") or {}
                if not (
                    habit_settings.get("enabled")
                    and habit_settings.get("scheduled")
                    and habit_settings.get("scheduledTime")
                ):
                    continue

                if scheduled_hour(habit_settings["scheduledTime"]) != local_now.hour:
                    continue

                if self._habits_notified_since(user_id, hour_start):
                    stats["skipped"] += 1
                    continue

                result = self.notification_service.send(
                    user_id,
                    NotificationMessage(
                        category=NotificationCategory.HABITS,
                        title="Daily Habits",
                        body=format_habit_summary(names, self.settings.habit_names_preview),
                    ),
                    now=now,
                )
            except Exception as e:
                logger.error(f"Error sending habit reminder to user {user_id}: {e}", exc_info=True)
                self.db.rollback()
                stats["failed"] += 1
                continue

            if result.sent:
                stats["sent"] += 1
            else:
                stats["failed"] += 1

        return stats

    def _habits_notified_since(self, user_id: int, since: datetime) -> bool:
        """Check for a habits notification already handed to the push service this hour."""
        return (
            self.db.query(NotificationHistory.id)
            .filter(
                NotificationHistory.user_id == user_id,
                NotificationHistory.category == NotificationCategory.HABITS,
                NotificationHistory.sent_at >= since,
            )
            .first()
            is not None
        )
