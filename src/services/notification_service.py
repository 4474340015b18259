"""Notification settings, device registry, gating and push dispatch."""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.config import Settings, get_settings
from src.models import (
    DeviceToken,
    NotificationHistory,
    ScheduledNotification,
    User,
    UserNotificationSettings,
)
from src.models.enums import DevicePlatform, NotificationCategory, ScheduledNotificationStatus
from src.services.exceptions import (
    InvalidStateTransitionError,
    PushDeliveryError,
    ScheduledNotificationNotFoundError,
    UserNotFoundError,
)
from src.services.push_client import DEVICE_NOT_REGISTERED, ExpoPushClient

logger = logging.getLogger(__name__)

DEFAULT_NOTIFICATION_CATEGORIES = MappingProxyType(
    {
        "reminders": MappingProxyType(
            {"enabled": True, "realTime": True, "scheduled": True, "scheduledTime": "09:00"}
        ),
        "habits": MappingProxyType({"enabled": True, "scheduled": True, "scheduledTime": "07:00"}),
        "expenses": MappingProxyType({"enabled": False}),
        "notes": MappingProxyType({"enabled": False}),
    }
)


class DispatchStatus(str, Enum):
    """Outcome of a single logical send."""

    SENT = "sent"
    SUPPRESSED = "suppressed"
    NO_DEVICES = "no_devices"
    DELIVERY_FAILED = "delivery_failed"


@dataclass
class NotificationMessage:
    """A logical notification addressed to one user."""

    category: NotificationCategory
    title: str
    body: str | None = None
    data: dict[str, Any] | None = None
    reference_id: str | None = None


@dataclass
class DispatchResult:
    """Result of NotificationService.send."""

    status: DispatchStatus
    reason: str | None = None
    tickets: list[dict[str, Any]] = field(default_factory=list)

    @property
    def sent(self) -> bool:
        return self.status == DispatchStatus.SENT


def merge_defaults(stored: UserNotificationSettings | None) -> dict[str, Any]:
    """Build the full settings view from a stored row, filling absent fields from defaults.

    Stored categories replace the default entry for that category as a whole;
    categories that were never stored come from DEFAULT_NOTIFICATION_CATEGORIES.
    """
    categories = {name: dict(values) for name, values in DEFAULT_NOTIFICATION_CATEGORIES.items()}
    if stored is None:
        return {
            "notifications_enabled": True,
            "notification_categories": categories,
            "quiet_hours_start": None,
            "quiet_hours_end": None,
        }

    for name, values in (stored.notification_categories or {}).items():
        categories[name] = dict(values)

    enabled = stored.notifications_enabled
    return {
        "notifications_enabled": True if enabled is None else enabled,
        "notification_categories": categories,
        "quiet_hours_start": stored.quiet_hours_start,
        "quiet_hours_end": stored.quiet_hours_end,
    }


def category_enabled(settings: dict[str, Any], category: str) -> bool:
    """Check the global switch, then the category's own flag. Unknown categories are off."""
    if not settings.get("notifications_enabled"):
        return False
    category_settings = settings["notification_categories"].get(category) or {}
    return bool(category_settings.get("enabled", False))


def quiet_hours_contains(start: str | None, end: str | None, current: str) -> bool:
    """Check whether an "HH:mm" time falls inside a quiet-hours window.

    Both bounds are inclusive. When start > end the window wraps past midnight
    (e.g. 22:00-07:00). Zero-padded "HH:mm" strings compare correctly as text.
    """
    if not start or not end:
        return False

    # Handle overnight quiet hours (e.g., 22:00 - 07:00)
    if start > end:
        return current >= start or current <= end

    return start <= current <= end


def local_time(now: datetime, timezone: str) -> datetime:
    """Convert an instant to wall-clock time in the given zone (UTC if unknown)."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    try:
        zone = ZoneInfo(timezone)
    except ZoneInfoNotFoundError:
        logger.warning(f"Unknown notification timezone {timezone!r}, using UTC")
        zone = ZoneInfo("UTC")
    return now.astimezone(zone)


class NotificationService:
    """Service for notification settings, devices and push delivery."""

    def __init__(
        self,
        db: Session,
        push_client: ExpoPushClient | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.db = db
        self.push_client = push_client or ExpoPushClient()
        self.settings = settings or get_settings()

    # Settings store

    def _get_or_create_settings_row(self, user_id: int) -> UserNotificationSettings:
        row = (
            self.db.query(UserNotificationSettings)
            .filter(UserNotificationSettings.user_id == user_id)
            .first()
        )
        if row:
            return row

        if self.db.get(User, user_id) is None:
            raise UserNotFoundError(user_id)

        # Categories stay empty so defaults are applied on every read
        row = UserNotificationSettings(user_id=user_id, notifications_enabled=True)
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def get_settings(self, user_id: int) -> dict[str, Any]:
        """Get notification settings for a user, merged with defaults."""
        return merge_defaults(self._get_or_create_settings_row(user_id))

    def update_settings(self, user_id: int, changes: dict[str, Any]) -> dict[str, Any]:
        """Apply a partial update and return the fully merged settings.

        Args:
            user_id: Owner of the settings
            changes: Only the provided keys are applied. Each provided category
                replaces that category; other categories are left untouched.
        """
        row = self._get_or_create_settings_row(user_id)

        if "notifications_enabled" in changes:
            row.notifications_enabled = changes["notifications_enabled"]

        categories = changes.get("notification_categories")
        if categories:
            stored = dict(row.notification_categories or {})
            stored.update(
                {name: values for name, values in categories.items() if values is not None}
            )
            # Reassign so the JSON column is flagged dirty
            row.notification_categories = stored

        for field_name in ("quiet_hours_start", "quiet_hours_end"):
            if field_name in changes:
                setattr(row, field_name, changes[field_name])

        self.db.commit()
        self.db.refresh(row)
        logger.info(f"Updated notification settings for user {user_id}")
        return merge_defaults(row)

    # Device registry

    def register_device(
        self,
        user_id: int,
        push_token: str,
        platform: DevicePlatform | str,
        device_name: str | None = None,
    ) -> DeviceToken:
        """Register a device, or refresh and reactivate an existing (user, token) pair."""
        platform = DevicePlatform(platform)
        device = self._find_device(user_id, push_token)

        if device is None:
            device = DeviceToken(
                user_id=user_id,
                push_token=push_token,
                platform=platform,
                device_name=device_name,
                is_active=True,
            )
            self.db.add(device)
            try:
                self.db.commit()
            except IntegrityError:
                # Registered concurrently; fall through to the update path
                self.db.rollback()
                device = self._find_device(user_id, push_token)
                if device is None:
                    raise

        # updated_at doubles as last-seen, so it moves even when nothing else changed
        device.platform = platform
        device.device_name = device_name
        device.activate()
        device.updated_at = datetime.now(UTC)
        self.db.commit()

        self.db.refresh(device)
        logger.info(f"Registered {platform.value} device {device.id} for user {user_id}")
        return device

    def unregister_device(self, user_id: int, push_token: str) -> bool:
        """Deactivate a device token. Returns False if the user has no such token."""
        device = self._find_device(user_id, push_token)
        if device is None:
            return False

        device.deactivate()
        self.db.commit()
        logger.info(f"Unregistered device {device.id} for user {user_id}")
        return True

    def list_active_devices(self, user_id: int) -> list[DeviceToken]:
        """Get all active device tokens for a user."""
        return (
            self.db.query(DeviceToken)
            .filter(DeviceToken.user_id == user_id, DeviceToken.is_active == True)  # noqa: E712
            .order_by(DeviceToken.id)
            .all()
        )

    def _find_device(self, user_id: int, push_token: str) -> DeviceToken | None:
        return (
            self.db.query(DeviceToken)
            .filter(DeviceToken.user_id == user_id, DeviceToken.push_token == push_token)
            .first()
        )

    # Gate evaluator

    def is_category_enabled(self, user_id: int, category: NotificationCategory | str) -> bool:
        """Check if a user has notifications enabled for a category."""
        return category_enabled(self.get_settings(user_id), NotificationCategory(category).value)

    def is_in_quiet_hours(self, user_id: int, now: datetime | None = None) -> bool:
        """Check if it is currently within the user's quiet hours."""
        return self._in_quiet_hours(self.get_settings(user_id), now or datetime.now(UTC))

    def _in_quiet_hours(self, settings: dict[str, Any], now: datetime) -> bool:
        current = local_time(now, self.settings.notification_timezone).strftime("%H:%M")
        return quiet_hours_contains(
            settings.get("quiet_hours_start"), settings.get("quiet_hours_end"), current
        )

    # Dispatcher

    def send(
        self,
        user_id: int,
        message: NotificationMessage,
        now: datetime | None = None,
    ) -> DispatchResult:
        """Send a notification to every active device of a user.

        Suppressed and device-less sends have no side effects. Once the batch
        is handed to the push service one history row is written, whether or
        not delivery succeeded.
        """
        now = now or datetime.now(UTC)
        category = NotificationCategory(message.category)
        settings = self.get_settings(user_id)

        if not category_enabled(settings, category.value):
            logger.info(f"Suppressed {category.value} notification for user {user_id}: disabled")
            return DispatchResult(DispatchStatus.SUPPRESSED, reason="category_disabled")

        if self._in_quiet_hours(settings, now):
            # Callers decide whether to reschedule
            logger.info(f"Suppressed {category.value} notification for user {user_id}: quiet hours")
            return DispatchResult(DispatchStatus.SUPPRESSED, reason="quiet_hours")

        devices = self.list_active_devices(user_id)
        if not devices:
            logger.info(f"No active devices for user {user_id}")
            return DispatchResult(DispatchStatus.NO_DEVICES, reason="no_devices")

        push_messages = self._build_push_messages(devices, category, message)

        try:
            tickets = self.push_client.send(push_messages)
            result = DispatchResult(DispatchStatus.SENT, tickets=tickets)
            logger.info(f"Sent {category.value} push to {len(devices)} devices for user {user_id}")
            self._deactivate_unregistered_devices(devices, tickets)
        except PushDeliveryError as e:
            logger.error(f"Push delivery failed for user {user_id}: {e}")
            result = DispatchResult(DispatchStatus.DELIVERY_FAILED, reason=str(e))
        finally:
            # The batch reached the push client, so it is recorded even if it raised
            self.db.add(
                NotificationHistory(
                    user_id=user_id,
                    category=category,
                    title=message.title,
                    body=message.body,
                    data=message.data,
                    sent_at=now,
                )
            )
            self.db.commit()
        return result

    def _build_push_messages(
        self,
        devices: list[DeviceToken],
        category: NotificationCategory,
        message: NotificationMessage,
    ) -> list[dict[str, Any]]:
        data = dict(message.data or {})
        data["category"] = category.value
        if message.reference_id is not None:
            data["reference_id"] = message.reference_id

        return [
            {
                "to": device.push_token,
                "title": message.title,
                "body": message.body or "",
                "data": data,
                "sound": "default",
                "categoryId": category.value,
            }
            for device in devices
        ]

    def _deactivate_unregistered_devices(
        self, devices: list[DeviceToken], tickets: list[dict[str, Any]]
    ) -> None:
        # Tickets come back in the same order as the submitted messages
        for device, ticket in zip(devices, tickets, strict=False):
            if not isinstance(ticket, dict):
                logger.warning(f"Ignoring malformed push ticket for device {device.id}")
                continue
            details = ticket.get("details") or {}
            if ticket.get("status") == "error" and details.get("error") == DEVICE_NOT_REGISTERED:
                logger.info(f"Deactivating unregistered device {device.id}")
                device.deactivate()

    # Scheduled notifications

    def schedule_notification(
        self,
        user_id: int,
        category: NotificationCategory | str,
        title: str,
        scheduled_for: datetime,
        body: str | None = None,
        reference_id: str | None = None,
    ) -> ScheduledNotification:
        """Queue a notification for delivery by the scheduler."""
        notification = ScheduledNotification(
            user_id=user_id,
            category=NotificationCategory(category),
            title=title,
            body=body,
            reference_id=reference_id,
            scheduled_for=scheduled_for,
            status=ScheduledNotificationStatus.PENDING,
        )
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        logger.info(f"Scheduled notification {notification.id} for user {user_id}")
        return notification

    def list_scheduled(
        self,
        user_id: int,
        status: ScheduledNotificationStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[ScheduledNotification]:
        """List a user's scheduled notifications, soonest first."""
        query = self.db.query(ScheduledNotification).filter(
            ScheduledNotification.user_id == user_id
        )
        if status is not None:
            query = query.filter(ScheduledNotification.status == status)
        return (
            query.order_by(ScheduledNotification.scheduled_for, ScheduledNotification.id)
            .offset(offset)
            .limit(limit)
            .all()
        )

    def get_due_notifications(self, now: datetime, limit: int) -> list[ScheduledNotification]:
        """Get pending notifications whose time has come, across all users."""
        return (
            self.db.query(ScheduledNotification)
            .filter(
                ScheduledNotification.status == ScheduledNotificationStatus.PENDING,
                ScheduledNotification.scheduled_for <= now,
            )
            .order_by(ScheduledNotification.scheduled_for, ScheduledNotification.id)
            .limit(limit)
            .all()
        )

    def cancel_scheduled(self, user_id: int, notification_id: int) -> ScheduledNotification:
        """Cancel a pending scheduled notification.

        Raises:
            ScheduledNotificationNotFoundError: no such notification for this user
            InvalidStateTransitionError: the notification is no longer pending
        """
        # Conditional update so a concurrent sweep cannot be overwritten
        updated = (
            self.db.query(ScheduledNotification)
            .filter(
                ScheduledNotification.id == notification_id,
                ScheduledNotification.user_id == user_id,
                ScheduledNotification.status == ScheduledNotificationStatus.PENDING,
            )
            .update(
                {ScheduledNotification.status: ScheduledNotificationStatus.CANCELLED},
                synchronize_session=False,
            )
        )
        self.db.commit()

        notification = (
            self.db.query(ScheduledNotification)
            .filter(
                ScheduledNotification.id == notification_id,
                ScheduledNotification.user_id == user_id,
            )
            .first()
        )
        if notification is None:
            raise ScheduledNotificationNotFoundError(
                f"Scheduled notification {notification_id} not found"
            )
        if not updated:
            raise InvalidStateTransitionError(
                f"Scheduled notification {notification_id} is already {notification.status.value}"
            )

        self.db.refresh(notification)
        logger.info(f"Cancelled scheduled notification {notification_id} for user {user_id}")
        return notification
