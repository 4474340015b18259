"""Exceptions raised by the service layer."""


class UserNotFoundError(Exception):
    """The user record does not exist."""

    def __init__(self, user_id: int) -> None:
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class PushDeliveryError(Exception):
    """The push service was unreachable or rejected the batch."""


class ScheduledNotificationNotFoundError(Exception):
    """No scheduled notification with that id exists for the caller."""


class InvalidStateTransitionError(Exception):
    """A scheduled notification was asked to leave a terminal state."""
