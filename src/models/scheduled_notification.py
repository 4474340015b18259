"""Scheduled notification model."""

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.enums import NotificationCategory, ScheduledNotificationStatus
from src.models.mixins import TimestampMixin

# Shared with NotificationHistory so PostgreSQL creates the type once
notification_category_enum = Enum(
    NotificationCategory,
    name="notificationcategory",
    values_callable=lambda x: [e.value for e in x],
)


class ScheduledNotification(Base, TimestampMixin):
    """A notification queued for delivery at a later time."""

    __tablename__ = "scheduled_notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    category = Column(notification_category_enum, nullable=False)
    reference_id = Column(String(100), nullable=True)
    title = Column(String(200), nullable=False)
    body = Column(String(500), nullable=True)
    scheduled_for = Column(DateTime(timezone=True), nullable=False, index=True)
    status = Column(
        Enum(
            ScheduledNotificationStatus,
            name="schedulednotificationstatus",
            values_callable=lambda x: [e.value for e in x],
        ),
        default=ScheduledNotificationStatus.PENDING,
        nullable=False,
        index=True,
    )
    sent_at = Column(DateTime(timezone=True), nullable=True)
    error_message = Column(Text, nullable=True)

    # Relationships
    user = relationship("User", back_populates="scheduled_notifications")
