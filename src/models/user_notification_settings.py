"""User notification settings model."""

from sqlalchemy import JSON, Boolean, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.mixins import TimestampMixin


class UserNotificationSettings(Base, TimestampMixin):
    """Stored notification preferences. Missing categories are filled from defaults on read."""

    __tablename__ = "user_notification_settings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    notifications_enabled = Column(Boolean, default=True, nullable=True)
    # {"habits": {"enabled": true, "scheduled": true, "scheduledTime": "07:00"}, ...}
    notification_categories = Column(JSON, nullable=True)
    quiet_hours_start = Column(String(5), nullable=True)  # "HH:mm", e.g. 22:00
    quiet_hours_end = Column(String(5), nullable=True)  # "HH:mm", e.g. 07:00

    # Relationships
    user = relationship("User", back_populates="notification_settings")
