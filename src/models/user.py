"""User model."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """Account that owns settings, devices and all personal data."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)  # stored lowercased
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=True)

    # Relationships
    notification_settings = relationship(
        "UserNotificationSettings", back_populates="user", uselist=False
    )
    device_tokens = relationship("DeviceToken", back_populates="user")
    scheduled_notifications = relationship("ScheduledNotification", back_populates="user")
    reminder_lists = relationship("ReminderList", back_populates="user")
    habits = relationship("Habit", back_populates="user")
    notes = relationship("Note", back_populates="user")
    expenses = relationship("Expense", back_populates="user")
