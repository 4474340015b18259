"""Notification history model."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, func

from src.database import Base
from src.models.scheduled_notification import notification_category_enum


class NotificationHistory(Base):
    """Append-only log of notifications handed to the push service."""

    __tablename__ = "notification_history"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    category = Column(notification_category_enum, nullable=False)
    title = Column(String(200), nullable=False)
    body = Column(String(500), nullable=True)
    data = Column(JSON, nullable=True)
    sent_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
