"""Reminder list and reminder models."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.mixins import TimestampMixin


class ReminderList(Base, TimestampMixin):
    """Named group of reminders."""

    __tablename__ = "reminder_lists"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)

    # Relationships
    user = relationship("User", back_populates="reminder_lists")
    reminders = relationship("Reminder", back_populates="list", cascade="all, delete-orphan")


class Reminder(Base, TimestampMixin):
    """A reminder with an optional due date."""

    __tablename__ = "reminders"

    id = Column(Integer, primary_key=True, index=True)
    list_id = Column(Integer, ForeignKey("reminder_lists.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    due_date = Column(DateTime(timezone=True), nullable=True, index=True)
    relevance = Column(Integer, default=1, nullable=False)  # 1-3
    completed = Column(Boolean, default=False, nullable=False, index=True)
    # Set once a due notification went out; cleared when due_date changes
    notified_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    list = relationship("ReminderList", back_populates="reminders")
