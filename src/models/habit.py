"""Habit and habit log models."""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    Enum,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.enums import HabitFrequency
from src.models.mixins import TimestampMixin


class Habit(Base, TimestampMixin):
    """A recurring habit the user wants to be reminded about."""

    __tablename__ = "habits"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    frequency = Column(
        Enum(
            HabitFrequency,
            name="habitfrequency",
            values_callable=lambda x: [e.value for e in x],
        ),
        default=HabitFrequency.DAILY,
        nullable=False,
        index=True,
    )

    # Relationships
    user = relationship("User", back_populates="habits")
    logs = relationship("HabitLog", back_populates="habit", cascade="all, delete-orphan")


class HabitLog(Base, TimestampMixin):
    """Whether a habit was completed on a given day. One row per habit and day."""

    __tablename__ = "habit_logs"
    __table_args__ = (UniqueConstraint("habit_id", "date", name="uq_habit_log_day"),)

    id = Column(Integer, primary_key=True, index=True)
    habit_id = Column(Integer, ForeignKey("habits.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    completed = Column(Boolean, default=False, nullable=False)

    # Relationships
    habit = relationship("Habit", back_populates="logs")
