"""Habit and habit log API endpoints."""

from datetime import date as Date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.api.dependencies import get_current_user
from src.database import get_db
from src.models.habit import Habit, HabitLog
from src.models.user import User
from src.schemas.habit import (
    HabitCreate,
    HabitLogResponse,
    HabitLogToggle,
    HabitResponse,
    HabitUpdate,
)

router = APIRouter(prefix="/api/v1", tags=["habits"])


def get_user_habit(db: Session, habit_id: int, user: User) -> Habit:
    """Get a habit owned by the user."""
    habit = db.query(Habit).filter(Habit.id == habit_id, Habit.user_id == user.id).first()
    if not habit:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Habit not found")
    return habit


@router.get("/habits", response_model=list[HabitResponse])
async def get_habits(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get all habits of the current user."""
    return db.query(Habit).filter(Habit.user_id == current_user.id).order_by(Habit.id).all()


@router.post("/habits", response_model=HabitResponse, status_code=status.HTTP_201_CREATED)
async def create_habit(
    habit_data: HabitCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Create a habit."""
    habit = Habit(
        user_id=current_user.id,
        name=habit_data.name.strip(),
        frequency=habit_data.frequency,
    )
    db.add(habit)
    db.commit()
    db.refresh(habit)
    return habit


@router.get("/habits/{habit_id}", response_model=HabitResponse)
async def get_habit(
    habit_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a single habit."""
    return get_user_habit(db, habit_id, current_user)


@router.patch("/habits/{habit_id}", response_model=HabitResponse)
async def update_habit(
    habit_id: int,
    habit_data: HabitUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Update a habit."""
    habit = get_user_habit(db, habit_id, current_user)

    if habit_data.name is not None:
        habit.name = habit_data.name.strip()
    if habit_data.frequency is not None:
        habit.frequency = habit_data.frequency

    db.commit()
    db.refresh(habit)
    return habit


@router.delete("/habits/{habit_id}")
async def delete_habit(
    habit_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Delete a habit and its logs."""
    habit = get_user_habit(db, habit_id, current_user)
    db.delete(habit)
    db.commit()
    return {"message": "Habit deleted"}


@router.get("/habit-logs", response_model=list[HabitLogResponse])
async def get_habit_logs(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    habit_id: int | None = None,
    start_date: Date | None = None,
    end_date: Date | None = None,
):
    """Get the current user's habit logs, newest day first. Date bounds are inclusive."""
    query = db.query(HabitLog).filter(HabitLog.user_id == current_user.id)
    if habit_id is not None:
        query = query.filter(HabitLog.habit_id == habit_id)
    if start_date is not None:
        query = query.filter(HabitLog.date >= start_date)
    if end_date is not None:
        query = query.filter(HabitLog.date <= end_date)

    return query.order_by(HabitLog.date.desc(), HabitLog.id).all()


@router.post("/habit-logs", response_model=HabitLogResponse)
async def toggle_habit_log(
    log_data: HabitLogToggle,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Set a habit's completion for one day, creating the log on first use."""
    habit = get_user_habit(db, log_data.habit_id, current_user)

    log = _find_log(db, habit.id, log_data.date)
    if log is None:
        log = HabitLog(
            habit_id=habit.id,
            user_id=current_user.id,
            date=log_data.date,
            completed=log_data.completed,
        )
        db.add(log)
        try:
            db.commit()
        except IntegrityError:
            # Logged concurrently for the same day
            db.rollback()
            log = _find_log(db, habit.id, log_data.date)
            if log is None:
                raise

    log.completed = log_data.completed
    db.commit()
    db.refresh(log)
    return log


def _find_log(db: Session, habit_id: int, day: Date) -> HabitLog | None:
    return db.query(HabitLog).filter(HabitLog.habit_id == habit_id, HabitLog.date == day).first()
