"""Reminder list and reminder API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from src.api.dependencies import get_current_user
from src.database import get_db
from src.models.reminder import Reminder, ReminderList
from src.models.user import User
from src.schemas.reminder import (
    ReminderCreate,
    ReminderListCreate,
    ReminderListResponse,
    ReminderListUpdate,
    ReminderResponse,
    ReminderUpdate,
)

router = APIRouter(prefix="/api/v1", tags=["reminders"])


def get_user_reminder_list(db: Session, list_id: int, user: User) -> ReminderList:
    """Get a reminder list owned by the user."""
    reminder_list = (
        db.query(ReminderList)
        .filter(ReminderList.id == list_id, ReminderList.user_id == user.id)
        .first()
    )
    if not reminder_list:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Reminder list not found"
        )
    return reminder_list


def get_user_reminder(db: Session, reminder_id: int, user: User) -> Reminder:
    """Get a reminder owned by the user."""
    reminder = (
        db.query(Reminder).filter(Reminder.id == reminder_id, Reminder.user_id == user.id).first()
    )
    if not reminder:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reminder not found")
    return reminder


@router.get("/reminder-lists", response_model=list[ReminderListResponse])
async def get_reminder_lists(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get all reminder lists of the current user, newest first."""
    return (
        db.query(ReminderList)
        .filter(ReminderList.user_id == current_user.id)
        .order_by(ReminderList.created_at.desc(), ReminderList.id.desc())
        .all()
    )


@router.post(
    "/reminder-lists",
    response_model=ReminderListResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_reminder_list(
    list_data: ReminderListCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Create a reminder list."""
    reminder_list = ReminderList(user_id=current_user.id, name=list_data.name.strip())
    db.add(reminder_list)
    db.commit()
    db.refresh(reminder_list)
    return reminder_list


@router.put("/reminder-lists/{list_id}", response_model=ReminderListResponse)
async def update_reminder_list(
    list_id: int,
    list_data: ReminderListUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Rename a reminder list."""
    reminder_list = get_user_reminder_list(db, list_id, current_user)
    reminder_list.name = list_data.name.strip()
    db.commit()
    db.refresh(reminder_list)
    return reminder_list


@router.delete("/reminder-lists/{list_id}")
async def delete_reminder_list(
    list_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Delete a reminder list and its reminders."""
    reminder_list = get_user_reminder_list(db, list_id, current_user)
    db.delete(reminder_list)
    db.commit()
    return {"message": "Reminder list deleted"}


@router.get("/reminders", response_model=list[ReminderResponse])
async def get_reminders(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    list_id: int | None = None,
):
    """Get the current user's reminders, optionally for one list, by due date."""
    query = db.query(Reminder).filter(Reminder.user_id == current_user.id)
    if list_id is not None:
        query = query.filter(Reminder.list_id == list_id)

    return query.order_by(Reminder.due_date.is_(None), Reminder.due_date, Reminder.id).all()


@router.post("/reminders", response_model=ReminderResponse, status_code=status.HTTP_201_CREATED)
async def create_reminder(
    reminder_data: ReminderCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Create a reminder in one of the current user's lists."""
    get_user_reminder_list(db, reminder_data.list_id, current_user)

    reminder = Reminder(
        list_id=reminder_data.list_id,
        user_id=current_user.id,
        title=reminder_data.title.strip(),
        due_date=reminder_data.due_date,
        relevance=reminder_data.relevance,
        completed=False,
    )
    db.add(reminder)
    db.commit()
    db.refresh(reminder)
    return reminder


@router.get("/reminders/{reminder_id}", response_model=ReminderResponse)
async def get_reminder(
    reminder_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a single reminder."""
    return get_user_reminder(db, reminder_id, current_user)


@router.patch("/reminders/{reminder_id}", response_model=ReminderResponse)
async def update_reminder(
    reminder_id: int,
    reminder_data: ReminderUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Update a reminder. A new due date makes it eligible for another notification."""
    reminder = get_user_reminder(db, reminder_id, current_user)

    update_data = reminder_data.model_dump(exclude_unset=True)
    if "title" in update_data and update_data["title"] is not None:
        reminder.title = update_data["title"].strip()
    if "due_date" in update_data:
        reminder.due_date = update_data["due_date"]
        reminder.notified_at = None
    if update_data.get("relevance") is not None:
        reminder.relevance = update_data["relevance"]
    if update_data.get("completed") is not None:
        reminder.completed = update_data["completed"]

    db.commit()
    db.refresh(reminder)
    return reminder


@router.delete("/reminders/{reminder_id}")
async def delete_reminder(
    reminder_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Delete a reminder."""
    reminder = get_user_reminder(db, reminder_id, current_user)
    db.delete(reminder)
    db.commit()
    return {"message": "Reminder deleted"}
