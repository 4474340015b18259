"""Note API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from src.api.dependencies import get_current_user
from src.database import get_db
from src.models.note import Note
from src.models.user import User
from src.schemas.note import NoteCreate, NoteResponse, NoteUpdate

router = APIRouter(prefix="/api/v1/notes", tags=["notes"])


def get_user_note(db: Session, note_id: int, user: User) -> Note:
    """Get a note owned by the user."""
    note = db.query(Note).filter(Note.id == note_id, Note.user_id == user.id).first()
    if not note:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Note not found")
    return note


@router.get("", response_model=list[NoteResponse])
async def get_notes(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    q: str | None = Query(default=None, min_length=1, description="Search title and content"),
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
):
    """Get the current user's notes, most recently updated first."""
    query = db.query(Note).filter(Note.user_id == current_user.id)
    if q:
        pattern = f"%{q}%"
        query = query.filter(or_(Note.title.ilike(pattern), Note.content.ilike(pattern)))

    return (
        query.order_by(Note.updated_at.desc(), Note.id.desc()).offset(offset).limit(limit).all()
    )


@router.post("", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def create_note(
    note_data: NoteCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Create a note."""
    note = Note(user_id=current_user.id, title=note_data.title, content=note_data.content)
    db.add(note)
    db.commit()
    db.refresh(note)
    return note


@router.get("/{note_id}", response_model=NoteResponse)
async def get_note(
    note_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a single note."""
    return get_user_note(db, note_id, current_user)


@router.patch("/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: int,
    note_data: NoteUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Update a note's title or content."""
    note = get_user_note(db, note_id, current_user)

    update_data = note_data.model_dump(exclude_unset=True)
    if update_data.get("title") is not None:
        note.title = update_data["title"]
    if "content" in update_data:
        note.content = update_data["content"]

    db.commit()
    db.refresh(note)
    return note


@router.delete("/{note_id}")
async def delete_note(
    note_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Delete a note."""
    note = get_user_note(db, note_id, current_user)
    db.delete(note)
    db.commit()
    return {"message": "Note deleted"}
