"""Expense and expense category API endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from src.api.dependencies import get_current_user
from src.database import get_db
from src.models.expense import Expense, ExpenseCategory
from src.models.user import User
from src.schemas.expense import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    CategoryUsage,
    ExpenseCreate,
    ExpenseResponse,
)
from src.schemas.reminder import to_utc

router = APIRouter(prefix="/api/v1", tags=["expenses"])


def get_user_category(db: Session, category_id: int, user: User) -> ExpenseCategory:
    """Get an expense category owned by the user."""
    category = (
        db.query(ExpenseCategory)
        .filter(ExpenseCategory.id == category_id, ExpenseCategory.user_id == user.id)
        .first()
    )
    if not category:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return category


def get_user_expense(db: Session, expense_id: int, user: User) -> Expense:
    """Get an expense owned by the user."""
    expense = db.query(Expense).filter(Expense.id == expense_id, Expense.user_id == user.id).first()
    if not expense:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense not found")
    return expense


def find_category_by_name(db: Session, user_id: int, name: str) -> ExpenseCategory | None:
    return (
        db.query(ExpenseCategory)
        .filter(ExpenseCategory.user_id == user_id, ExpenseCategory.name == name)
        .first()
    )


def _category_name_taken() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST, detail="Category already exists"
    )


@router.get("/categories", response_model=list[CategoryResponse])
async def get_categories(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get the current user's expense categories by name."""
    return (
        db.query(ExpenseCategory)
        .filter(ExpenseCategory.user_id == current_user.id)
        .order_by(ExpenseCategory.name)
        .all()
    )


@router.get("/categories/usage", response_model=list[CategoryUsage])
async def get_category_usage(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get each category with its expense count and total, most used first."""
    rows = (
        db.query(
            ExpenseCategory.id,
            ExpenseCategory.name,
            func.count(Expense.id),
            func.coalesce(func.sum(Expense.amount), 0),
        )
        .outerjoin(Expense, Expense.category_id == ExpenseCategory.id)
        .filter(ExpenseCategory.user_id == current_user.id)
        .group_by(ExpenseCategory.id, ExpenseCategory.name)
        .order_by(func.count(Expense.id).desc(), ExpenseCategory.name)
        .all()
    )
    return [
        CategoryUsage(
            id=category_id,
            name=name,
            expense_count=count,
            total_amount=Decimal(str(total)),
        )
        for category_id, name, count, total in rows
    ]


@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    category_data: CategoryCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Create an expense category."""
    if find_category_by_name(db, current_user.id, category_data.name):
        raise _category_name_taken()

    category = ExpenseCategory(user_id=current_user.id, name=category_data.name)
    db.add(category)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise _category_name_taken() from e
    db.refresh(category)
    return category


@router.patch("/categories/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    category_data: CategoryUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Rename an expense category."""
    category = get_user_category(db, category_id, current_user)
    existing = find_category_by_name(db, current_user.id, category_data.name)
    if existing and existing.id != category.id:
        raise _category_name_taken()

    category.name = category_data.name
    db.commit()
    db.refresh(category)
    return category


@router.delete("/categories/{category_id}")
async def delete_category(
    category_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Delete a category. Its expenses are kept without a category."""
    category = get_user_category(db, category_id, current_user)
    db.delete(category)
    db.commit()
    return {"message": "Category deleted"}


@router.get("/expenses", response_model=list[ExpenseResponse])
async def get_expenses(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    category: str | None = Query(default=None, description="Category name"),
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
):
    """Get the current user's expenses, newest first. Date bounds are inclusive."""
    query = (
        db.query(Expense)
        .options(joinedload(Expense.category))
        .filter(Expense.user_id == current_user.id)
    )
    if category:
        query = query.join(Expense.category).filter(ExpenseCategory.name == category.strip())
    if start_date is not None:
        query = query.filter(Expense.date >= to_utc(start_date))
    if end_date is not None:
        query = query.filter(Expense.date <= to_utc(end_date))

    return query.order_by(Expense.date.desc(), Expense.id.desc()).offset(offset).limit(limit).all()


@router.post("/expenses", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    expense_data: ExpenseCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Record an expense, creating its category on first use."""
    category = find_category_by_name(db, current_user.id, expense_data.category)
    if category is None:
        category = ExpenseCategory(user_id=current_user.id, name=expense_data.category)
        db.add(category)
        db.flush()

    expense = Expense(
        user_id=current_user.id,
        category_id=category.id,
        amount=expense_data.amount,
        description=expense_data.description,
    )
    if expense_data.date is not None:
        expense.date = expense_data.date
    db.add(expense)
    db.commit()
    db.refresh(expense)
    return expense


@router.get("/expenses/{expense_id}", response_model=ExpenseResponse)
async def get_expense(
    expense_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a single expense."""
    return get_user_expense(db, expense_id, current_user)


@router.delete("/expenses/{expense_id}")
async def delete_expense(
    expense_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Delete an expense."""
    expense = get_user_expense(db, expense_id, current_user)
    db.delete(expense)
    db.commit()
    return {"message": "Expense deleted"}
