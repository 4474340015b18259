"""Expense and expense category schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.schemas.reminder import to_utc


class CategoryCreate(BaseModel):
    """Create an expense category."""

    name: str = Field(..., min_length=1, max_length=100)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Category name is required")
        return value


class CategoryUpdate(CategoryCreate):
    """Rename an expense category."""


class CategoryResponse(BaseModel):
    """Expense category response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    created_at: datetime


class CategoryUsage(BaseModel):
    """How much a category has been used."""

    id: int
    name: str
    expense_count: int
    total_amount: Decimal


class ExpenseCreate(BaseModel):
    """Create an expense. The category is looked up by name and created if new."""

    category: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., gt=Decimal("0"), max_digits=12, decimal_places=2)
    description: str | None = Field(None, max_length=500)
    date: datetime | None = None

    @field_validator("category")
    @classmethod
    def strip_category(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Category is required")
        return value

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: datetime | None) -> datetime | None:
        return to_utc(value)


class ExpenseResponse(BaseModel):
    """Expense response with the category resolved to its name."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    category_id: int | None
    category: str | None = Field(None, validation_alias="category_name")
    amount: Decimal
    description: str | None
    date: datetime
    created_at: datetime
