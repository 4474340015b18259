"""Expense and expense category models."""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.mixins import TimestampMixin


class ExpenseCategory(Base, TimestampMixin):
    """User-defined expense category. Names are unique per user."""

    __tablename__ = "expense_categories"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_expense_category_user_name"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)

    # Relationships
    expenses = relationship("Expense", back_populates="category")


class Expense(Base, TimestampMixin):
    """A single spending entry."""

    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # Nulled when the category is deleted; the expense itself is kept
    category_id = Column(
        Integer, ForeignKey("expense_categories.id", ondelete="SET NULL"), nullable=True
    )
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(String(500), nullable=True)
    date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    # Relationships
    user = relationship("User", back_populates="expenses")
    category = relationship("ExpenseCategory", back_populates="expenses")

    @property
    def category_name(self) -> str | None:
        return self.category.name if self.category else None
