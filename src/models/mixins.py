"""Mixins for SQLAlchemy models."""

from sqlalchemy import Boolean, Column, DateTime, func


class TimestampMixin:
    """Mixin to add created_at and updated_at timestamp columns."""

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class ActiveFlagMixin:
    """Mixin for rows that are deactivated instead of deleted."""

    is_active = Column(Boolean, default=True, nullable=False, index=True)

    def activate(self) -> None:
        """Mark the record active again."""
        self.is_active = True

    def deactivate(self) -> None:
        """Soft delete the record."""
        self.is_active = False
