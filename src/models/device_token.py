"""Device token model for mobile push notifications."""

from sqlalchemy import Column, Enum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.enums import DevicePlatform
from src.models.mixins import ActiveFlagMixin, TimestampMixin


class DeviceToken(Base, TimestampMixin, ActiveFlagMixin):
    """Push token registered by a user's device. Unregistering deactivates the row."""

    __tablename__ = "device_tokens"
    __table_args__ = (UniqueConstraint("user_id", "push_token", name="uq_user_push_token"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    push_token = Column(String(500), nullable=False)
    platform = Column(
        Enum(
            DevicePlatform,
            name="deviceplatform",
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    device_name = Column(String(100), nullable=True)

    # Relationships
    user = relationship("User", back_populates="device_tokens")
