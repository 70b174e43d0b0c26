"""Per-user notification preference model."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID

from ..database.base import Base

CATEGORY_TOGGLES = (
    "new_listings",
    "price_changes",
    "booking_updates",
    "messages",
    "promotions",
    "system_alerts",
)


class NotificationPreference(Base):
    __tablename__ = "notification_preferences"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    push_enabled = Column(Boolean, default=True, nullable=False)

    new_listings = Column(Boolean, default=True)
    price_changes = Column(Boolean, default=True)
    booking_updates = Column(Boolean, default=True)
    messages = Column(Boolean, default=True)
    promotions = Column(Boolean, default=True)
    system_alerts = Column(Boolean, default=True)

    quiet_hours_enabled = Column(Boolean, default=False, nullable=False)
    quiet_start_time = Column(String(8), nullable=True)  # "HH:MM"
    quiet_end_time = Column(String(8), nullable=True)
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )
