"""Notification delivery history model."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import UUID

from ..database.base import Base


class NotificationHistory(Base):
    """Audit entry for one (recipient, dispatch) pair, later updated with read state."""

    __tablename__ = "notification_history"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String(255), nullable=False)
    body = Column(Text, default="")
    icon = Column(String(500), nullable=True)
    image = Column(String(500), nullable=True)
    action_url = Column(String(500), nullable=True)
    notification_type = Column(String(50), nullable=True)
    related_entity_id = Column(String(64), nullable=True)
    # "metadata" is reserved on declarative classes
    meta_data = Column("metadata", JSON, default=dict)
    is_sent = Column(Boolean, default=False, nullable=False)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
    )

    __table_args__ = (
        Index("idx_history_created", "created_at"),
        Index("idx_history_user_created", "user_id", "created_at"),
    )
