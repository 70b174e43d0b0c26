"""Notification history: audit rows, interaction tracking and engagement stats."""

import logging
from collections import Counter
from datetime import UTC, datetime, timedelta
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..audit.service import record_activity
from ..errors import PersistenceError
from .models import NotificationHistory
from .schemas import OutboundMessage

logger = logging.getLogger(__name__)

CLICKED = "clicked"
UNCLASSIFIED = "other"


def record_sent(db: Session, user_id: UUID, message: OutboundMessage, now: datetime) -> UUID:
    """Write and commit the history row for one recipient. Returns its id.

    Raises :class:`PersistenceError` when the store rejects the write; nothing
    may be delivered without this row.
    """
    try:
        record = NotificationHistory(
            user_id=user_id,
            title=message.title,
            body=message.body,
            icon=message.icon,
            image=message.image,
            action_url=message.action_url,
            notification_type=message.category,
            related_entity_id=message.related_entity_id,
            meta_data=dict(message.metadata),
            is_sent=True,
            sent_at=now,
            created_at=now,
        )
        db.add(record)
        db.flush()
        history_id = record.id
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("History write failed for user %s: %s", user_id, exc)
        raise PersistenceError("Failed to record notification history") from exc
    return history_id


def track_interaction(
    db: Session,
    history_id: UUID | None,
    user_id: UUID | None,
    interaction_type: str,
    metadata: dict | None = None,
    now: datetime | None = None,
) -> bool:
    """Record a client-side interaction with a delivered notification.

    Only ``clicked`` marks the history row read, and only once: a row already
    read keeps its original read_at. The analytics activity entry is
    best-effort and cannot fail the call.
    """
    now = now or datetime.now(UTC)

    if history_id is not None and interaction_type == CLICKED:
        try:
            record = db.query(NotificationHistory).filter(NotificationHistory.id == history_id).first()
            if record is None:
                logger.debug("Interaction for unknown history id %s ignored", history_id)
            elif not record.is_read:
                record.is_read = True
                record.read_at = now
                db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError("Failed to update notification read state") from exc

    if user_id is not None:
        activity = dict(metadata or {})
        if history_id is not None:
            activity["history_id"] = str(history_id)
        record_activity(db, user_id, f"notification_{interaction_type}", activity)

    return True


def get_stats(
    db: Session,
    user_id: UUID | None = None,
    now: datetime | None = None,
    window_days: int = 30,
) -> dict:
    """Engagement stats over history rows created in the trailing window."""
    now = now or datetime.now(UTC)
    cutoff = now - timedelta(days=window_days)

    query = db.query(
        NotificationHistory.notification_type,
        NotificationHistory.is_sent,
        NotificationHistory.is_read,
    ).filter(NotificationHistory.created_at >= cutoff)
    if user_id is not None:
        query = query.filter(NotificationHistory.user_id == user_id)
    rows = query.all()

    total = len(rows)
    sent = sum(1 for r in rows if r.is_sent)
    read = sum(1 for r in rows if r.is_read)
    by_type = Counter(r.notification_type or UNCLASSIFIED for r in rows)

    return {
        "total": total,
        "sent": sent,
        "read": read,
        "click_rate": f"{read / sent * 100:.1f}" if sent else "0",
        "by_type": dict(by_type),
    }


def recent_history(db: Session, user_id: UUID, limit: int = 50) -> list[NotificationHistory]:
    return (
        db.query(NotificationHistory)
        .filter(NotificationHistory.user_id == user_id)
        .order_by(NotificationHistory.created_at.desc())
        .limit(limit)
        .all()
    )


def history_to_dict(record: NotificationHistory) -> dict:
    return {
        "id": str(record.id),
        "title": record.title,
        "body": record.body,
        "icon": record.icon,
        "image": record.image,
        "action_url": record.action_url,
        "notification_type": record.notification_type or UNCLASSIFIED,
        "related_entity_id": record.related_entity_id,
        "metadata": record.meta_data or {},
        "is_sent": bool(record.is_sent),
        "sent_at": record.sent_at.isoformat() if record.sent_at else None,
        "is_read": bool(record.is_read),
        "read_at": record.read_at.isoformat() if record.read_at else None,
    }
