"""Activity log service."""

import logging

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .models import ActivityLog

logger = logging.getLogger(__name__)


def _get_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else ""


def audit(db: Session, request: Request, action: str, detail: str = "", user_id=None) -> None:
    """Write an audit log entry for an HTTP action. Committed with the caller's transaction."""
    db.add(
        ActivityLog(
            user_id=user_id,
            action=action,
            detail=detail,
            ip_address=_get_ip(request),
        )
    )


def record_activity(db: Session, user_id, action: str, metadata: dict | None = None) -> bool:
    """Append an analytics activity entry in its own commit.

    Best-effort: a store failure is logged and rolled back, never raised, so
    the primary write that preceded it stands.
    """
    try:
        db.add(ActivityLog(user_id=user_id, action=action, meta_data=metadata or {}))
        db.commit()
        return True
    except SQLAlchemyError:
        db.rollback()
        logger.warning("Activity log write failed: action=%s user=%s", action, user_id, exc_info=True)
        return False
