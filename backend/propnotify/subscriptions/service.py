"""Subscription registry: device endpoints keyed by their unique endpoint URL.

Rows are never deleted here; expiry and unsubscribe only flip ``is_active``.
"""

import logging
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.orm import Session

from .models import DeviceSubscription

logger = logging.getLogger(__name__)


def get_by_endpoint(db: Session, endpoint: str) -> DeviceSubscription | None:
    return db.query(DeviceSubscription).filter(DeviceSubscription.endpoint == endpoint).first()


def register(
    db: Session,
    user_id: UUID,
    endpoint: str,
    keys: dict,
    device_info: dict | None = None,
) -> tuple[DeviceSubscription, bool]:
    """Insert or update by endpoint. Returns (subscription, updated)."""
    device_info = device_info or {}
    existing = get_by_endpoint(db, endpoint)

    if existing:
        existing.user_id = user_id
        existing.p256dh = keys.get("p256dh", "")
        existing.auth = keys.get("auth", "")
        existing.device_type = device_info.get("device_type", existing.device_type)
        existing.device_name = device_info.get("device_name", existing.device_name)
        existing.browser = device_info.get("browser", existing.browser)
        existing.is_active = True
        existing.updated_at = datetime.now(UTC)
        db.flush()
        logger.info("Push subscription %s re-registered for user %s", existing.id, user_id)
        return existing, True

    sub = DeviceSubscription(
        user_id=user_id,
        endpoint=endpoint,
        p256dh=keys.get("p256dh", ""),
        auth=keys.get("auth", ""),
        device_type=device_info.get("device_type", ""),
        device_name=device_info.get("device_name", ""),
        browser=device_info.get("browser", ""),
        is_active=True,
    )
    db.add(sub)
    db.flush()
    logger.info("Push subscription %s registered for user %s", sub.id, user_id)
    return sub, False


def deactivate(db: Session, user_id: UUID, endpoint: str) -> bool:
    """Deactivate the caller's subscription for *endpoint*. Idempotent."""
    sub = (
        db.query(DeviceSubscription)
        .filter(DeviceSubscription.user_id == user_id, DeviceSubscription.endpoint == endpoint)
        .first()
    )
    if not sub:
        return False
    if sub.is_active:
        sub.is_active = False
        db.flush()
    return True


def deactivate_by_id(db: Session, subscription_id: UUID) -> bool:
    sub = db.query(DeviceSubscription).filter(DeviceSubscription.id == subscription_id).first()
    if not sub:
        return False
    if sub.is_active:
        sub.is_active = False
        db.flush()
        logger.info("Push subscription %s deactivated", subscription_id)
    return True


def touch(db: Session, subscription_id: UUID, now: datetime | None = None) -> None:
    """Bump updated_at after a successful delivery."""
    db.query(DeviceSubscription).filter(DeviceSubscription.id == subscription_id).update(
        {DeviceSubscription.updated_at: now or datetime.now(UTC)},
        synchronize_session=False,
    )


def active_subscriptions_for(db: Session, user_id: UUID) -> list[DeviceSubscription]:
    return (
        db.query(DeviceSubscription)
        .filter(
            DeviceSubscription.user_id == user_id,
            DeviceSubscription.is_active == True,  # noqa: E712
        )
        .order_by(DeviceSubscription.created_at.asc())
        .all()
    )
