"""Shared FastAPI dependencies."""

import hmac
from uuid import UUID

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from .auth.models import User
from .config import settings
from .database.base import get_db
from .errors import AuthenticationError
from .integrations.adapters import AdapterFactory
from .integrations.delivery import PushConfig
from .notifications.service import NotificationDispatcher


def get_optional_user(request: Request, db: Session = Depends(get_db)) -> User | None:
    """Resolve the caller from the signed session cookie, or None for anonymous calls."""
    user_id_str = request.session.get("user_id")
    if not user_id_str:
        return None
    try:
        user_id = UUID(user_id_str)
    except (ValueError, AttributeError):
        request.session.clear()
        return None
    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_active:
        request.session.clear()
        return None
    return user


def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    """Same as :func:`get_optional_user` but rejects anonymous callers."""
    if user is None:
        raise AuthenticationError("Authentication required")
    return user


def has_service_credential(request: Request) -> bool:
    """True when the request carries the configured X-Service-Key."""
    expected = settings.service_api_key
    supplied = request.headers.get("X-Service-Key", "")
    return bool(expected) and hmac.compare_digest(supplied.encode(), expected.encode())


def get_push_config(request: Request) -> PushConfig:
    return request.app.state.push_config


def get_adapters(request: Request) -> AdapterFactory:
    return request.app.state.adapters


def get_dispatcher(
    db: Session = Depends(get_db),
    config: PushConfig = Depends(get_push_config),
    adapters: AdapterFactory = Depends(get_adapters),
) -> NotificationDispatcher:
    return NotificationDispatcher(db, config, adapters)
