"""Notification dispatch, tracking and analytics routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..audit.service import audit
from ..auth.models import User
from ..config import settings
from ..database.base import get_db
from ..dependencies import get_current_user, get_dispatcher, get_optional_user, has_service_credential
from ..errors import AuthenticationError
from ..rate_limit import limiter
from .history import get_stats, history_to_dict, recent_history, track_interaction
from .schemas import BulkSendRequest, SendRequest, TrackRequest
from .service import NotificationDispatcher

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post("/send")
@limiter.limit(settings.rate_limit_send)
def send_to_user(
    request: Request,
    body: SendRequest,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    user: User | None = Depends(get_optional_user),
    trusted: bool = Depends(has_service_credential),
):
    target = body.user_id or (user.id if user else None)
    if target is None:
        raise AuthenticationError("A caller or an explicit user_id is required")
    if (user is None or target != user.id) and not trusted:
        raise AuthenticationError("Sending to another user requires a service credential")

    result = dispatcher.send_to_user(target, body.notification)
    audit(
        dispatcher.db,
        request,
        "notification_send",
        f"target={target}, result={result}",
        user_id=user.id if user else None,
    )
    dispatcher.db.commit()
    return JSONResponse({"success": True, **result})


@router.post("/send-bulk")
@limiter.limit(settings.rate_limit_send)
def send_bulk(
    request: Request,
    body: BulkSendRequest,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    user: User = Depends(get_current_user),
):
    result = dispatcher.send_bulk(body.user_ids, body.notification)
    audit(
        dispatcher.db,
        request,
        "notification_send_bulk",
        f"users={len(body.user_ids)}, result={result}",
        user_id=user.id,
    )
    dispatcher.db.commit()
    return JSONResponse({"success": True, **result})


@router.post("/track")
def track(
    body: TrackRequest,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_optional_user),
):
    track_interaction(
        db,
        body.history_id,
        user.id if user else None,
        body.interaction_type,
        body.metadata,
    )
    return JSONResponse({"success": True})


@router.get("/stats")
def stats(
    user_id: UUID | None = Query(None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return JSONResponse({"success": True, "stats": get_stats(db, user_id, window_days=settings.stats_window_days)})


@router.get("/history")
def history(
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    records = recent_history(db, user.id, limit)
    return JSONResponse({"success": True, "notifications": [history_to_dict(r) for r in records]})
