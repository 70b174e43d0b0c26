"""Push subscription routes."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..audit.service import audit
from ..auth.models import User
from ..config import settings
from ..database.base import get_db
from ..dependencies import get_current_user
from .schemas import SubscribeRequest, UnsubscribeRequest
from .service import deactivate, register

router = APIRouter(prefix="/push", tags=["push"])


@router.get("/vapid-public-key")
def vapid_public_key():
    return JSONResponse({"success": True, "publicKey": settings.vapid_public_key})


@router.post("/subscribe")
def subscribe(
    request: Request,
    body: SubscribeRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    sub, updated = register(
        db,
        user.id,
        body.endpoint,
        body.keys.model_dump(),
        body.device_info.model_dump(exclude_unset=True) if body.device_info else None,
    )
    audit(db, request, "push_subscribe", f"subscription={sub.id}, updated={updated}", user_id=user.id)
    db.commit()
    return JSONResponse({"success": True, "subscription_id": str(sub.id), "updated": updated})


@router.post("/unsubscribe")
def unsubscribe(
    request: Request,
    body: UnsubscribeRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    found = deactivate(db, user.id, body.endpoint)
    audit(db, request, "push_unsubscribe", f"found={found}", user_id=user.id)
    db.commit()
    return JSONResponse({"success": True})
