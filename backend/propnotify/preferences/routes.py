"""Preference center routes."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..auth.models import User
from ..database.base import get_db
from ..dependencies import get_current_user
from .schemas import PreferenceUpdateRequest
from .service import get_preferences, preferences_to_dict, upsert_preferences

router = APIRouter(prefix="/preferences", tags=["preferences"])


@router.get("")
def read_preferences(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return JSONResponse({"success": True, "preferences": preferences_to_dict(get_preferences(db, user.id))})


@router.put("")
def update_preferences(
    body: PreferenceUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    prefs = upsert_preferences(db, user.id, body.model_dump(exclude_unset=True))
    db.commit()
    return JSONResponse({"success": True, "preferences": preferences_to_dict(prefs)})
