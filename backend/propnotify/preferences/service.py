"""Preference center service: read and update a user's notification preferences."""

from uuid import UUID

from sqlalchemy.orm import Session

from ..errors import ValidationError
from .models import CATEGORY_TOGGLES, NotificationPreference

_EDITABLE_FIELDS = ("push_enabled", *CATEGORY_TOGGLES, "quiet_hours_enabled", "quiet_start_time", "quiet_end_time")


def get_preferences(db: Session, user_id: UUID) -> NotificationPreference | None:
    return db.query(NotificationPreference).filter(NotificationPreference.user_id == user_id).first()


def upsert_preferences(db: Session, user_id: UUID, changes: dict) -> NotificationPreference:
    """Apply *changes* to the user's record, creating it with defaults if missing.

    Raises :class:`ValidationError` when the result would enable quiet hours
    without both boundary times.
    """
    prefs = get_preferences(db, user_id)
    if prefs is None:
        prefs = NotificationPreference(user_id=user_id)
        db.add(prefs)

    for field, value in changes.items():
        if field not in _EDITABLE_FIELDS:
            continue
        # Only the quiet-hours times may be cleared; toggles are never null
        if value is None and field not in ("quiet_start_time", "quiet_end_time"):
            continue
        setattr(prefs, field, value)

    if prefs.quiet_hours_enabled and not (prefs.quiet_start_time and prefs.quiet_end_time):
        raise ValidationError("quiet_start_time and quiet_end_time are required when quiet hours are enabled")
    db.flush()
    return prefs


def preferences_to_dict(prefs: NotificationPreference | None) -> dict:
    """Serialize a record; a missing record reads as the allow-everything defaults."""
    if prefs is None:
        return {
            "push_enabled": True,
            **{toggle: True for toggle in CATEGORY_TOGGLES},
            "quiet_hours_enabled": False,
            "quiet_start_time": None,
            "quiet_end_time": None,
        }
    return {
        "push_enabled": bool(prefs.push_enabled),
        **{toggle: getattr(prefs, toggle) is not False for toggle in CATEGORY_TOGGLES},
        "quiet_hours_enabled": bool(prefs.quiet_hours_enabled),
        "quiet_start_time": prefs.quiet_start_time,
        "quiet_end_time": prefs.quiet_end_time,
    }
