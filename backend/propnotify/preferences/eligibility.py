"""Send eligibility: opt-outs, category toggles and quiet hours.

Pure functions only. The caller supplies the preference record (or None) and
the local wall-clock time, so every rule is testable without a real clock.
"""

import enum
from dataclasses import dataclass
from datetime import datetime, timedelta

from .models import CATEGORY_TOGGLES


class DenyReason(enum.StrEnum):
    PUSH_DISABLED = "push_disabled"
    TYPE_DISABLED = "type_disabled"
    QUIET_HOURS = "quiet_hours"


@dataclass(frozen=True)
class Eligibility:
    allowed: bool
    reason: DenyReason | None = None

    @classmethod
    def allow(cls) -> "Eligibility":
        return cls(True)

    @classmethod
    def deny(cls, reason: DenyReason) -> "Eligibility":
        return cls(False, reason)


# Message types emitted by the marketplace that map onto a preference toggle.
_CATEGORY_ALIASES = {
    "new_listing": "new_listings",
    "new_match": "new_listings",
    "price_change": "price_changes",
    "price_drop": "price_changes",
    "booking": "booking_updates",
    "booking_update": "booking_updates",
    "viewing": "booking_updates",
    "message": "messages",
    "promotion": "promotions",
    "system": "system_alerts",
    "system_alert": "system_alerts",
}


def toggle_for(category: str | None) -> str | None:
    """Return the preference toggle governing *category*, or None if unmapped."""
    if not category:
        return None
    if category in CATEGORY_TOGGLES:
        return category
    return _CATEGORY_ALIASES.get(category)


def parse_minutes(value: str | None) -> int | None:
    """Parse "HH:MM" (or "HH:MM:SS") into minutes after midnight."""
    if not value:
        return None
    parts = value.split(":")
    if len(parts) < 2:
        return None
    try:
        hours, minutes = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        return None
    return hours * 60 + minutes


def in_quiet_hours(start: str | None, end: str | None, now_local: datetime) -> bool:
    start_minutes = parse_minutes(start)
    end_minutes = parse_minutes(end)
    if start_minutes is None or end_minutes is None:
        return False

    current = now_local.hour * 60 + now_local.minute
    if start_minutes <= end_minutes:
        return start_minutes <= current < end_minutes
    # Overnight window, e.g. 22:00-06:00
    return current >= start_minutes or current < end_minutes


def evaluate(preferences, category: str | None, now_local: datetime) -> Eligibility:
    """Decide whether a message of *category* may be pushed right now.

    Rules are checked in order and the first match wins:
    no record, push disabled, category toggle off, quiet hours.
    """
    if preferences is None:
        return Eligibility.allow()

    if preferences.push_enabled is False:
        return Eligibility.deny(DenyReason.PUSH_DISABLED)

    toggle = toggle_for(category)
    if toggle is not None and getattr(preferences, toggle, None) is False:
        return Eligibility.deny(DenyReason.TYPE_DISABLED)

    if preferences.quiet_hours_enabled and preferences.quiet_start_time and preferences.quiet_end_time:
        if in_quiet_hours(preferences.quiet_start_time, preferences.quiet_end_time, now_local):
            return Eligibility.deny(DenyReason.QUIET_HOURS)

    return Eligibility.allow()


def to_local_time(now_utc: datetime, offset_minutes: int) -> datetime:
    """Shift a UTC instant onto the single configured wall-clock offset."""
    return now_utc + timedelta(minutes=offset_minutes)
