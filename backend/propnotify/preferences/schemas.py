"""Preference center schemas."""

from pydantic import BaseModel, Field

_HHMM = r"^([01]\d|2[0-3]):[0-5]\d$"


class PreferenceUpdateRequest(BaseModel):
    push_enabled: bool | None = None
    new_listings: bool | None = None
    price_changes: bool | None = None
    booking_updates: bool | None = None
    messages: bool | None = None
    promotions: bool | None = None
    system_alerts: bool | None = None
    quiet_hours_enabled: bool | None = None
    quiet_start_time: str | None = Field(None, pattern=_HHMM)
    quiet_end_time: str | None = Field(None, pattern=_HHMM)
