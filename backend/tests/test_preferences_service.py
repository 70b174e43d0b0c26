"""Tests for the preference center service."""

import pytest

from propnotify.errors import ValidationError
from propnotify.preferences.models import NotificationPreference
from propnotify.preferences.service import get_preferences, preferences_to_dict, upsert_preferences


class TestUpsertPreferences:
    def test_creates_with_defaults(self, db_session, test_user):
        prefs = upsert_preferences(db_session, test_user.id, {"promotions": False})
        db_session.commit()

        assert prefs.promotions is False
        assert prefs.push_enabled is True
        assert prefs.new_listings is True
        assert db_session.query(NotificationPreference).count() == 1

    def test_updates_existing_record(self, db_session, test_user, make_preferences):
        make_preferences(test_user, messages=False)

        upsert_preferences(db_session, test_user.id, {"push_enabled": False})
        db_session.commit()

        prefs = get_preferences(db_session, test_user.id)
        assert prefs.push_enabled is False
        assert prefs.messages is False
        assert db_session.query(NotificationPreference).count() == 1

    def test_none_does_not_null_a_toggle(self, db_session, test_user, make_preferences):
        make_preferences(test_user, promotions=False)

        prefs = upsert_preferences(db_session, test_user.id, {"promotions": None})

        assert prefs.promotions is False

    def test_quiet_times_can_be_cleared(self, db_session, test_user, make_preferences):
        make_preferences(test_user, quiet_hours_enabled=True, quiet_start_time="22:00", quiet_end_time="06:00")

        prefs = upsert_preferences(
            db_session,
            test_user.id,
            {"quiet_hours_enabled": False, "quiet_start_time": None, "quiet_end_time": None},
        )

        assert prefs.quiet_start_time is None
        assert prefs.quiet_end_time is None

    def test_quiet_hours_need_both_times(self, db_session, test_user, make_preferences):
        make_preferences(test_user, quiet_start_time="22:00")

        with pytest.raises(ValidationError):
            upsert_preferences(db_session, test_user.id, {"quiet_hours_enabled": True})

    def test_clearing_a_time_while_enabled_is_rejected(self, db_session, test_user, make_preferences):
        make_preferences(test_user, quiet_hours_enabled=True, quiet_start_time="22:00", quiet_end_time="06:00")

        with pytest.raises(ValidationError):
            upsert_preferences(db_session, test_user.id, {"quiet_end_time": None})

    def test_ignores_unknown_fields(self, db_session, test_user):
        prefs = upsert_preferences(db_session, test_user.id, {"user_id": "someone-else", "bogus": 1})

        assert prefs.user_id == test_user.id


class TestPreferencesToDict:
    def test_missing_record_reads_as_defaults(self):
        data = preferences_to_dict(None)

        assert data["push_enabled"] is True
        assert data["system_alerts"] is True
        assert data["quiet_hours_enabled"] is False
        assert data["quiet_start_time"] is None

    def test_serializes_record(self, test_user, make_preferences):
        prefs = make_preferences(test_user, price_changes=False, quiet_hours_enabled=True, quiet_start_time="23:00")

        data = preferences_to_dict(prefs)

        assert data["price_changes"] is False
        assert data["booking_updates"] is True
        assert data["quiet_start_time"] == "23:00"
