"""Tests for the subscription registry."""

from datetime import UTC, datetime

from propnotify.subscriptions.models import DeviceSubscription
from propnotify.subscriptions.service import (
    active_subscriptions_for,
    deactivate,
    deactivate_by_id,
    register,
    touch,
)

ENDPOINT = "https://updates.push.services.mozilla.com/wpush/v2/abc123"
KEYS = {"p256dh": "BKeyOne", "auth": "authOne"}


class TestRegister:
    def test_creates_subscription(self, db_session, test_user):
        sub, updated = register(db_session, test_user.id, ENDPOINT, KEYS, {"browser": "firefox"})
        db_session.commit()

        assert updated is False
        assert sub.is_active is True
        assert sub.p256dh == "BKeyOne"
        assert sub.browser == "firefox"

    def test_same_endpoint_twice_keeps_one_row(self, db_session, test_user):
        first, _ = register(db_session, test_user.id, ENDPOINT, KEYS)
        db_session.commit()
        second, updated = register(db_session, test_user.id, ENDPOINT, {"p256dh": "BKeyTwo", "auth": "authTwo"})
        db_session.commit()

        assert updated is True
        assert second.id == first.id
        assert db_session.query(DeviceSubscription).count() == 1
        assert second.p256dh == "BKeyTwo"

    def test_reregister_reactivates_and_moves_owner(self, db_session, test_user, make_user):
        other = make_user()
        sub, _ = register(db_session, test_user.id, ENDPOINT, KEYS)
        sub.is_active = False
        db_session.commit()

        sub, updated = register(db_session, other.id, ENDPOINT, KEYS)
        db_session.commit()

        assert updated is True
        assert sub.is_active is True
        assert sub.user_id == other.id

    def test_keeps_device_info_when_not_supplied(self, db_session, test_user):
        register(db_session, test_user.id, ENDPOINT, KEYS, {"device_name": "Laptop"})
        db_session.commit()
        sub, _ = register(db_session, test_user.id, ENDPOINT, KEYS)

        assert sub.device_name == "Laptop"


class TestDeactivate:
    def test_deactivates_owned_endpoint(self, db_session, test_user, make_subscription):
        sub = make_subscription(test_user, ENDPOINT)

        assert deactivate(db_session, test_user.id, ENDPOINT) is True
        db_session.commit()
        db_session.refresh(sub)
        assert sub.is_active is False

    def test_is_idempotent(self, db_session, test_user, make_subscription):
        make_subscription(test_user, ENDPOINT)

        assert deactivate(db_session, test_user.id, ENDPOINT) is True
        assert deactivate(db_session, test_user.id, ENDPOINT) is True

    def test_other_users_endpoint_untouched(self, db_session, test_user, make_user, make_subscription):
        sub = make_subscription(test_user, ENDPOINT)
        other = make_user()

        assert deactivate(db_session, other.id, ENDPOINT) is False
        db_session.refresh(sub)
        assert sub.is_active is True

    def test_unknown_endpoint(self, db_session, test_user):
        assert deactivate(db_session, test_user.id, "https://push.example.com/none") is False

    def test_by_id(self, db_session, test_user, make_subscription):
        sub = make_subscription(test_user)

        assert deactivate_by_id(db_session, sub.id) is True
        db_session.refresh(sub)
        assert sub.is_active is False


class TestActiveSubscriptions:
    def test_only_active_for_user(self, db_session, test_user, make_user, make_subscription):
        active = make_subscription(test_user)
        make_subscription(test_user, is_active=False)
        make_subscription(make_user())

        result = active_subscriptions_for(db_session, test_user.id)

        assert [s.id for s in result] == [active.id]

    def test_empty(self, db_session, test_user):
        assert active_subscriptions_for(db_session, test_user.id) == []


class TestTouch:
    def test_bumps_updated_at(self, db_session, test_user, make_subscription):
        sub = make_subscription(test_user)
        later = datetime(2030, 1, 1, 9, 30, tzinfo=UTC)

        touch(db_session, sub.id, later)
        db_session.commit()
        db_session.refresh(sub)

        assert sub.updated_at.replace(tzinfo=None) == later.replace(tzinfo=None)
