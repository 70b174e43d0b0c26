"""Shared test fixtures."""

import threading
import time
import uuid
from datetime import UTC, datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from propnotify.audit.models import ActivityLog
from propnotify.auth.models import User
from propnotify.database.base import Base
from propnotify.integrations.delivery import DeliveryResult, PushConfig
from propnotify.notifications.models import NotificationHistory
from propnotify.notifications.service import NotificationDispatcher
from propnotify.preferences.models import NotificationPreference
from propnotify.subscriptions.models import DeviceSubscription

# Models must be imported so Base.metadata.create_all() sees all tables.
_ALL_MODELS = [User, DeviceSubscription, NotificationPreference, NotificationHistory, ActivityLog]

FIXED_NOW = datetime(2026, 10, 14, 12, 0, tzinfo=UTC)


@pytest.fixture
def db_session():
    """Create an in-memory SQLite database for testing.

    Note: SQLite doesn't support all PostgreSQL features (JSONB, UUID),
    but works for basic service logic testing.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestSession = sessionmaker(bind=engine)
    session = TestSession()
    try:
        yield session
    finally:
        session.close()


def _make_user(db_session, email: str) -> User:
    user = User(id=uuid.uuid4(), email=email)
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def test_user(db_session):
    """Create a test user."""
    return _make_user(db_session, "buyer@example.com")


@pytest.fixture
def make_user(db_session):
    """Factory for additional users."""
    counter = iter(range(10_000))

    def _factory() -> User:
        return _make_user(db_session, f"user{next(counter)}@example.com")

    return _factory


@pytest.fixture
def make_subscription(db_session):
    """Factory for device subscriptions."""
    counter = iter(range(10_000))

    def _factory(user, endpoint: str | None = None, is_active: bool = True) -> DeviceSubscription:
        sub = DeviceSubscription(
            user_id=user.id,
            endpoint=endpoint or f"https://updates.push.services.mozilla.com/wpush/v2/{next(counter)}",
            p256dh="BPublicKey",
            auth="authsecret",
            device_type="desktop",
            browser="firefox",
            is_active=is_active,
        )
        db_session.add(sub)
        db_session.commit()
        return sub

    return _factory


@pytest.fixture
def make_preferences(db_session):
    def _factory(user, **fields) -> NotificationPreference:
        prefs = NotificationPreference(user_id=user.id, **fields)
        db_session.add(prefs)
        db_session.commit()
        return prefs

    return _factory


class FakeAdapter:
    """Records every send; results are scripted per endpoint (default: success).

    Also tracks how many sends overlap (`peak_in_flight`) and, for each send in
    start order, how many sends had already finished (`finished_at_start`).
    """

    name = "fake"

    def __init__(self, delay: float = 0.0):
        self.results: dict[str, DeliveryResult] = {}
        self.calls: list[tuple] = []
        self.delay = delay
        self.in_flight = 0
        self.peak_in_flight = 0
        self.finished = 0
        self.finished_at_start: list[int] = []
        self._lock = threading.Lock()

    def send(self, target, payload):
        with self._lock:
            self.calls.append((target, payload))
            self.finished_at_start.append(self.finished)
            self.in_flight += 1
            self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            return self.results.get(target.endpoint, DeliveryResult.ok(201))
        finally:
            with self._lock:
                self.in_flight -= 1
                self.finished += 1


class FakeAdapterFactory:
    def __init__(self, adapter: FakeAdapter):
        self.adapter = adapter

    def for_target(self, target):
        return self.adapter


@pytest.fixture
def fake_adapter():
    return FakeAdapter()


@pytest.fixture
def push_config():
    return PushConfig(batch_size=10, default_icon="/icon-192.png")


@pytest.fixture
def dispatcher(db_session, push_config, fake_adapter):
    return NotificationDispatcher(
        db_session,
        push_config,
        adapters=FakeAdapterFactory(fake_adapter),
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def make_dispatcher(db_session, fake_adapter):
    """Dispatcher with a custom PushConfig, same fake adapter and fixed clock."""

    def _factory(**config_fields) -> NotificationDispatcher:
        return NotificationDispatcher(
            db_session,
            PushConfig(**config_fields),
            adapters=FakeAdapterFactory(fake_adapter),
            clock=lambda: FIXED_NOW,
        )

    return _factory


@pytest.fixture
def adapter_factory(fake_adapter):
    return FakeAdapterFactory(fake_adapter)
