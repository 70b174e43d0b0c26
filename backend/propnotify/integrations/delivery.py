"""Delivery adapter interface, result types and runtime push configuration.

Adapters implement :class:`DeliveryAdapter`; the dispatcher only ever sees
this protocol and :class:`DeliveryResult`, so new providers plug in through
``adapters.AdapterFactory`` without touching dispatch logic.
"""

import enum
from dataclasses import dataclass
from typing import Protocol

from ..config import Settings
from ..crypto import reveal

MAX_BATCH_SIZE = 100


class FailureKind(enum.StrEnum):
    EXPIRED = "expired"  # endpoint permanently gone, deactivate it
    OTHER = "other"  # transient or unknown, leave state alone


@dataclass(frozen=True)
class DeliveryResult:
    success: bool
    failure: FailureKind | None = None
    status_code: int | None = None
    detail: str = ""

    @property
    def expired(self) -> bool:
        return self.failure is FailureKind.EXPIRED

    @classmethod
    def ok(cls, status_code: int | None = None) -> "DeliveryResult":
        return cls(True, status_code=status_code)

    @classmethod
    def failed(cls, failure: FailureKind, status_code: int | None = None, detail: str = "") -> "DeliveryResult":
        return cls(False, failure, status_code, detail)


@dataclass(frozen=True)
class PushTarget:
    """Immutable snapshot of a subscription, safe to hand to worker threads."""

    subscription_id: object
    endpoint: str
    p256dh: str = ""
    auth: str = ""

    @classmethod
    def from_subscription(cls, sub) -> "PushTarget":
        return cls(sub.id, sub.endpoint, sub.p256dh or "", sub.auth or "")


class DeliveryAdapter(Protocol):
    """Protocol-specific sender for one device endpoint."""

    name: str

    def send(self, target: PushTarget, payload: dict) -> DeliveryResult: ...


@dataclass(frozen=True)
class PushConfig:
    """Runtime delivery settings passed explicitly to the dispatcher and adapters."""

    vapid_private_key: str = ""
    vapid_subject: str = ""
    fcm_server_key: str = ""
    fcm_send_url: str = "https://fcm.googleapis.com/fcm/send"
    ttl_seconds: int = 86400
    timeout_seconds: float = 10.0
    batch_size: int = 10
    quiet_hours_utc_offset_minutes: int = 0
    default_icon: str = "/icon-192.png"

    def __post_init__(self):
        if not 1 <= self.batch_size <= MAX_BATCH_SIZE:
            raise ValueError(f"batch_size must be between 1 and {MAX_BATCH_SIZE}, got {self.batch_size}")

    @classmethod
    def from_settings(cls, s: Settings) -> "PushConfig":
        return cls(
            vapid_private_key=reveal(s.vapid_private_key),
            vapid_subject=s.vapid_subject,
            fcm_server_key=reveal(s.fcm_server_key),
            fcm_send_url=s.fcm_send_url,
            ttl_seconds=s.push_ttl_seconds,
            timeout_seconds=s.push_timeout_seconds,
            batch_size=s.bulk_batch_size,
            quiet_hours_utc_offset_minutes=s.quiet_hours_utc_offset_minutes,
            default_icon=s.default_icon,
        )
