"""Generic Web Push delivery via pywebpush (RFC 8030 + VAPID)."""

import json
import logging

import requests
from pywebpush import WebPushException, webpush

from ..errors import DeliveryError
from .delivery import DeliveryResult, FailureKind, PushTarget

logger = logging.getLogger(__name__)

# Only 410 Gone is treated as permanent; 404 is left to the next attempt.
EXPIRED_STATUS = 410


class WebPushAdapter:
    """POSTs the encrypted payload to the subscription's own endpoint URL."""

    name = "webpush"

    def __init__(self, vapid_private_key: str = "", vapid_subject: str = "", ttl: int = 86400, timeout: float = 10.0):
        self._vapid_private_key = vapid_private_key
        self._vapid_subject = vapid_subject
        self._ttl = ttl
        self._timeout = timeout

    def send(self, target: PushTarget, payload: dict) -> DeliveryResult:
        try:
            status = self._push(target, payload)
        except DeliveryError as exc:
            kind = FailureKind.EXPIRED if exc.expired else FailureKind.OTHER
            return DeliveryResult.failed(kind, exc.status, exc.message)
        return DeliveryResult.ok(status)

    def _push(self, target: PushTarget, payload: dict) -> int | None:
        kwargs = {}
        if self._vapid_private_key:
            kwargs["vapid_private_key"] = self._vapid_private_key
            # webpush() adds aud/exp to the claims dict, so build a fresh one per call
            kwargs["vapid_claims"] = {"sub": self._vapid_subject}

        try:
            response = webpush(
                subscription_info={
                    "endpoint": target.endpoint,
                    "keys": {"p256dh": target.p256dh, "auth": target.auth},
                },
                data=json.dumps(payload),
                ttl=self._ttl,
                timeout=self._timeout,
                **kwargs,
            )
        except WebPushException as exc:
            status = exc.response.status_code if exc.response is not None else None
            raise DeliveryError(str(exc), expired=status == EXPIRED_STATUS, status=status) from exc
        except requests.RequestException as exc:
            raise DeliveryError(f"transport error: {exc}") from exc
        except (TypeError, ValueError) as exc:
            # Malformed p256dh/auth keys surface as decoding errors
            raise DeliveryError(f"invalid subscription keys: {exc}") from exc

        return getattr(response, "status_code", None)
