"""Firebase Cloud Messaging delivery over the legacy HTTP send API.

Used for endpoints hosted on FCM when a server key is configured; the token is
the last path segment of the endpoint URL.
"""

import logging
from urllib.parse import urlparse

import httpx

from ..errors import DeliveryError
from .delivery import DeliveryResult, FailureKind, PushTarget

logger = logging.getLogger(__name__)

FCM_HOSTS = frozenset({"fcm.googleapis.com", "android.googleapis.com"})
FCM_PATH_PREFIXES = ("/fcm/send/", "/gcm/send/")

# Per-message errors meaning the token will never work again
EXPIRED_TOKEN_ERRORS = frozenset({"NotRegistered", "InvalidRegistration"})


def is_fcm_endpoint(endpoint: str) -> bool:
    parsed = urlparse(endpoint)
    return parsed.hostname in FCM_HOSTS and parsed.path.startswith(FCM_PATH_PREFIXES)


def extract_token(endpoint: str) -> str:
    """Return the registration token embedded in an FCM endpoint URL."""
    return urlparse(endpoint).path.rstrip("/").rsplit("/", 1)[-1]


def build_fcm_message(token: str, payload: dict, ttl: int) -> dict:
    """Map the generic push payload onto FCM's notification + data shape."""
    data = payload.get("data") or {}
    notification = {
        "title": payload.get("title", ""),
        "body": payload.get("body", ""),
    }
    if payload.get("icon"):
        notification["icon"] = payload["icon"]
    if payload.get("image"):
        notification["image"] = payload["image"]
    if data.get("url"):
        notification["click_action"] = data["url"]

    return {
        "to": token,
        "notification": notification,
        # FCM data values must be strings
        "data": {str(k): "" if v is None else str(v) for k, v in data.items()},
        "time_to_live": ttl,
    }


class FcmAdapter:
    name = "fcm"

    def __init__(
        self,
        server_key: str,
        send_url: str = "https://fcm.googleapis.com/fcm/send",
        ttl: int = 86400,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ):
        self._server_key = server_key
        self._send_url = send_url
        self._ttl = ttl
        self._client = client or httpx.Client(timeout=timeout)

    def send(self, target: PushTarget, payload: dict) -> DeliveryResult:
        try:
            status = self._push(target, payload)
        except DeliveryError as exc:
            kind = FailureKind.EXPIRED if exc.expired else FailureKind.OTHER
            return DeliveryResult.failed(kind, exc.status, exc.message)
        return DeliveryResult.ok(status)

    def _push(self, target: PushTarget, payload: dict) -> int:
        token = extract_token(target.endpoint)
        try:
            response = self._client.post(
                self._send_url,
                json=build_fcm_message(token, payload, self._ttl),
                headers={
                    "Authorization": f"key={self._server_key}",
                    "Content-Type": "application/json",
                },
            )
        except httpx.HTTPError as exc:
            raise DeliveryError(f"transport error: {exc}") from exc

        if not response.is_success:
            raise DeliveryError(
                f"FCM responded {response.status_code}: {response.text[:200]}",
                status=response.status_code,
            )

        try:
            body = response.json()
        except ValueError:
            body = {}

        if body.get("failure"):
            results = body.get("results") or [{}]
            error = results[0].get("error", "unknown")
            raise DeliveryError(
                f"FCM delivery failed: {error}",
                expired=error in EXPIRED_TOKEN_ERRORS,
                status=response.status_code,
            )
        return response.status_code
