"""Adapter selection by endpoint shape."""

import logging

from .delivery import DeliveryAdapter, PushConfig, PushTarget
from .fcm import FcmAdapter, is_fcm_endpoint
from .webpush import WebPushAdapter

logger = logging.getLogger(__name__)


class AdapterFactory:
    """Builds each adapter once and picks one per target.

    FCM-hosted endpoints go through :class:`FcmAdapter` only when a server key
    is configured; otherwise they fall back to generic Web Push.
    """

    def __init__(self, config: PushConfig):
        self.web_push = WebPushAdapter(
            vapid_private_key=config.vapid_private_key,
            vapid_subject=config.vapid_subject,
            ttl=config.ttl_seconds,
            timeout=config.timeout_seconds,
        )
        self.fcm = (
            FcmAdapter(
                config.fcm_server_key,
                send_url=config.fcm_send_url,
                ttl=config.ttl_seconds,
                timeout=config.timeout_seconds,
            )
            if config.fcm_server_key
            else None
        )

    def for_target(self, target: PushTarget) -> DeliveryAdapter:
        if is_fcm_endpoint(target.endpoint):
            if self.fcm is not None:
                return self.fcm
            logger.debug("No FCM server key configured, using Web Push for %s", target.subscription_id)
        return self.web_push
