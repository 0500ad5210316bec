"""Web Push delivery through pywebpush (VAPID signing, aes128gcm encryption)."""
import asyncio
import logging
from typing import Protocol

from pywebpush import WebPushException, webpush

from pushwave.core.credentials import Credentials
from pushwave.models import Subscription

log = logging.getLogger("pushwave.webpush")


class PushSender(Protocol):
    async def send(self, subscription: Subscription, payload: str) -> None:
        """Deliver one payload; raise on any failure."""
        ...


class WebPushSender:
    """Signs with the process-wide VAPID credentials; one blocking request per call, run in a worker thread."""

    def __init__(self, credentials: Credentials, ttl: int = 2419200, timeout: float = 10.0):
        self.credentials = credentials
        self.ttl = ttl
        self.timeout = timeout

    def _send_sync(self, subscription: Subscription, payload: str) -> None:
        try:
            webpush(
                subscription_info=subscription.to_subscription_info(),
                data=payload,
                vapid_private_key=self.credentials.private_key,
                # pywebpush adds aud/exp to the claims dict, so never share it
                vapid_claims={"sub": self.credentials.contact_address},
                ttl=self.ttl,
                timeout=self.timeout,
            )
        except WebPushException as e:
            status = getattr(e.response, "status_code", None)
            log.debug("Push service rejected endpoint=%s status=%s", subscription.endpoint, status)
            raise

    async def send(self, subscription: Subscription, payload: str) -> None:
        await asyncio.to_thread(self._send_sync, subscription, payload)
