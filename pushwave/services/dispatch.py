"""
Broadcast dispatch: N paced waves, each fanned out concurrently to every
subscription of one registry snapshot.

Success means every wave was attempted. A failed delivery is logged and
counted, never raised: stale endpoints are expected for push subscriptions.
"""
import asyncio
import logging
import math
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, Field

from pushwave.core.errors import NoSubscribersError
from pushwave.models import Subscription
from pushwave.services.registry import SubscriptionRegistry
from pushwave.services.webpush import PushSender

log = logging.getLogger("pushwave.dispatch")

MIN_INTERVAL_MS = 100


class NotificationPayload(BaseModel):
    """JSON body the service worker receives for one wave."""

    title: Any
    body: Any
    nonce: str
    sent_at: str = Field(serialization_alias="sentAt")
    index: int
    total: int

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


@dataclass(frozen=True)
class BroadcastResult:
    sent: int  # waves executed
    count: int  # effective wave count
    interval_ms: int


def _as_number(value: Any) -> float | None:
    """Lenient numeric coercion for request fields; None when unusable."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return None if math.isnan(number) else number


def clamp_count(requested: Any, maximum: int) -> int:
    """Missing, non-numeric or zero counts become 1; then clamp to [1, maximum]. +inf clamps to maximum."""
    number = _as_number(requested) or 1
    return int(max(1, min(number, maximum)))


def clamp_interval(requested: Any, default_ms: int) -> int:
    """Missing, non-numeric, zero or +inf intervals use the default; never below MIN_INTERVAL_MS."""
    number = _as_number(requested) or default_ms
    if math.isinf(number) and number > 0:
        number = default_ms
    return int(max(MIN_INTERVAL_MS, number))


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_payload(title: Any, body: Any, index: int, total: int) -> NotificationPayload:
    return NotificationPayload(
        title=title,
        body=body,
        nonce=str(uuid.uuid4()),
        sent_at=_utc_timestamp(),
        index=index,
        total=total,
    )


class BroadcastEngine:
    def __init__(
        self,
        registry: SubscriptionRegistry,
        sender: PushSender,
        max_send_count: int = 20,
        default_interval_ms: int = 1000,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.registry = registry
        self.sender = sender
        self.max_send_count = max_send_count
        self.default_interval_ms = default_interval_ms
        self._sleep = sleep

    async def broadcast(
        self,
        title: Any,
        body: Any,
        requested_count: Any = None,
        requested_interval_ms: Any = None,
        is_cancelled: Callable[[], Awaitable[bool]] | None = None,
    ) -> BroadcastResult:
        """
        Run the clamped number of waves against one registry snapshot.

        Waves are sequential; each waits for all of its deliveries to settle
        before the pause. `is_cancelled` is polled once a wave has settled and
        again after the pause; a true result abandons the remaining waves.
        Raises NoSubscribersError before any delivery when the registry is empty.
        """
        count = clamp_count(requested_count, self.max_send_count)
        interval_ms = clamp_interval(requested_interval_ms, self.default_interval_ms)

        subscriptions = await asyncio.to_thread(self.registry.enumerate)
        if not subscriptions:
            raise NoSubscribersError("No subscriptions saved yet.")

        log.info(
            "Broadcast start: waves=%d interval_ms=%d subscriptions=%d",
            count,
            interval_ms,
            len(subscriptions),
        )
        sent = 0
        for index in range(1, count + 1):
            payload = build_payload(title, body, index, count)
            await self._run_wave(subscriptions, payload)
            sent = index
            if index == count:
                break
            # checked before and after the pause
            if await self._cancelled(is_cancelled, sent, count):
                break
            await self._sleep(interval_ms / 1000)
            if await self._cancelled(is_cancelled, sent, count):
                break

        return BroadcastResult(sent=sent, count=count, interval_ms=interval_ms)

    async def _cancelled(self, is_cancelled: Callable[[], Awaitable[bool]] | None, sent: int, count: int) -> bool:
        if is_cancelled is None or not await is_cancelled():
            return False
        log.warning("Broadcast cancelled after wave %d/%d", sent, count)
        return True

    async def _run_wave(self, subscriptions: list[Subscription], payload: NotificationPayload) -> int:
        """Deliver to every subscription concurrently; returns the failure count."""
        data = payload.to_json()
        results = await asyncio.gather(
            *(self.sender.send(subscription, data) for subscription in subscriptions),
            return_exceptions=True,
        )
        failed = 0
        for subscription, result in zip(subscriptions, results):
            if isinstance(result, Exception):
                failed += 1
                log.warning(
                    "Delivery failed: wave=%d/%d endpoint=%s error=%s",
                    payload.index,
                    payload.total,
                    subscription.endpoint,
                    result,
                )
            elif isinstance(result, BaseException):
                raise result
        log.info(
            "Wave %d/%d settled: delivered=%d failed=%d nonce=%s",
            payload.index,
            payload.total,
            len(subscriptions) - failed,
            failed,
            payload.nonce,
        )
        return failed
