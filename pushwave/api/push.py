from typing import Any

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from pushwave.api.deps import get_credentials, get_engine, get_registry, get_settings
from pushwave.core.config import Settings
from pushwave.core.credentials import Credentials
from pushwave.models import Subscription
from pushwave.schemas import ConfigResponse, SendResponse, SubscribeResponse
from pushwave.services.dispatch import BroadcastEngine
from pushwave.services.registry import SubscriptionRegistry

router = APIRouter(prefix="/api", tags=["push"])

DEFAULT_TITLE = "Background Notification"
DEFAULT_MESSAGE = "This is a reliable push message"


async def _json_body(request: Request) -> Any:
    """Parsed JSON body, or None when the body is empty or not JSON."""
    try:
        return await request.json()
    except ValueError:
        return None


@router.get("/config", response_model=ConfigResponse)
def get_config(
    settings: Settings = Depends(get_settings),
    credentials: Credentials = Depends(get_credentials),
):
    return ConfigResponse(
        public_vapid_key=credentials.public_key,
        default_interval_ms=settings.default_interval_ms,
        max_send_count=settings.max_send_count,
    )


@router.post("/subscribe", response_model=SubscribeResponse, status_code=201)
async def subscribe(
    request: Request,
    registry: SubscriptionRegistry = Depends(get_registry),
):
    """Store a browser PushSubscription; re-registering the same one is a no-op."""
    subscription = Subscription.from_payload(await _json_body(request))
    result = await run_in_threadpool(registry.insert, subscription)
    return SubscribeResponse(subscription_count=result.total_count)


@router.post("/send", response_model=SendResponse)
async def send(
    request: Request,
    engine: BroadcastEngine = Depends(get_engine),
):
    """
    Broadcast to every subscription in paced waves.
    Body: {title?, message?, count?, intervalMs?}; count and intervalMs are clamped, never rejected.
    The response is sent after the last wave; a client disconnect stops the remaining waves.
    """
    body = await _json_body(request)
    if not isinstance(body, dict):
        body = {}
    title = body.get("title")
    message = body.get("message")
    result = await engine.broadcast(
        title=DEFAULT_TITLE if title is None else title,
        body=DEFAULT_MESSAGE if message is None else message,
        requested_count=body.get("count", 1),
        requested_interval_ms=body.get("intervalMs"),
        is_cancelled=request.is_disconnected,
    )
    return SendResponse(sent=result.sent, count=result.count, interval_ms=result.interval_ms)
