from .dispatch import BroadcastEngine, BroadcastResult, clamp_count, clamp_interval
from .registry import InsertResult, SubscriptionRegistry
from .webpush import PushSender, WebPushSender

__all__ = [
    "BroadcastEngine",
    "BroadcastResult",
    "InsertResult",
    "PushSender",
    "SubscriptionRegistry",
    "WebPushSender",
    "clamp_count",
    "clamp_interval",
]
