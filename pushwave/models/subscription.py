"""Browser push subscriptions (Web Push API, PushSubscription.toJSON() shape)."""
from typing import Any

from pydantic import BaseModel, ConfigDict

from pushwave.core.errors import InvalidSubscriptionError


class SubscriptionKeys(BaseModel):
    model_config = ConfigDict(frozen=True)

    p256dh: str  # client public key (base64url)
    auth: str  # auth secret (base64url)


class Subscription(BaseModel):
    model_config = ConfigDict(frozen=True)

    endpoint: str
    keys: SubscriptionKeys

    @property
    def identity(self) -> tuple[str, str, str]:
        """Two subscriptions are the same iff endpoint, p256dh and auth are all identical."""
        return (self.endpoint, self.keys.p256dh, self.keys.auth)

    @property
    def identity_key(self) -> str:
        """Readable form of `identity` for logs; '|' inside a field makes it ambiguous, never compare on it."""
        return "|".join(self.identity)

    @classmethod
    def from_payload(cls, data: Any) -> "Subscription":
        """Build from a raw request body; extra browser fields (expirationTime) are dropped."""
        if not isinstance(data, dict):
            raise InvalidSubscriptionError("Invalid subscription payload")
        keys = data.get("keys")
        if not isinstance(keys, dict):
            keys = {}
        endpoint, p256dh, auth = data.get("endpoint"), keys.get("p256dh"), keys.get("auth")
        for value in (endpoint, p256dh, auth):
            if not isinstance(value, str) or not value:
                raise InvalidSubscriptionError("Invalid subscription payload")
        return cls(endpoint=endpoint, keys=SubscriptionKeys(p256dh=p256dh, auth=auth))

    def to_subscription_info(self) -> dict:
        """subscription_info dict as pywebpush expects it."""
        return {
            "endpoint": self.endpoint,
            "keys": {"p256dh": self.keys.p256dh, "auth": self.keys.auth},
        }
