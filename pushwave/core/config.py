from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

# .env lives at the project root: pushwave/core/config.py -> pushwave/core -> pushwave -> root
_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _ROOT / ".env"

DEFAULT_SUBSCRIPTIONS_PATH = _ROOT / "subscriptions.json"
DEFAULT_CONTACT = "mailto:admin@example.com"


class Settings(BaseSettings):
    # VAPID keys: either the explicit pair or VAPID_KEYS (JSON or "public:private")
    vapid_public_key: str = ""
    vapid_private_key: str = ""
    vapid_keys: str = ""
    vapid_contact_email: str = DEFAULT_CONTACT
    # Broadcast bounds
    max_send_count: int = 20
    default_interval_ms: int = 1000
    # Registry store (JSON array); a missing file is an empty registry
    subscriptions_path: Path = DEFAULT_SUBSCRIPTIONS_PATH
    host: str = "0.0.0.0"
    port: int = 3000
    # CORS: comma separated origin list
    cors_origins: str = "*"
    # Requests per minute per client IP, across all routes
    rate_limit_per_minute: int = 60
    log_level: str = "INFO"
    # Startup log prints both VAPID keys. Secret exposure: turn off in shared log sinks.
    log_vapid_keys: bool = True
    # Push service hints (pywebpush)
    push_ttl_seconds: int = 2419200
    push_timeout_seconds: float = 10.0

    model_config = {
        "env_file": _ENV_FILE if _ENV_FILE.is_file() else ".env",
        "extra": "ignore",
    }

    @field_validator(
        "vapid_public_key",
        "vapid_private_key",
        "vapid_keys",
        "vapid_contact_email",
        mode="before",
    )
    @classmethod
    def strip_value(cls, v: str | None) -> str:
        """Trailing newlines from copy/paste break key decoding."""
        return (v or "").strip()

    @field_validator("max_send_count")
    @classmethod
    def at_least_one(cls, v: int) -> int:
        return max(1, v)

    @property
    def contact_address(self) -> str:
        """VAPID `sub` claim; must be a mailto: or https: URI."""
        contact = self.vapid_contact_email or DEFAULT_CONTACT
        if contact.startswith(("mailto:", "https:")):
            return contact
        return f"mailto:{contact}"

    def cors_origins_list(self) -> list[str]:
        if not self.cors_origins or self.cors_origins.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
