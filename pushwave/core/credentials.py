"""VAPID key resolution: explicit pair first, then the bundled VAPID_KEYS value."""
import json
import logging

from pydantic import BaseModel, ConfigDict

from .config import Settings
from .errors import CredentialsError

log = logging.getLogger("pushwave.credentials")

SOURCE_PAIR = "VAPID_PUBLIC_KEY + VAPID_PRIVATE_KEY"
SOURCE_JSON = "VAPID_KEYS (JSON)"
SOURCE_COLON = "VAPID_KEYS (public:private)"

MISSING_KEYS_HELP = (
    "Missing VAPID keys in environment.",
    "Use either:",
    "1) VAPID_PUBLIC_KEY + VAPID_PRIVATE_KEY",
    '2) VAPID_KEYS as JSON: {"publicKey":"...","privateKey":"..."}',
    "3) VAPID_KEYS as public:private",
    "Generate keys with: python scripts/generate_vapid_keys.py",
)


class Credentials(BaseModel):
    """Resolved signing identity, fixed for the process lifetime."""

    model_config = ConfigDict(frozen=True)

    public_key: str
    private_key: str
    contact_address: str
    source: str


def _clean(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def _from_json(bundled: str) -> tuple[str, str] | None:
    try:
        parsed = json.loads(bundled)
    except ValueError:
        return None
    if not isinstance(parsed, dict):
        return None
    public_key = _clean(parsed.get("publicKey"))
    private_key = _clean(parsed.get("privateKey"))
    if public_key and private_key:
        return public_key, private_key
    return None


def _from_colon(bundled: str) -> tuple[str, str] | None:
    public_key, _, private_key = bundled.partition(":")
    public_key, private_key = public_key.strip(), private_key.strip()
    if public_key and private_key:
        return public_key, private_key
    return None


def resolve_credentials(settings: Settings) -> Credentials | None:
    """
    First fully populated key pair in precedence order, or None:
    explicit pair, VAPID_KEYS as JSON, VAPID_KEYS as "public:private".
    """
    contact = settings.contact_address
    public_key = _clean(settings.vapid_public_key)
    private_key = _clean(settings.vapid_private_key)
    if public_key and private_key:
        return Credentials(
            public_key=public_key,
            private_key=private_key,
            contact_address=contact,
            source=SOURCE_PAIR,
        )

    bundled = _clean(settings.vapid_keys)
    if not bundled:
        return None

    for source, parse in ((SOURCE_JSON, _from_json), (SOURCE_COLON, _from_colon)):
        pair = parse(bundled)
        if pair:
            return Credentials(
                public_key=pair[0],
                private_key=pair[1],
                contact_address=contact,
                source=source,
            )
    return None


def load_credentials(settings: Settings) -> Credentials:
    """Resolve credentials or raise CredentialsError; logs the result at startup."""
    credentials = resolve_credentials(settings)
    if credentials is None:
        for line in MISSING_KEYS_HELP:
            log.error(line)
        raise CredentialsError(MISSING_KEYS_HELP[0])

    log.info("VAPID key source: %s", credentials.source)
    if settings.log_vapid_keys:
        log.info("VAPID_PUBLIC_KEY=%s", credentials.public_key)
        log.info("VAPID_PRIVATE_KEY=%s", credentials.private_key)
    return credentials
