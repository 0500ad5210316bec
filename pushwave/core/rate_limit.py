"""Per-IP rate limiting (SlowAPI), proxy aware (X-Forwarded-For)."""
from fastapi import Request

from slowapi import Limiter


def _get_client_ip(request: Request) -> str:
    """Real client IP behind a reverse proxy."""
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "127.0.0.1"


def build_limiter(per_minute: int) -> Limiter:
    """One limiter per app; the default limit covers every route via SlowAPIMiddleware."""
    return Limiter(key_func=_get_client_ip, default_limits=[f"{per_minute}/minute"])
