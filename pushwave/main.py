import logging
import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root wherever uvicorn is started
_PROJ_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJ_ROOT / ".env")

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from pushwave.api.deps import get_registry
from pushwave.api.push import router as push_router
from pushwave.core.config import Settings
from pushwave.core.credentials import load_credentials
from pushwave.core.errors import (
    InvalidSubscriptionError,
    NoSubscribersError,
    RegistryStorageError,
)
from pushwave.core.rate_limit import build_limiter
from pushwave.logging import setup_logging
from pushwave.schemas import HealthResponse
from pushwave.services.dispatch import BroadcastEngine
from pushwave.services.registry import SubscriptionRegistry
from pushwave.services.webpush import PushSender, WebPushSender

log = logging.getLogger("pushwave")


def _error_response(request: Request, status_code: int, detail: str) -> JSONResponse:
    rid = getattr(request.state, "request_id", None)
    body = {"error": detail, "status_code": status_code}
    if rid:
        body["request_id"] = rid
    return JSONResponse(status_code=status_code, content=body)


def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    log.warning("Rate limit exceeded: path=%s limit=%s", request.url.path, exc.detail)
    return _error_response(request, 429, "Too many requests")


def _invalid_subscription_handler(request: Request, exc: InvalidSubscriptionError) -> JSONResponse:
    return _error_response(request, 400, "Invalid subscription payload")


def _no_subscribers_handler(request: Request, exc: NoSubscribersError) -> JSONResponse:
    return _error_response(request, 400, "No subscriptions saved yet.")


def _storage_error_handler(request: Request, exc: RegistryStorageError) -> JSONResponse:
    log.error("Subscription store error: path=%s %s", request.url.path, exc)
    return _error_response(request, 500, "Subscription store unavailable.")


def _http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _error_response(request, exc.status_code, exc.detail if isinstance(exc.detail, str) else str(exc.detail))


def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("Unhandled exception: path=%s %s", request.url.path, exc, exc_info=exc)
    return _error_response(request, 500, "Unexpected server error.")


def create_app(settings: Settings | None = None, sender: PushSender | None = None) -> FastAPI:
    """
    Build the service. Credentials are resolved here, so a missing VAPID key
    pair raises CredentialsError and the process never starts serving.
    `sender` replaces the pywebpush sender (tests).
    """
    settings = settings or Settings()
    setup_logging(level=settings.log_level)
    credentials = load_credentials(settings)
    registry = SubscriptionRegistry(settings.subscriptions_path)
    if sender is None:
        sender = WebPushSender(
            credentials,
            ttl=settings.push_ttl_seconds,
            timeout=settings.push_timeout_seconds,
        )
    engine = BroadcastEngine(
        registry,
        sender,
        max_send_count=settings.max_send_count,
        default_interval_ms=settings.default_interval_ms,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info(
            "Serving: subscriptions_path=%s max_send_count=%d default_interval_ms=%d",
            settings.subscriptions_path,
            settings.max_send_count,
            settings.default_interval_ms,
        )
        yield

    app = FastAPI(
        title="Pushwave",
        description="Web Push broadcast service",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.credentials = credentials
    app.state.registry = registry
    app.state.engine = engine
    app.state.limiter = build_limiter(settings.rate_limit_per_minute)

    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)
    app.add_exception_handler(InvalidSubscriptionError, _invalid_subscription_handler)
    app.add_exception_handler(NoSubscribersError, _no_subscribers_handler)
    app.add_exception_handler(RegistryStorageError, _storage_error_handler)
    app.add_exception_handler(HTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)

    app.add_middleware(SlowAPIMiddleware)

    @app.middleware("http")
    async def request_id_and_latency(request: Request, call_next):
        request.state.request_id = str(uuid.uuid4())
        start = time.perf_counter()
        response = await call_next(request)
        latency_ms = (time.perf_counter() - start) * 1000
        response.headers["X-Request-ID"] = request.state.request_id
        log.info(
            "request_id=%s method=%s path=%s status=%s latency_ms=%.2f",
            request.state.request_id,
            request.method,
            request.url.path,
            response.status_code,
            latency_ms,
        )
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(push_router)

    @app.get("/health", response_model=HealthResponse)
    def health(registry: SubscriptionRegistry = Depends(get_registry)):
        try:
            return HealthResponse(subscriptions=registry.count())
        except RegistryStorageError as e:
            log.warning("Health check: subscription store unreadable: %s", e)
            return HealthResponse(store="error")

    return app
