"""Pytest fixtures: settings on a temp store, recording push sender, test client."""
import json
import time

import pytest
from fastapi.testclient import TestClient

from pushwave.core.config import Settings
from pushwave.main import create_app

PUBLIC_KEY = "BNcRdreALRFXTkOOUHK1EtK2wtaz5Ry4YfYCA_0QTpQtUbVlUls0VJXg7A8u-Ts1XbjhazAkj7I99e8QcYP7DkM"
PRIVATE_KEY = "tUxbf-Mz_CH3oMDfBQU9h9EsfHrOyQMRJ8X9RTrsxGQ"


def make_settings(tmp_path, **overrides) -> Settings:
    """Every key field is explicit so developer env vars cannot leak in."""
    values = {
        "vapid_public_key": PUBLIC_KEY,
        "vapid_private_key": PRIVATE_KEY,
        "vapid_keys": "",
        "vapid_contact_email": "mailto:test@example.com",
        "max_send_count": 20,
        "default_interval_ms": 100,
        "subscriptions_path": tmp_path / "subscriptions.json",
        "rate_limit_per_minute": 1000,
        "log_vapid_keys": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def subscription_payload(n: int = 1, **overrides) -> dict:
    data = {
        "endpoint": f"https://push.example.com/send/{n}",
        "expirationTime": None,
        "keys": {"p256dh": f"p256dh-{n}", "auth": f"auth-{n}"},
    }
    data.update(overrides)
    return data


class RecordingSender:
    """Records (endpoint, payload, monotonic time) per delivery; fails for endpoints in `failing`."""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.calls = []

    async def send(self, subscription, payload: str) -> None:
        self.calls.append((subscription.endpoint, json.loads(payload), time.monotonic()))
        if subscription.endpoint in self.failing:
            raise ConnectionError("push service unreachable")


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def app(settings, sender):
    return create_app(settings, sender=sender)


@pytest.fixture(scope="function")
def client(app):
    """TestClient with lifespan; one fresh app and store per test."""
    with TestClient(app) as c:
        yield c
