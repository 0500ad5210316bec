"""Dependencies: objects built once in create_app and kept on app.state."""
from fastapi import Request

from pushwave.core.config import Settings
from pushwave.core.credentials import Credentials
from pushwave.services.dispatch import BroadcastEngine
from pushwave.services.registry import SubscriptionRegistry


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_credentials(request: Request) -> Credentials:
    return request.app.state.credentials


def get_registry(request: Request) -> SubscriptionRegistry:
    return request.app.state.registry


def get_engine(request: Request) -> BroadcastEngine:
    return request.app.state.engine
