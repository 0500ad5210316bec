from .push import ConfigResponse, HealthResponse, SendResponse, SubscribeResponse

__all__ = [
    "ConfigResponse",
    "HealthResponse",
    "SendResponse",
    "SubscribeResponse",
]
