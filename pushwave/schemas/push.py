from pydantic import BaseModel, ConfigDict, Field


class ConfigResponse(BaseModel):
    """Public settings the browser needs to subscribe."""
    model_config = ConfigDict(populate_by_name=True)

    public_vapid_key: str = Field(alias="publicVapidKey")
    default_interval_ms: int = Field(alias="defaultIntervalMs")
    max_send_count: int = Field(alias="maxSendCount")


class SubscribeResponse(BaseModel):
    """Same shape whether the subscription was new or already stored."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    subscription_count: int = Field(alias="subscriptionCount")


class SendResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    sent: int
    count: int
    interval_ms: int = Field(alias="intervalMs")


class HealthResponse(BaseModel):
    status: str = "ok"
    store: str = "ok"
    subscriptions: int | None = None
