from datetime import datetime

from pydantic import Field, field_validator

from signage.schemas.common import APIModel, UpdateModel

WEBHOOK_EVENTS = (
    "player.online",
    "player.offline",
    "content.uploaded",
    "schedule.updated",
    "playlist.updated",
)


def _check_events(value: list[str] | None) -> list[str] | None:
    if value is None:
        return None
    if not value:
        raise ValueError("At least one event must be specified")
    unknown = [event for event in value if event not in WEBHOOK_EVENTS]
    if unknown:
        raise ValueError(f"Unknown webhook events: {', '.join(unknown)}")
    return list(dict.fromkeys(value))


def _check_url(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    if not cleaned.startswith(("http://", "https://")):
        raise ValueError("Webhook URL must use http or https")
    return cleaned


class WebhookOut(APIModel):
    id: int
    customer_id: int
    name: str
    url: str
    events: list[str]
    is_active: bool
    last_triggered_at: datetime | None = None
    failure_count: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("events", mode="before")
    @classmethod
    def _split_events(cls, value):
        if isinstance(value, str):
            return [event for event in value.split(",") if event]
        return value


class WebhookCreatedOut(WebhookOut):
    secret: str


class WebhookCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=255)
    url: str = Field(..., max_length=1024)
    events: list[str]
    secret: str | None = Field(None, min_length=16, max_length=128)

    _events = field_validator("events")(_check_events)
    _url = field_validator("url")(_check_url)


class WebhookUpdate(UpdateModel):
    not_nullable = ("name", "url", "events", "is_active")

    name: str | None = Field(None, min_length=1, max_length=255)
    url: str | None = Field(None, max_length=1024)
    events: list[str] | None = None
    is_active: bool | None = None

    _events = field_validator("events")(_check_events)
    _url = field_validator("url")(_check_url)


class WebhookDeliveryOut(APIModel):
    id: int
    webhook_id: int
    event: str
    payload: str
    status_code: int | None = None
    response: str | None = None
    success: bool
    delivered_at: datetime | None = None
    created_at: datetime | None = None


class WebhookTestResult(APIModel):
    success: bool
    status_code: int | None = None
    response_time_ms: int
    error: str | None = None
