from datetime import datetime
from typing import Literal

from pydantic import Field

from signage.schemas.common import APIModel, UpdateModel

Orientation = Literal["Landscape", "Portrait"]
PlayerStatus = Literal["Online", "Offline", "Error"]


class PlayerOut(APIModel):
    id: int
    site_id: int
    customer_id: int
    name: str
    player_code: str
    mac_address: str | None = None
    serial_number: str | None = None
    location: str | None = None
    screen_resolution: str | None = None
    orientation: str
    status: str
    last_heartbeat: datetime | None = None
    ip_address: str | None = None
    player_version: str | None = None
    os_version: str | None = None
    is_active: bool
    activated_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PlayerCreate(APIModel):
    site_id: int = Field(..., gt=0)
    name: str = Field(..., min_length=1, max_length=255)
    player_code: str = Field(..., min_length=1, max_length=50, pattern=r"^[A-Za-z0-9_-]+$")
    mac_address: str | None = Field(None, max_length=20)
    serial_number: str | None = Field(None, max_length=100)
    location: str | None = Field(None, max_length=200)
    screen_resolution: str | None = Field(None, max_length=20)
    orientation: Orientation = "Landscape"


class PlayerUpdate(UpdateModel):
    not_nullable = ("site_id", "name", "player_code", "orientation", "is_active")

    site_id: int | None = Field(None, gt=0)
    name: str | None = Field(None, min_length=1, max_length=255)
    player_code: str | None = Field(None, min_length=1, max_length=50, pattern=r"^[A-Za-z0-9_-]+$")
    mac_address: str | None = Field(None, max_length=20)
    serial_number: str | None = Field(None, max_length=100)
    location: str | None = Field(None, max_length=200)
    screen_resolution: str | None = Field(None, max_length=20)
    orientation: Orientation | None = None
    is_active: bool | None = None


class ActivationCodeOut(APIModel):
    player_id: int
    activation_code: str
    expires_at: datetime
