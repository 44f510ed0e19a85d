from datetime import datetime
from typing import Literal

from pydantic import Field

from signage.schemas.common import APIModel, UpdateModel


class CustomerOut(APIModel):
    id: int
    name: str
    subdomain: str
    is_active: bool
    subscription_tier: str
    max_sites: int
    max_players: int
    max_storage_gb: int
    contact_email: str
    contact_phone: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CustomerUpdate(UpdateModel):
    not_nullable = ("name", "contact_email", "subscription_tier")

    name: str | None = Field(None, min_length=1, max_length=255)
    contact_email: str | None = Field(None, max_length=255)
    contact_phone: str | None = Field(None, max_length=50)
    subscription_tier: Literal["Free", "Pro", "Enterprise"] | None = None


class SiteOut(APIModel):
    id: int
    customer_id: int
    name: str
    site_code: str
    address: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    postal_code: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    time_zone: str
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SiteCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=100)
    site_code: str = Field(..., min_length=1, max_length=50)
    address: str | None = Field(None, max_length=200)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    country: str | None = Field(None, max_length=100)
    postal_code: str | None = Field(None, max_length=20)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    time_zone: str = Field("UTC", max_length=50)


class SiteUpdate(UpdateModel):
    not_nullable = ("name", "site_code", "time_zone", "is_active")

    name: str | None = Field(None, min_length=1, max_length=100)
    site_code: str | None = Field(None, min_length=1, max_length=50)
    address: str | None = Field(None, max_length=200)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    country: str | None = Field(None, max_length=100)
    postal_code: str | None = Field(None, max_length=20)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    time_zone: str | None = Field(None, max_length=50)
    is_active: bool | None = None
