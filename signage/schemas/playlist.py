from datetime import datetime
from typing import Literal

from pydantic import Field

from signage.schemas.common import APIModel, UpdateModel

TransitionType = Literal["Fade", "Slide", "None"]


class PlaylistItemOut(APIModel):
    id: int
    playlist_id: int
    content_id: int
    display_order: int
    duration: int | None = None
    transition_type: str | None = None
    transition_duration: int | None = None
    created_at: datetime | None = None


class PlaylistOut(APIModel):
    id: int
    customer_id: int
    name: str
    description: str | None = None
    is_active: bool
    created_by: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PlaylistWithItemsOut(PlaylistOut):
    items: list[PlaylistItemOut] = []


class PlaylistCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)


class PlaylistUpdate(UpdateModel):
    not_nullable = ("name", "is_active")

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    is_active: bool | None = None


class PlaylistItemCreate(APIModel):
    content_id: int = Field(..., gt=0)
    display_order: int | None = Field(None, ge=0)
    duration: int | None = Field(None, gt=0)
    transition_type: TransitionType | None = None
    transition_duration: int | None = Field(None, ge=0)


class PlaylistItemUpdate(UpdateModel):
    not_nullable = ("display_order",)

    display_order: int | None = Field(None, ge=0)
    duration: int | None = Field(None, gt=0)
    transition_type: TransitionType | None = None
    transition_duration: int | None = Field(None, ge=0)


class PlaylistReorderIn(APIModel):
    item_ids: list[int] = Field(..., min_length=1)
