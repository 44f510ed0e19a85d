from datetime import datetime
from typing import Any, Literal

from pydantic import Field, ValidationError, model_validator

from signage.schemas.common import APIModel, UpdateModel
from signage.schemas.layer_config import dump_content_config, validate_content_config

LayerType = Literal[
    "text", "image", "video", "playlist", "html", "iframe",
    "weather", "rss", "news", "youtube", "clock", "shape",
]


def checked_content_config(layer_type: str, raw: dict[str, Any]) -> dict[str, Any]:
    try:
        parsed = validate_content_config(layer_type, raw)
    except ValidationError as exc:
        first = exc.errors()[0]
        where = ".".join(str(part) for part in first["loc"][1:]) or "contentConfig"
        raise ValueError(f"Invalid content config for {layer_type} layer ({where}): {first['msg']}") from exc
    return dump_content_config(parsed)


class LayerOut(APIModel):
    id: int
    layout_id: int
    layer_name: str
    layer_type: str
    z_index: int
    position_x: int
    position_y: int
    width: int
    height: int
    rotation: float
    opacity: float
    is_visible: bool
    is_locked: bool
    content_config: dict[str, Any] | None = None
    style_config: dict[str, Any] | None = None
    animation_config: dict[str, Any] | None = None
    schedule_config: dict[str, Any] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class LayoutOut(APIModel):
    id: int
    customer_id: int
    name: str
    description: str | None = None
    width: int
    height: int
    background_color: str
    thumbnail_url: str | None = None
    tags: str | None = None
    is_active: bool
    created_by: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class LayoutWithLayersOut(LayoutOut):
    layers: list[LayerOut] = []


class _LayerFields(APIModel):
    @model_validator(mode="after")
    def _check_content_config(self):
        if self.layer_type is not None and self.content_config is not None:
            self.content_config = checked_content_config(self.layer_type, self.content_config)
        return self


class LayerCreate(_LayerFields):
    layer_name: str = Field(..., min_length=1, max_length=255)
    layer_type: LayerType
    z_index: int = 0
    position_x: int = 0
    position_y: int = 0
    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)
    rotation: float = 0
    opacity: float = Field(1, ge=0, le=1)
    is_visible: bool = True
    is_locked: bool = False
    content_config: dict[str, Any] | None = None
    style_config: dict[str, Any] | None = None
    animation_config: dict[str, Any] | None = None
    schedule_config: dict[str, Any] | None = None


class LayerUpdate(_LayerFields, UpdateModel):
    not_nullable = (
        "layer_name",
        "layer_type",
        "z_index",
        "position_x",
        "position_y",
        "width",
        "height",
        "rotation",
        "opacity",
        "is_visible",
        "is_locked",
    )

    layer_name: str | None = Field(None, min_length=1, max_length=255)
    layer_type: LayerType | None = None
    z_index: int | None = None
    position_x: int | None = None
    position_y: int | None = None
    width: int | None = Field(None, ge=1)
    height: int | None = Field(None, ge=1)
    rotation: float | None = None
    opacity: float | None = Field(None, ge=0, le=1)
    is_visible: bool | None = None
    is_locked: bool | None = None
    content_config: dict[str, Any] | None = None
    style_config: dict[str, Any] | None = None
    animation_config: dict[str, Any] | None = None
    schedule_config: dict[str, Any] | None = None


class LayoutCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    width: int = Field(1920, ge=100)
    height: int = Field(1080, ge=100)
    background_color: str = Field("#000000", max_length=20)
    tags: str | None = Field(None, max_length=500)
    layers: list[LayerCreate] = []


class LayoutUpdate(UpdateModel):
    not_nullable = ("name", "width", "height", "background_color", "is_active")

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    width: int | None = Field(None, ge=100)
    height: int | None = Field(None, ge=100)
    background_color: str | None = Field(None, max_length=20)
    thumbnail_url: str | None = None
    tags: str | None = Field(None, max_length=500)
    is_active: bool | None = None
