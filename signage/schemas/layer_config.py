"""
Per-layer content configuration, one variant per layer type.

The stored JSON carries no type marker of its own; the owning layer's
``layer_type`` column is the discriminator and is folded in before parsing.
"""
import json
import logging
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

LAYER_TYPES = (
    "text",
    "image",
    "video",
    "playlist",
    "html",
    "iframe",
    "weather",
    "rss",
    "news",
    "youtube",
    "clock",
    "shape",
)


class _LayerConfig(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class TextLayerConfig(_LayerConfig):
    layer_type: Literal["text"] = "text"
    text: str | None = None
    font_size: float | None = None
    font_family: str | None = None
    font_weight: str | None = None
    font_style: str | None = None
    text_align: Literal["left", "center", "right", "justify"] | None = None
    color: str | None = None
    line_height: float | None = None


class ImageLayerConfig(_LayerConfig):
    layer_type: Literal["image"] = "image"
    image_url: str | None = None
    object_fit: Literal["cover", "contain", "fill", "scale-down", "none"] | None = None


class VideoLayerConfig(_LayerConfig):
    layer_type: Literal["video"] = "video"
    video_url: str | None = None
    autoplay: bool | None = None
    loop: bool | None = None
    muted: bool | None = None
    controls: bool | None = None


class PlaylistLayerConfig(_LayerConfig):
    layer_type: Literal["playlist"] = "playlist"
    playlist_id: int | None = Field(default=None, gt=0)


class HtmlLayerConfig(_LayerConfig):
    layer_type: Literal["html"] = "html"
    html_content: str | None = None


class IframeLayerConfig(_LayerConfig):
    layer_type: Literal["iframe"] = "iframe"
    iframe_url: str | None = None
    allow_fullscreen: bool | None = None


class WeatherLayerConfig(_LayerConfig):
    layer_type: Literal["weather"] = "weather"
    location: str | None = None
    units: Literal["metric", "imperial"] | None = None
    api_key: str | None = None


class FeedLayerConfig(_LayerConfig):
    layer_type: Literal["rss", "news"] = "rss"
    feed_url: str | None = None
    refresh_interval: int | None = None
    max_items: int | None = Field(default=None, gt=0)


class YoutubeLayerConfig(_LayerConfig):
    layer_type: Literal["youtube"] = "youtube"
    video_id: str | None = None


class ClockLayerConfig(_LayerConfig):
    layer_type: Literal["clock"] = "clock"
    format: str | None = None
    timezone: str | None = None


class ShapeLayerConfig(_LayerConfig):
    layer_type: Literal["shape"] = "shape"
    shape_type: Literal["rectangle", "circle", "ellipse", "polygon"] | None = None
    fill: str | None = None
    stroke: str | None = None
    stroke_width: float | None = None


LayerConfig = Annotated[
    Union[
        TextLayerConfig,
        ImageLayerConfig,
        VideoLayerConfig,
        PlaylistLayerConfig,
        HtmlLayerConfig,
        IframeLayerConfig,
        WeatherLayerConfig,
        FeedLayerConfig,
        YoutubeLayerConfig,
        ClockLayerConfig,
        ShapeLayerConfig,
    ],
    Field(discriminator="layer_type"),
]

_adapter: TypeAdapter = TypeAdapter(LayerConfig)


def validate_content_config(layer_type: str, raw: dict[str, Any] | None):
    """Strict parse used by the API; raises pydantic.ValidationError."""
    payload = dict(raw or {})
    payload.pop("layer_type", None)
    payload["layerType"] = layer_type
    return _adapter.validate_python(payload)


def parse_content_config(layer_type: str, raw: Any):
    """Lenient parse for stored data: anything malformed yields None."""
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            logger.debug("Layer content config is not valid JSON")
            return None
    if raw is not None and not isinstance(raw, dict):
        return None
    try:
        return validate_content_config(layer_type, raw)
    except ValidationError:
        logger.debug("Layer content config does not match layer type %s", layer_type)
        return None


def dump_content_config(config) -> dict[str, Any]:
    data = config.model_dump(by_alias=True, exclude_none=True)
    data.pop("layerType", None)
    return data
