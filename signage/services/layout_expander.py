import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from signage.schemas.layer_config import PlaylistLayerConfig, parse_content_config
from signage.services.errors import NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_DURATION_SEC = 10
DEFAULT_TRANSITION_TYPE = "None"
DEFAULT_TRANSITION_DURATION_MS = 0


@dataclass(frozen=True)
class ContentEntry:
    content_id: int
    name: str
    content_type: str
    file_url: str | None
    duration: int
    display_order: int
    transition_type: str
    transition_duration: int
    # Not populated by schedule resolution yet; kept on the wire as null.
    thumbnail_url: str | None = None
    mime_type: str | None = None
    file_size: int | None = None
    width: int | None = None
    height: int | None = None


@dataclass
class ExpandedLayout:
    layout: Any
    entries: list[ContentEntry] = field(default_factory=list)


class LayoutStore(Protocol):
    def find_with_layers(self, layout_id: int, customer_id: int):
        ...


class PlaylistStore(Protocol):
    def find_items_with_content(self, playlist_id: int, customer_id: int) -> list[tuple[Any, Any]]:
        ...


def playlist_reference(layer) -> int | None:
    config = parse_content_config(layer.layer_type, layer.content_config)
    if isinstance(config, PlaylistLayerConfig):
        return config.playlist_id
    return None


def to_entry(item, content) -> ContentEntry:
    return ContentEntry(
        content_id=content.id,
        name=content.name,
        content_type=content.content_type,
        file_url=content.file_url,
        duration=item.duration or DEFAULT_DURATION_SEC,
        display_order=item.display_order,
        transition_type=item.transition_type or DEFAULT_TRANSITION_TYPE,
        transition_duration=item.transition_duration or DEFAULT_TRANSITION_DURATION_MS,
    )


def expand(
    layout_store: LayoutStore,
    playlist_store: PlaylistStore,
    layout_id: int,
    customer_id: int,
) -> ExpandedLayout:
    layout = layout_store.find_with_layers(layout_id, customer_id)
    if layout is None:
        raise NotFoundError("Layout not found", code="LAYOUT_NOT_FOUND")

    entries: list[ContentEntry] = []
    for layer in layout.layers:
        playlist_id = playlist_reference(layer)
        if playlist_id is None:
            continue
        # A missing or empty playlist contributes nothing; siblings still play.
        rows = playlist_store.find_items_with_content(playlist_id, customer_id)
        if not rows:
            logger.debug("Layer %s references empty or missing playlist %s", layer.id, playlist_id)
            continue
        entries.extend(to_entry(item, content) for item, content in rows)

    return ExpandedLayout(layout=layout, entries=entries)
