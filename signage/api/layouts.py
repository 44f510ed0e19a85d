import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, selectinload

from signage.api.deps import WRITE_ROLES, Page, current_user, pagination, require_roles
from signage.db import get_db
from signage.models.layout import Layout, LayoutLayer
from signage.models.playlist import Playlist
from signage.models.schedule import Schedule
from signage.schemas.common import paginated, success
from signage.schemas.layer_config import PlaylistLayerConfig, validate_content_config
from signage.schemas.layout import (
    LayerCreate,
    LayerOut,
    LayerUpdate,
    LayoutCreate,
    LayoutOut,
    LayoutUpdate,
    LayoutWithLayersOut,
    checked_content_config,
)
from signage.services.auth import UserPrincipal
from signage.services.errors import ConflictError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/layouts", tags=["layouts"])

writers = require_roles(*WRITE_ROLES)

_LAYER_COPY_FIELDS = (
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
    "content_config",
    "style_config",
    "animation_config",
    "schedule_config",
)


def _get_layout(db: Session, layout_id: int, customer_id: int) -> Layout:
    layout = (
        db.query(Layout)
        .options(selectinload(Layout.layers))
        .filter(Layout.id == layout_id, Layout.customer_id == customer_id)
        .first()
    )
    if not layout:
        raise HTTPException(status_code=404, detail="Layout not found")
    return layout


def _get_layer(db: Session, layout: Layout, layer_id: int) -> LayoutLayer:
    layer = db.query(LayoutLayer).filter(LayoutLayer.id == layer_id, LayoutLayer.layout_id == layout.id).first()
    if not layer:
        raise HTTPException(status_code=404, detail="Layer not found")
    return layer


def _check_playlist_reference(db: Session, layer_type: str, content_config: dict | None, customer_id: int) -> None:
    if layer_type != "playlist" or not content_config:
        return
    config = validate_content_config(layer_type, content_config)
    if not isinstance(config, PlaylistLayerConfig) or config.playlist_id is None:
        return
    found = (
        db.query(Playlist.id)
        .filter(Playlist.id == config.playlist_id, Playlist.customer_id == customer_id)
        .first()
    )
    if not found:
        raise HTTPException(status_code=400, detail=f"Playlist {config.playlist_id} not found")


@router.get("")
def list_layouts(
    page: Page = Depends(pagination),
    user: UserPrincipal = Depends(current_user),
    db: Session = Depends(get_db),
):
    query = db.query(Layout).filter(Layout.customer_id == user.customer_id)
    total = query.count()
    rows = query.order_by(Layout.id.asc()).offset(page.offset).limit(page.limit).all()
    return paginated([LayoutOut.model_validate(row) for row in rows], total, page.page, page.limit)


@router.post("", status_code=201)
def create_layout(payload: LayoutCreate, user: UserPrincipal = Depends(writers), db: Session = Depends(get_db)):
    data = payload.model_dump(exclude={"layers"})
    layout = Layout(customer_id=user.customer_id, created_by=user.user_id, **data)
    for layer in payload.layers:
        _check_playlist_reference(db, layer.layer_type, layer.content_config, user.customer_id)
        layout.layers.append(LayoutLayer(**layer.model_dump()))
    db.add(layout)
    db.commit()
    logger.info("Created layout %s with %d layers", layout.id, len(payload.layers))
    return success(LayoutWithLayersOut.model_validate(_get_layout(db, layout.id, user.customer_id)))


@router.get("/{layout_id}")
def get_layout(layout_id: int, user: UserPrincipal = Depends(current_user), db: Session = Depends(get_db)):
    return success(LayoutWithLayersOut.model_validate(_get_layout(db, layout_id, user.customer_id)))


@router.put("/{layout_id}")
def update_layout(
    layout_id: int,
    payload: LayoutUpdate,
    user: UserPrincipal = Depends(writers),
    db: Session = Depends(get_db),
):
    layout = _get_layout(db, layout_id, user.customer_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(layout, field, value)
    db.commit()
    logger.info("Updated layout %s", layout_id)
    return success(LayoutOut.model_validate(_get_layout(db, layout_id, user.customer_id)))


@router.delete("/{layout_id}")
def delete_layout(layout_id: int, user: UserPrincipal = Depends(writers), db: Session = Depends(get_db)):
    layout = _get_layout(db, layout_id, user.customer_id)
    if db.query(Schedule.id).filter(Schedule.layout_id == layout.id).first():
        raise ConflictError("Layout is used by a schedule", code="LAYOUT_IN_USE")
    db.delete(layout)
    db.commit()
    logger.info("Deleted layout %s", layout_id)
    return success(message="Layout deleted")


@router.post("/{layout_id}/duplicate", status_code=201)
def duplicate_layout(layout_id: int, user: UserPrincipal = Depends(writers), db: Session = Depends(get_db)):
    source = _get_layout(db, layout_id, user.customer_id)
    copy = Layout(
        customer_id=source.customer_id,
        name=f"{source.name} (Copy)",
        description=source.description,
        width=source.width,
        height=source.height,
        background_color=source.background_color,
        thumbnail_url=source.thumbnail_url,
        tags=source.tags,
        is_active=source.is_active,
        created_by=user.user_id,
    )
    for layer in source.layers:
        copy.layers.append(LayoutLayer(**{field: getattr(layer, field) for field in _LAYER_COPY_FIELDS}))
    db.add(copy)
    db.commit()
    logger.info("Duplicated layout %s as %s", layout_id, copy.id)
    return success(LayoutWithLayersOut.model_validate(_get_layout(db, copy.id, user.customer_id)))


@router.post("/{layout_id}/layers", status_code=201)
def create_layer(
    layout_id: int,
    payload: LayerCreate,
    user: UserPrincipal = Depends(writers),
    db: Session = Depends(get_db),
):
    layout = _get_layout(db, layout_id, user.customer_id)
    _check_playlist_reference(db, payload.layer_type, payload.content_config, user.customer_id)
    layer = LayoutLayer(layout_id=layout.id, **payload.model_dump())
    db.add(layer)
    db.commit()
    db.refresh(layer)
    logger.info("Added %s layer %s to layout %s", layer.layer_type, layer.id, layout.id)
    return success(LayerOut.model_validate(layer))


@router.put("/{layout_id}/layers/{layer_id}")
def update_layer(
    layout_id: int,
    layer_id: int,
    payload: LayerUpdate,
    user: UserPrincipal = Depends(writers),
    db: Session = Depends(get_db),
):
    layout = _get_layout(db, layout_id, user.customer_id)
    layer = _get_layer(db, layout, layer_id)
    changes = payload.model_dump(exclude_unset=True)

    layer_type = changes.get("layer_type") or layer.layer_type
    content_config = changes["content_config"] if "content_config" in changes else layer.content_config
    if content_config is not None and ("layer_type" in changes or "content_config" in changes):
        # A config must always match the type of the layer that owns it.
        try:
            changes["content_config"] = checked_content_config(layer_type, content_config)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
    _check_playlist_reference(db, layer_type, changes.get("content_config"), user.customer_id)

    for field, value in changes.items():
        setattr(layer, field, value)
    db.commit()
    db.refresh(layer)
    logger.info("Updated layer %s of layout %s", layer.id, layout.id)
    return success(LayerOut.model_validate(layer))


@router.delete("/{layout_id}/layers/{layer_id}")
def delete_layer(
    layout_id: int,
    layer_id: int,
    user: UserPrincipal = Depends(writers),
    db: Session = Depends(get_db),
):
    layout = _get_layout(db, layout_id, user.customer_id)
    layer = _get_layer(db, layout, layer_id)
    db.delete(layer)
    db.commit()
    logger.info("Deleted layer %s of layout %s", layer_id, layout.id)
    return success(message="Layer deleted")
