import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from signage.api.deps import WRITE_ROLES, Page, current_user, pagination, require_roles
from signage.db import get_db
from signage.models.content import Content
from signage.models.playlist import Playlist, PlaylistItem
from signage.schemas.common import paginated, success
from signage.schemas.playlist import (
    PlaylistCreate,
    PlaylistItemCreate,
    PlaylistItemOut,
    PlaylistItemUpdate,
    PlaylistOut,
    PlaylistReorderIn,
    PlaylistUpdate,
    PlaylistWithItemsOut,
)
from signage.services.auth import UserPrincipal
from signage.services.webhooks import dispatch_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/playlists", tags=["playlists"])

writers = require_roles(*WRITE_ROLES)


def _get_playlist(db: Session, playlist_id: int, customer_id: int) -> Playlist:
    playlist = (
        db.query(Playlist)
        .options(selectinload(Playlist.items))
        .filter(Playlist.id == playlist_id, Playlist.customer_id == customer_id)
        .first()
    )
    if not playlist:
        raise HTTPException(status_code=404, detail="Playlist not found")
    return playlist


def _get_item(db: Session, playlist: Playlist, item_id: int) -> PlaylistItem:
    item = db.query(PlaylistItem).filter(PlaylistItem.id == item_id, PlaylistItem.playlist_id == playlist.id).first()
    if not item:
        raise HTTPException(status_code=404, detail="Playlist item not found")
    return item


def _changed(background_tasks: BackgroundTasks, playlist: Playlist, action: str) -> None:
    background_tasks.add_task(
        dispatch_event,
        playlist.customer_id,
        "playlist.updated",
        {"playlistId": playlist.id, "name": playlist.name, "action": action},
    )


@router.get("")
def list_playlists(
    page: Page = Depends(pagination),
    user: UserPrincipal = Depends(current_user),
    db: Session = Depends(get_db),
):
    query = db.query(Playlist).filter(Playlist.customer_id == user.customer_id)
    total = query.count()
    rows = query.order_by(Playlist.id.asc()).offset(page.offset).limit(page.limit).all()
    return paginated([PlaylistOut.model_validate(row) for row in rows], total, page.page, page.limit)


@router.post("", status_code=201)
def create_playlist(payload: PlaylistCreate, user: UserPrincipal = Depends(writers), db: Session = Depends(get_db)):
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Playlist name cannot be empty")
    playlist = Playlist(
        customer_id=user.customer_id,
        name=name,
        description=payload.description,
        created_by=user.user_id,
    )
    db.add(playlist)
    db.commit()
    db.refresh(playlist)
    logger.info("Created playlist %s", playlist.id)
    return success(PlaylistOut.model_validate(playlist))


@router.get("/{playlist_id}")
def get_playlist(playlist_id: int, user: UserPrincipal = Depends(current_user), db: Session = Depends(get_db)):
    return success(PlaylistWithItemsOut.model_validate(_get_playlist(db, playlist_id, user.customer_id)))


@router.put("/{playlist_id}")
def update_playlist(
    playlist_id: int,
    payload: PlaylistUpdate,
    background_tasks: BackgroundTasks,
    user: UserPrincipal = Depends(writers),
    db: Session = Depends(get_db),
):
    playlist = _get_playlist(db, playlist_id, user.customer_id)
    changes = payload.model_dump(exclude_unset=True)
    if "name" in changes:
        cleaned = (changes["name"] or "").strip()
        if not cleaned:
            raise HTTPException(status_code=400, detail="Playlist name cannot be empty")
        changes["name"] = cleaned
    for field, value in changes.items():
        setattr(playlist, field, value)
    db.commit()
    db.refresh(playlist)
    logger.info("Updated playlist %s", playlist.id)
    _changed(background_tasks, playlist, "updated")
    return success(PlaylistOut.model_validate(playlist))


@router.delete("/{playlist_id}")
def delete_playlist(playlist_id: int, user: UserPrincipal = Depends(writers), db: Session = Depends(get_db)):
    playlist = _get_playlist(db, playlist_id, user.customer_id)
    db.delete(playlist)
    db.commit()
    logger.info("Deleted playlist %s", playlist_id)
    return success(message="Playlist deleted")


@router.post("/{playlist_id}/items", status_code=201)
def add_item(
    playlist_id: int,
    payload: PlaylistItemCreate,
    background_tasks: BackgroundTasks,
    user: UserPrincipal = Depends(writers),
    db: Session = Depends(get_db),
):
    playlist = _get_playlist(db, playlist_id, user.customer_id)
    content = (
        db.query(Content.id)
        .filter(Content.id == payload.content_id, Content.customer_id == user.customer_id)
        .first()
    )
    if not content:
        raise HTTPException(status_code=400, detail="Content not found")

    display_order = payload.display_order
    if display_order is None:
        max_order = (
            db.query(func.max(PlaylistItem.display_order))
            .filter(PlaylistItem.playlist_id == playlist.id)
            .scalar()
        )
        display_order = (max_order + 1) if max_order is not None else 0

    item = PlaylistItem(
        playlist_id=playlist.id,
        content_id=payload.content_id,
        display_order=display_order,
        duration=payload.duration,
        transition_type=payload.transition_type,
        transition_duration=payload.transition_duration,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    logger.info("Added content %s to playlist %s", payload.content_id, playlist.id)
    _changed(background_tasks, playlist, "item_added")
    return success(PlaylistItemOut.model_validate(item))


@router.put("/{playlist_id}/items/{item_id}")
def update_item(
    playlist_id: int,
    item_id: int,
    payload: PlaylistItemUpdate,
    background_tasks: BackgroundTasks,
    user: UserPrincipal = Depends(writers),
    db: Session = Depends(get_db),
):
    playlist = _get_playlist(db, playlist_id, user.customer_id)
    item = _get_item(db, playlist, item_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(item, field, value)
    db.commit()
    db.refresh(item)
    _changed(background_tasks, playlist, "item_updated")
    return success(PlaylistItemOut.model_validate(item))


@router.delete("/{playlist_id}/items/{item_id}")
def delete_item(
    playlist_id: int,
    item_id: int,
    background_tasks: BackgroundTasks,
    user: UserPrincipal = Depends(writers),
    db: Session = Depends(get_db),
):
    playlist = _get_playlist(db, playlist_id, user.customer_id)
    item = _get_item(db, playlist, item_id)
    db.delete(item)
    db.commit()
    _changed(background_tasks, playlist, "item_removed")
    return success(message="Playlist item deleted")


@router.put("/{playlist_id}/reorder")
def reorder_items(
    playlist_id: int,
    payload: PlaylistReorderIn,
    background_tasks: BackgroundTasks,
    user: UserPrincipal = Depends(writers),
    db: Session = Depends(get_db),
):
    playlist = _get_playlist(db, playlist_id, user.customer_id)
    items = {item.id: item for item in playlist.items}
    if sorted(payload.item_ids) != sorted(items) or len(set(payload.item_ids)) != len(payload.item_ids):
        raise HTTPException(status_code=400, detail="itemIds must list every item of the playlist exactly once")
    for order, item_id in enumerate(payload.item_ids):
        items[item_id].display_order = order
    db.commit()
    db.expire(playlist, ["items"])
    _changed(background_tasks, playlist, "reordered")
    return success(PlaylistWithItemsOut.model_validate(playlist))
