import logging
from datetime import datetime

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from signage.api.deps import current_player
from signage.db import get_db
from signage.models.content import Content
from signage.models.layout import Layout
from signage.models.player import Player
from signage.models.playlist import Playlist
from signage.models.schedule import Schedule
from signage.schemas.common import success
from signage.schemas.content import ContentOut
from signage.schemas.layout import LayoutWithLayersOut
from signage.schemas.player_device import (
    ContentEntryOut,
    HeartbeatIn,
    HeartbeatOut,
    PlayerLogsIn,
    PlayerScheduleOut,
    ProofOfPlayIn,
    ProofOfPlayOut,
)
from signage.schemas.schedule import ScheduleOut
from signage.services.analytics import record_play
from signage.services.auth import PlayerPrincipal
from signage.services.errors import ForbiddenError, NotFoundError, ValidationError
from signage.services.player_schedule import build_player_schedule
from signage.services.webhooks import dispatch_event

logger = logging.getLogger(__name__)
device_logger = logging.getLogger("signage.player")

router = APIRouter(prefix="/player-devices", tags=["player-devices"])

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def _owned(db: Session, model, record_id: int, customer_id: int) -> bool:
    return (
        db.query(model.id).filter(model.id == record_id, model.customer_id == customer_id).first() is not None
    )


def _own_player(player_id: int, principal: PlayerPrincipal, db: Session) -> Player:
    player = (
        db.query(Player)
        .filter(Player.id == player_id, Player.customer_id == principal.customer_id)
        .first()
    )
    if player is None:
        raise NotFoundError("Player not found", code="PLAYER_NOT_FOUND")
    if player.id != principal.player_id:
        raise ForbiddenError("Players may only access their own resources")
    return player


@router.post("/{player_id}/heartbeat")
def heartbeat(
    player_id: int,
    payload: HeartbeatIn,
    background_tasks: BackgroundTasks,
    principal: PlayerPrincipal = Depends(current_player),
    db: Session = Depends(get_db),
):
    player = _own_player(player_id, principal, db)
    came_online = player.status == "Offline" and payload.status == "Online"

    player.status = payload.status
    player.last_heartbeat = datetime.utcnow()
    for field in ("ip_address", "player_version", "os_version", "screen_resolution"):
        value = getattr(payload, field)
        if value is not None:
            setattr(player, field, value)
    db.commit()
    db.refresh(player)

    if came_online:
        logger.info("Player %s is online", player.id)
        background_tasks.add_task(
            dispatch_event,
            player.customer_id,
            "player.online",
            {"playerId": player.id, "playerName": player.name, "ipAddress": player.ip_address},
        )
    return success(
        HeartbeatOut(player_id=player.id, status=player.status, last_heartbeat=player.last_heartbeat)
    )


@router.get("/{player_id}/schedule")
def get_schedule(
    player_id: int,
    principal: PlayerPrincipal = Depends(current_player),
    db: Session = Depends(get_db),
):
    player = _own_player(player_id, principal, db)
    resolved = build_player_schedule(db, player)
    return success(
        PlayerScheduleOut(
            schedule=ScheduleOut.model_validate(resolved["schedule"]),
            layout=LayoutWithLayersOut.model_validate(resolved["layout"]),
            content=[ContentEntryOut.model_validate(entry) for entry in resolved["content"]],
        )
    )


@router.get("/{player_id}/content")
def get_content(
    player_id: int,
    principal: PlayerPrincipal = Depends(current_player),
    db: Session = Depends(get_db),
):
    player = _own_player(player_id, principal, db)
    rows = (
        db.query(Content)
        .filter(Content.customer_id == player.customer_id, Content.status == "Ready")
        .order_by(Content.id.asc())
        .all()
    )
    return success([ContentOut.model_validate(row) for row in rows])


@router.post("/{player_id}/logs")
def post_logs(
    player_id: int,
    payload: PlayerLogsIn,
    principal: PlayerPrincipal = Depends(current_player),
    db: Session = Depends(get_db),
):
    player = _own_player(player_id, principal, db)
    for entry in payload.logs:
        device_logger.log(
            _LOG_LEVELS[entry.level],
            "[player %s] %s",
            player.id,
            entry.message,
            extra={"player_context": entry.context or {}},
        )
    return success({"received": len(payload.logs)})


@router.post("/{player_id}/proof-of-play", status_code=201)
def post_proof_of_play(
    player_id: int,
    payload: ProofOfPlayIn,
    principal: PlayerPrincipal = Depends(current_player),
    db: Session = Depends(get_db),
):
    player = _own_player(player_id, principal, db)
    for model, value in (
        (Content, payload.content_id),
        (Layout, payload.layout_id),
        (Playlist, payload.playlist_id),
        (Schedule, payload.schedule_id),
    ):
        if value is not None and not _owned(db, model, value, player.customer_id):
            raise ValidationError(f"{model.__name__} {value} not found")
    entry = record_play(db, player, payload.model_dump())
    return success(ProofOfPlayOut.model_validate(entry))
