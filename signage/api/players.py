import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from signage.api.deps import SITE_WRITE_ROLES, Page, current_user, ensure_site_access, pagination, require_roles
from signage.db import get_db
from signage.models.customer import Site
from signage.models.player import Player
from signage.schemas.common import paginated, success
from signage.schemas.player import ActivationCodeOut, PlayerCreate, PlayerOut, PlayerUpdate
from signage.services.auth import UserPrincipal, generate_activation_code
from signage.services.errors import ConflictError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/players", tags=["players"])

site_writers = require_roles(*SITE_WRITE_ROLES)


def _get_player(db: Session, player_id: int, user: UserPrincipal) -> Player:
    player = db.query(Player).filter(Player.id == player_id, Player.customer_id == user.customer_id).first()
    if not player:
        raise HTTPException(status_code=404, detail="Player not found")
    ensure_site_access(user, player.site_id)
    return player


def _check_site(db: Session, site_id: int, user: UserPrincipal) -> None:
    ensure_site_access(user, site_id)
    if not db.query(Site.id).filter(Site.id == site_id, Site.customer_id == user.customer_id).first():
        raise HTTPException(status_code=400, detail="Site not found")


def _check_code_free(db: Session, player_code: str, player_id: int | None = None) -> None:
    query = db.query(Player.id).filter(Player.player_code == player_code)
    if player_id is not None:
        query = query.filter(Player.id != player_id)
    if query.first():
        raise ConflictError("Player code already exists", code="PLAYER_CODE_EXISTS")


@router.get("")
def list_players(
    status: Literal["Online", "Offline", "Error"] | None = Query(None),
    site_id: int | None = Query(None, alias="siteId", gt=0),
    page: Page = Depends(pagination),
    user: UserPrincipal = Depends(current_user),
    db: Session = Depends(get_db),
):
    query = db.query(Player).filter(Player.customer_id == user.customer_id)
    if user.role == "SiteManager":
        query = query.filter(Player.site_id == user.assigned_site_id)
    if site_id is not None:
        query = query.filter(Player.site_id == site_id)
    if status is not None:
        query = query.filter(Player.status == status)
    total = query.count()
    rows = query.order_by(Player.id.asc()).offset(page.offset).limit(page.limit).all()
    return paginated([PlayerOut.model_validate(row) for row in rows], total, page.page, page.limit)


@router.post("", status_code=201)
def create_player(payload: PlayerCreate, user: UserPrincipal = Depends(site_writers), db: Session = Depends(get_db)):
    _check_site(db, payload.site_id, user)
    _check_code_free(db, payload.player_code)
    player = Player(customer_id=user.customer_id, **payload.model_dump())
    db.add(player)
    db.commit()
    db.refresh(player)
    logger.info("Created player %s at site %s", player.id, player.site_id)
    return success(PlayerOut.model_validate(player))


@router.get("/{player_id}")
def get_player(player_id: int, user: UserPrincipal = Depends(current_user), db: Session = Depends(get_db)):
    return success(PlayerOut.model_validate(_get_player(db, player_id, user)))


@router.put("/{player_id}")
def update_player(
    player_id: int,
    payload: PlayerUpdate,
    user: UserPrincipal = Depends(site_writers),
    db: Session = Depends(get_db),
):
    player = _get_player(db, player_id, user)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("site_id") is not None:
        _check_site(db, changes["site_id"], user)
    if changes.get("player_code"):
        _check_code_free(db, changes["player_code"], player_id)
    for field, value in changes.items():
        setattr(player, field, value)
    db.commit()
    db.refresh(player)
    logger.info("Updated player %s", player.id)
    return success(PlayerOut.model_validate(player))


@router.delete("/{player_id}")
def delete_player(player_id: int, user: UserPrincipal = Depends(site_writers), db: Session = Depends(get_db)):
    player = _get_player(db, player_id, user)
    db.delete(player)
    db.commit()
    logger.info("Deleted player %s", player_id)
    return success(message="Player deleted")


@router.post("/{player_id}/activation-code")
def create_activation_code(
    player_id: int,
    user: UserPrincipal = Depends(site_writers),
    db: Session = Depends(get_db),
):
    player = _get_player(db, player_id, user)
    code, expires_at = generate_activation_code()
    player.activation_code = code
    player.activation_code_expires_at = expires_at
    db.commit()
    logger.info("Issued activation code for player %s", player.id)
    return success(ActivationCodeOut(player_id=player.id, activation_code=code, expires_at=expires_at))
