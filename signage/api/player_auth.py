import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from signage.db import get_db
from signage.models.player import Player, PlayerToken
from signage.schemas.auth import AccessTokenOut, PlayerActivateIn, PlayerTokensOut, RefreshIn
from signage.schemas.common import success
from signage.services.auth import (
    PLAYER_REFRESH,
    decode_token,
    issue_player_access_token,
    issue_player_refresh_token,
)
from signage.services.errors import UnauthorizedError
from signage.settings import PLAYER_JWT_EXPIRES_MIN

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/player-auth", tags=["player-auth"])


@router.post("/activate")
def activate(payload: PlayerActivateIn, db: Session = Depends(get_db)):
    player = db.query(Player).filter(Player.player_code == payload.player_code.strip()).first()
    code = payload.activation_code.strip().upper()
    if player is None or not player.activation_code or player.activation_code != code:
        logger.warning("Rejected activation for player code %s", payload.player_code)
        raise UnauthorizedError("Invalid player code or activation code", code="INVALID_ACTIVATION")
    if player.activation_code_expires_at and player.activation_code_expires_at < datetime.utcnow():
        raise UnauthorizedError("Activation code has expired", code="ACTIVATION_EXPIRED")
    if not player.is_active:
        raise UnauthorizedError("Player is inactive", code="PLAYER_INACTIVE")

    refresh_token, expires_at = issue_player_refresh_token(player)
    db.add(PlayerToken(player_id=player.id, token=refresh_token, expires_at=expires_at))
    player.activation_code = None
    player.activation_code_expires_at = None
    player.activated_at = datetime.utcnow()
    db.commit()
    logger.info("Activated player %s", player.id)

    return success(
        PlayerTokensOut(
            player_id=player.id,
            customer_id=player.customer_id,
            site_id=player.site_id,
            access_token=issue_player_access_token(player),
            refresh_token=refresh_token,
            expires_in=PLAYER_JWT_EXPIRES_MIN * 60,
        ),
        message="Player activated",
    )


def _live_token(db: Session, token: str) -> PlayerToken:
    decode_token(token, PLAYER_REFRESH)
    row = db.query(PlayerToken).filter(PlayerToken.token == token).first()
    if row is None or row.revoked_at is not None or row.expires_at < datetime.utcnow():
        raise UnauthorizedError("Refresh token is revoked or expired", code="INVALID_TOKEN")
    return row


@router.post("/refresh")
def refresh(payload: RefreshIn, db: Session = Depends(get_db)):
    row = _live_token(db, payload.refresh_token)
    player = db.query(Player).filter(Player.id == row.player_id).first()
    if player is None or not player.is_active:
        raise UnauthorizedError("Player not found or inactive", code="INVALID_TOKEN")
    return success(
        AccessTokenOut(access_token=issue_player_access_token(player), expires_in=PLAYER_JWT_EXPIRES_MIN * 60)
    )


@router.post("/logout")
def logout(payload: RefreshIn, db: Session = Depends(get_db)):
    row = _live_token(db, payload.refresh_token)
    row.revoked_at = datetime.utcnow()
    db.commit()
    logger.info("Revoked refresh token for player %s", row.player_id)
    return success(message="Logged out")
