import asyncio
import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from signage.db import SessionLocal
from signage.models.player import Player
from signage.services.webhooks import dispatch_event
from signage.settings import PLAYER_HEARTBEAT_TIMEOUT_MIN, PLAYER_STATUS_SWEEP_SEC

logger = logging.getLogger(__name__)


def mark_stale_players(db: Session, now: datetime | None = None) -> list[dict]:
    """Flip players without a recent heartbeat to Offline; returns one change per player."""
    now = now or datetime.utcnow()
    cutoff = now - timedelta(minutes=PLAYER_HEARTBEAT_TIMEOUT_MIN)
    stale = (
        db.query(Player)
        .filter(
            Player.status != "Offline",
            (Player.last_heartbeat.is_(None)) | (Player.last_heartbeat < cutoff),
        )
        .all()
    )
    changes: list[dict] = []
    for player in stale:
        player.status = "Offline"
        changes.append(
            {
                "customer_id": player.customer_id,
                "player_id": player.id,
                "player_name": player.name,
                "last_heartbeat": player.last_heartbeat.isoformat() if player.last_heartbeat else None,
            }
        )
    if changes:
        db.commit()
        logger.info("Marked %d players offline", len(changes))
    return changes


async def player_status_watcher() -> None:
    while True:
        await asyncio.sleep(PLAYER_STATUS_SWEEP_SEC)
        db = SessionLocal()
        try:
            changes = mark_stale_players(db)
        except Exception:
            db.rollback()
            logger.exception("Player status sweep failed")
            changes = []
        finally:
            db.close()

        for change in changes:
            customer_id = change.pop("customer_id")
            try:
                await asyncio.to_thread(dispatch_event, customer_id, "player.offline", change)
            except Exception:
                logger.exception("Failed to dispatch player.offline for player %s", change["player_id"])
