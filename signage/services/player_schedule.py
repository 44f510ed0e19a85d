"""
Builds what a player should show right now.

Resolution runs against the wall clock of the player's site. The result is
recomputed on every request and never cached server-side.
"""
import logging
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.orm import Session

from signage.models.customer import Site
from signage.repositories.layouts import LayoutRepository
from signage.repositories.playlists import PlaylistRepository
from signage.repositories.schedules import ScheduleRepository
from signage.services.content_sequencer import sequence
from signage.services.errors import NotFoundError
from signage.services.layout_expander import expand
from signage.services.schedule_resolver import resolve_for_player
from signage.settings import DEFAULT_TIMEZONE

logger = logging.getLogger(__name__)


def _zone(name: str | None) -> ZoneInfo:
    for candidate in (name, DEFAULT_TIMEZONE, "UTC"):
        if not candidate:
            continue
        try:
            return ZoneInfo(candidate)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Unknown time zone %r, falling back", candidate)
    return ZoneInfo("UTC")


def player_local_now(db: Session, player) -> datetime:
    site = db.query(Site).filter(Site.id == player.site_id).first()
    zone = _zone(site.time_zone if site else None)
    return datetime.now(zone).replace(tzinfo=None)


def build_player_schedule(db: Session, player, now: datetime | None = None) -> dict:
    if now is None:
        now = player_local_now(db, player)

    schedule = resolve_for_player(ScheduleRepository(db), player, now)
    if schedule is None:
        raise NotFoundError("No active schedule found for this player", code="NO_ACTIVE_SCHEDULE")

    expanded = expand(
        LayoutRepository(db),
        PlaylistRepository(db),
        schedule.layout_id,
        player.customer_id,
    )
    content = sequence(expanded.entries)
    logger.info(
        "Player %s gets schedule %s, layout %s, %d content entries",
        player.id,
        schedule.id,
        expanded.layout.id,
        len(content),
    )
    return {"schedule": schedule, "layout": expanded.layout, "content": content}
