import logging
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from signage.models.analytics import ProofOfPlay
from signage.models.content import Content
from signage.models.customer import Site
from signage.models.player import Player
from signage.services.errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_RANGE_DAYS = 30


def resolve_range(start: date | None, end: date | None, today: date | None = None) -> tuple[date, date]:
    today = today or datetime.utcnow().date()
    end = end or today
    start = start or end - timedelta(days=DEFAULT_RANGE_DAYS)
    if end < start:
        raise ValidationError("End date must be on or after start date")
    return start, end


def _window(start: date, end: date) -> tuple[datetime, datetime]:
    # End date is inclusive.
    return datetime.combine(start, datetime.min.time()), datetime.combine(end + timedelta(days=1), datetime.min.time())


def _plays_query(db: Session, customer_id: int, start: date, end: date):
    lower, upper = _window(start, end)
    return (
        db.query(ProofOfPlay)
        .join(Player, Player.id == ProofOfPlay.player_id)
        .filter(
            Player.customer_id == customer_id,
            ProofOfPlay.playback_start_time >= lower,
            ProofOfPlay.playback_start_time < upper,
        )
    )


def summary(db: Session, customer_id: int, start: date, end: date) -> dict:
    plays = _plays_query(db, customer_id, start, end).with_entities(
        func.count(ProofOfPlay.id),
        func.coalesce(func.sum(ProofOfPlay.duration), 0),
        func.count(func.distinct(ProofOfPlay.player_id)),
    ).one()
    players = (
        db.query(
            func.count(Player.id),
            func.coalesce(func.sum(case((Player.status == "Online", 1), else_=0)), 0),
        )
        .filter(Player.customer_id == customer_id)
        .one()
    )
    return {
        "total_plays": int(plays[0]),
        "total_duration": int(plays[1]),
        "unique_players": int(plays[2]),
        "online_players": int(players[1]),
        "total_players": int(players[0]),
        "start_date": start,
        "end_date": end,
    }


def content_plays(db: Session, customer_id: int, start: date, end: date, limit: int = 10) -> list[dict]:
    rows = (
        _plays_query(db, customer_id, start, end)
        .outerjoin(Content, Content.id == ProofOfPlay.content_id)
        .filter(ProofOfPlay.content_id.isnot(None))
        .with_entities(
            ProofOfPlay.content_id,
            Content.name,
            func.count(ProofOfPlay.id).label("play_count"),
            func.coalesce(func.sum(ProofOfPlay.duration), 0),
        )
        .group_by(ProofOfPlay.content_id, Content.name)
        .order_by(func.count(ProofOfPlay.id).desc(), ProofOfPlay.content_id.asc())
        .limit(limit)
        .all()
    )
    return [
        {"content_id": content_id, "name": name, "play_count": int(count), "total_duration": int(total)}
        for content_id, name, count, total in rows
    ]


def player_plays(db: Session, customer_id: int, start: date, end: date) -> list[dict]:
    lower, upper = _window(start, end)
    rows = (
        db.query(
            Player.id,
            Player.name,
            Player.status,
            func.count(ProofOfPlay.id),
            func.coalesce(func.sum(ProofOfPlay.duration), 0),
        )
        .outerjoin(
            ProofOfPlay,
            (ProofOfPlay.player_id == Player.id)
            & (ProofOfPlay.playback_start_time >= lower)
            & (ProofOfPlay.playback_start_time < upper),
        )
        .filter(Player.customer_id == customer_id)
        .group_by(Player.id, Player.name, Player.status)
        .order_by(Player.id.asc())
        .all()
    )
    return [
        {
            "player_id": player_id,
            "name": name,
            "status": status,
            "play_count": int(count),
            "total_duration": int(total),
        }
        for player_id, name, status, count, total in rows
    ]


def site_players(db: Session, customer_id: int) -> list[dict]:
    sites = db.query(Site).filter(Site.customer_id == customer_id).order_by(Site.id.asc()).all()
    counts = dict(
        (site_id, (int(total), int(online)))
        for site_id, total, online in db.query(
            Player.site_id,
            func.count(Player.id),
            func.coalesce(func.sum(case((Player.status == "Online", 1), else_=0)), 0),
        )
        .filter(Player.customer_id == customer_id)
        .group_by(Player.site_id)
        .all()
    )
    plays = dict(
        (site_id, int(total))
        for site_id, total in db.query(Player.site_id, func.count(ProofOfPlay.id))
        .join(ProofOfPlay, ProofOfPlay.player_id == Player.id)
        .filter(Player.customer_id == customer_id)
        .group_by(Player.site_id)
        .all()
    )
    return [
        {
            "site_id": site.id,
            "name": site.name,
            "player_count": counts.get(site.id, (0, 0))[0],
            "online_count": counts.get(site.id, (0, 0))[1],
            "play_count": plays.get(site.id, 0),
        }
        for site in sites
    ]


def daily_report(db: Session, customer_id: int, start: date, end: date) -> list[dict]:
    day = func.date(ProofOfPlay.playback_start_time)
    rows = (
        _plays_query(db, customer_id, start, end)
        .with_entities(
            day.label("day"),
            func.count(ProofOfPlay.id),
            func.coalesce(func.sum(ProofOfPlay.duration), 0),
            func.coalesce(func.sum(case((ProofOfPlay.is_completed.is_(True), 1), else_=0)), 0),
        )
        .group_by(day)
        .order_by(day.asc())
        .all()
    )
    return [
        {
            "day": value if isinstance(value, date) else date.fromisoformat(str(value)[:10]),
            "play_count": int(count),
            "total_duration": int(total),
            "completed_count": int(completed),
        }
        for value, count, total, completed in rows
    ]


def _naive_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def record_play(db: Session, player, data: dict) -> ProofOfPlay:
    data["playback_start_time"] = _naive_utc(data["playback_start_time"])
    data["playback_end_time"] = _naive_utc(data.get("playback_end_time"))
    if data.get("duration") is None and data.get("playback_end_time") is not None:
        data["duration"] = int((data["playback_end_time"] - data["playback_start_time"]).total_seconds())
    entry = ProofOfPlay(player_id=player.id, **data)
    db.add(entry)
    db.commit()
    db.refresh(entry)
    logger.debug("Recorded proof of play %s for player %s", entry.id, player.id)
    return entry
