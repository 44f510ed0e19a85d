from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from signage.api.deps import current_user
from signage.db import get_db
from signage.schemas.analytics import AnalyticsSummary, ContentPlays, DailyPlayback, PlayerPlays, SitePlayers
from signage.schemas.common import success
from signage.services import analytics
from signage.services.auth import UserPrincipal

router = APIRouter(prefix="/analytics", tags=["analytics"])


def date_range(
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
) -> tuple[date, date]:
    return analytics.resolve_range(start_date, end_date)


@router.get("/summary")
def get_summary(
    window: tuple[date, date] = Depends(date_range),
    user: UserPrincipal = Depends(current_user),
    db: Session = Depends(get_db),
):
    return success(AnalyticsSummary(**analytics.summary(db, user.customer_id, *window)))


@router.get("/content")
def get_content_plays(
    limit: int = Query(10, ge=1, le=100),
    window: tuple[date, date] = Depends(date_range),
    user: UserPrincipal = Depends(current_user),
    db: Session = Depends(get_db),
):
    rows = analytics.content_plays(db, user.customer_id, *window, limit=limit)
    return success([ContentPlays(**row) for row in rows])


@router.get("/players")
def get_player_plays(
    window: tuple[date, date] = Depends(date_range),
    user: UserPrincipal = Depends(current_user),
    db: Session = Depends(get_db),
):
    rows = analytics.player_plays(db, user.customer_id, *window)
    return success([PlayerPlays(**row) for row in rows])


@router.get("/sites")
def get_site_players(user: UserPrincipal = Depends(current_user), db: Session = Depends(get_db)):
    return success([SitePlayers(**row) for row in analytics.site_players(db, user.customer_id)])


@router.get("/playback-report")
def get_playback_report(
    window: tuple[date, date] = Depends(date_range),
    user: UserPrincipal = Depends(current_user),
    db: Session = Depends(get_db),
):
    rows = analytics.daily_report(db, user.customer_id, *window)
    return success([DailyPlayback(**row) for row in rows])
