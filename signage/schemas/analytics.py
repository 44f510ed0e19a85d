from datetime import date

from signage.schemas.common import APIModel


class AnalyticsSummary(APIModel):
    total_plays: int
    total_duration: int
    unique_players: int
    online_players: int
    total_players: int
    start_date: date
    end_date: date


class ContentPlays(APIModel):
    content_id: int
    name: str | None = None
    play_count: int
    total_duration: int


class PlayerPlays(APIModel):
    player_id: int
    name: str
    status: str
    play_count: int
    total_duration: int


class SitePlayers(APIModel):
    site_id: int
    name: str
    player_count: int
    online_count: int
    play_count: int


class DailyPlayback(APIModel):
    day: date
    play_count: int
    total_duration: int
    completed_count: int
