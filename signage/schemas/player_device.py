from datetime import datetime
from typing import Any, Literal

from pydantic import Field, model_validator

from signage.schemas.common import APIModel
from signage.schemas.layout import LayoutWithLayersOut
from signage.schemas.schedule import ScheduleOut


class HeartbeatIn(APIModel):
    status: Literal["Online", "Offline", "Error"] = "Online"
    ip_address: str | None = Field(None, max_length=50)
    player_version: str | None = Field(None, max_length=50)
    os_version: str | None = Field(None, max_length=50)
    screen_resolution: str | None = Field(None, max_length=20)


class HeartbeatOut(APIModel):
    player_id: int
    status: str
    last_heartbeat: datetime


class ContentEntryOut(APIModel):
    content_id: int
    name: str
    content_type: str
    file_url: str | None
    duration: int
    display_order: int
    transition_type: str
    transition_duration: int
    thumbnail_url: str | None = None
    mime_type: str | None = None
    file_size: int | None = None
    width: int | None = None
    height: int | None = None


class PlayerScheduleOut(APIModel):
    schedule: ScheduleOut
    layout: LayoutWithLayersOut
    content: list[ContentEntryOut]


class PlayerLogIn(APIModel):
    level: Literal["debug", "info", "warning", "error"] = "info"
    message: str = Field(..., min_length=1, max_length=5000)
    context: dict[str, Any] | None = None


class PlayerLogsIn(APIModel):
    logs: list[PlayerLogIn] = Field(..., min_length=1, max_length=500)


class ProofOfPlayIn(APIModel):
    layout_id: int | None = Field(None, gt=0)
    playlist_id: int | None = Field(None, gt=0)
    schedule_id: int | None = Field(None, gt=0)
    content_id: int | None = Field(None, gt=0)
    playback_start_time: datetime
    playback_end_time: datetime | None = None
    duration: int | None = Field(None, ge=0)
    is_completed: bool = False

    @model_validator(mode="after")
    def _end_after_start(self):
        if self.playback_end_time is not None and self.playback_end_time < self.playback_start_time:
            raise ValueError("playbackEndTime must not precede playbackStartTime")
        return self


class ProofOfPlayOut(APIModel):
    id: int
    player_id: int
    layout_id: int | None = None
    playlist_id: int | None = None
    schedule_id: int | None = None
    content_id: int | None = None
    playback_start_time: datetime
    playback_end_time: datetime | None = None
    duration: int | None = None
    is_completed: bool
