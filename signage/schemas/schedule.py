from datetime import date, datetime, time
from typing import Literal

from pydantic import Field, field_validator, model_validator

from signage.schemas.common import APIModel, UpdateModel
from signage.services.schedule_matcher import WEEKDAY_NAMES, invalid_day_tokens

AssignmentType = Literal["Customer", "Site", "Player"]


def _normalize_days(value: str | None) -> str | None:
    if value is None:
        return None
    bad = invalid_day_tokens(value)
    if bad:
        raise ValueError(f"Invalid days of week: {', '.join(bad)}. Use {','.join(WEEKDAY_NAMES)}")
    wanted = {token.strip().lower() for token in value.split(",") if token.strip()}
    ordered = [name for name in WEEKDAY_NAMES if name.lower() in wanted]
    return ",".join(ordered) or None


class ScheduleAssignmentOut(APIModel):
    id: int
    schedule_id: int
    assignment_type: str
    target_customer_id: int | None = None
    target_site_id: int | None = None
    target_player_id: int | None = None
    created_at: datetime | None = None


class ScheduleOut(APIModel):
    id: int
    customer_id: int
    name: str
    layout_id: int
    priority: int
    start_date: date | None = None
    end_date: date | None = None
    start_time: time | None = None
    end_time: time | None = None
    days_of_week: str | None = None
    is_active: bool
    created_by: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ScheduleWithAssignmentsOut(ScheduleOut):
    assignments: list[ScheduleAssignmentOut] = []


class ScheduleCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=255)
    layout_id: int = Field(..., gt=0)
    priority: int = Field(0, ge=0, le=100)
    start_date: date | None = None
    end_date: date | None = None
    start_time: time | None = None
    end_time: time | None = None
    days_of_week: str | None = None
    is_active: bool = True

    _days = field_validator("days_of_week")(_normalize_days)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Schedule name is required")
        return cleaned

    @model_validator(mode="after")
    def _check_date_range(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("End date must be on or after start date")
        return self


class ScheduleUpdate(UpdateModel):
    not_nullable = ("name", "layout_id", "priority", "is_active")

    name: str | None = Field(None, min_length=1, max_length=255)
    layout_id: int | None = Field(None, gt=0)
    priority: int | None = Field(None, ge=0, le=100)
    start_date: date | None = None
    end_date: date | None = None
    start_time: time | None = None
    end_time: time | None = None
    days_of_week: str | None = None
    is_active: bool | None = None

    _days = field_validator("days_of_week")(_normalize_days)


class ScheduleAssignmentCreate(APIModel):
    assignment_type: AssignmentType
    target_customer_id: int | None = Field(None, gt=0)
    target_site_id: int | None = Field(None, gt=0)
    target_player_id: int | None = Field(None, gt=0)

    @model_validator(mode="after")
    def _exactly_one_target(self):
        targets = {
            "Customer": self.target_customer_id,
            "Site": self.target_site_id,
            "Player": self.target_player_id,
        }
        if targets[self.assignment_type] is None:
            raise ValueError(f"Target {self.assignment_type.lower()} ID is required for {self.assignment_type} assignment")
        others = [kind for kind, value in targets.items() if kind != self.assignment_type and value is not None]
        if others:
            raise ValueError("Exactly one assignment target may be set")
        return self
