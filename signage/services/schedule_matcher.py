"""
Decides whether a schedule applies at a given instant.

Every temporal field on a schedule is optional; a missing field leaves that
dimension unconstrained. Bounds are inclusive. A time window whose end is
earlier than its start wraps past midnight (22:00 -> 06:00).
"""
from collections.abc import Iterable
from datetime import date, datetime, time

WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_WEEKDAY_INDEX = {name.lower(): index for index, name in enumerate(WEEKDAY_NAMES)}


def parse_days_of_week(value: str | Iterable[str] | None) -> set[int] | None:
    """Return weekday numbers (Mon=0) or None when every day is allowed."""
    if value is None:
        return None
    tokens = value.split(",") if isinstance(value, str) else list(value)
    cleaned = [str(token).strip().lower() for token in tokens if str(token).strip()]
    if not cleaned:
        return None
    return {_WEEKDAY_INDEX[token] for token in cleaned if token in _WEEKDAY_INDEX}


def invalid_day_tokens(value: str) -> list[str]:
    return [
        token.strip()
        for token in value.split(",")
        if token.strip() and token.strip().lower() not in _WEEKDAY_INDEX
    ]


def _as_date(value) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _as_time(value) -> time | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value
    return time.fromisoformat(str(value))


def date_in_range(schedule, today: date) -> bool:
    start = _as_date(schedule.start_date)
    end = _as_date(schedule.end_date)
    if start is not None and today < start:
        return False
    if end is not None and today > end:
        return False
    return True


def time_in_window(schedule, moment: time) -> bool:
    start = _as_time(schedule.start_time)
    end = _as_time(schedule.end_time)
    moment = moment.replace(tzinfo=None)
    if start is None and end is None:
        return True
    if start is None:
        return moment <= end
    if end is None:
        return moment >= start
    if start <= end:
        return start <= moment <= end
    return moment >= start or moment <= end


def weekday_allowed(schedule, today: date) -> bool:
    allowed = parse_days_of_week(schedule.days_of_week)
    if allowed is None:
        return True
    return today.weekday() in allowed


def is_active_now(schedule, now: datetime) -> bool:
    if not schedule.is_active:
        return False
    today = now.date()
    return (
        date_in_range(schedule, today)
        and weekday_allowed(schedule, today)
        and time_in_window(schedule, now.time())
    )
