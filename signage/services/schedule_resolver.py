import logging
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from typing import Any, Protocol

from signage.services.schedule_matcher import is_active_now

logger = logging.getLogger(__name__)


class ScopeTier(IntEnum):
    PLAYER = 0
    SITE = 1
    CUSTOMER = 2

    @classmethod
    def from_assignment_type(cls, assignment_type: str) -> "ScopeTier":
        return cls[assignment_type.strip().upper()]

    @property
    def assignment_type(self) -> str:
        return self.name.title()


@dataclass(frozen=True)
class ScheduleCandidate:
    schedule: Any
    tier: ScopeTier


class ScheduleStore(Protocol):
    def find_assignable_for_player(self, player) -> list[ScheduleCandidate]:
        ...


def _rank(candidate: ScheduleCandidate) -> tuple[int, int, int]:
    schedule = candidate.schedule
    return int(candidate.tier), -int(schedule.priority or 0), int(schedule.id)


def select_candidate(candidates: list[ScheduleCandidate], now: datetime) -> ScheduleCandidate | None:
    # Scope tier beats the schedule's own priority; lowest id settles exact ties.
    active = [candidate for candidate in candidates if is_active_now(candidate.schedule, now)]
    if not active:
        return None
    return min(active, key=_rank)


def resolve_candidate(store: ScheduleStore, player, now: datetime) -> ScheduleCandidate | None:
    candidates = store.find_assignable_for_player(player)
    winner = select_candidate(candidates, now)
    logger.info(
        "Resolved schedule for player %s: %s (%d candidates)",
        player.id,
        winner.schedule.id if winner else "none",
        len(candidates),
    )
    return winner


def resolve_for_player(store: ScheduleStore, player, now: datetime):
    winner = resolve_candidate(store, player, now)
    return winner.schedule if winner else None
