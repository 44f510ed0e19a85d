from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from signage.models.schedule import Schedule, ScheduleAssignment
from signage.services.schedule_resolver import ScheduleCandidate, ScopeTier


class ScheduleRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_assignable_for_player(self, player) -> list[ScheduleCandidate]:
        """Active schedules reaching the player directly, via its site, or via its customer."""
        rows = (
            self.db.query(Schedule, ScheduleAssignment.assignment_type)
            .join(ScheduleAssignment, ScheduleAssignment.schedule_id == Schedule.id)
            .filter(
                Schedule.customer_id == player.customer_id,
                Schedule.is_active.is_(True),
                or_(
                    and_(
                        ScheduleAssignment.assignment_type == "Player",
                        ScheduleAssignment.target_player_id == player.id,
                    ),
                    and_(
                        ScheduleAssignment.assignment_type == "Site",
                        ScheduleAssignment.target_site_id == player.site_id,
                    ),
                    and_(
                        ScheduleAssignment.assignment_type == "Customer",
                        ScheduleAssignment.target_customer_id == player.customer_id,
                    ),
                ),
            )
            .order_by(Schedule.id.asc(), ScheduleAssignment.id.asc())
            .all()
        )
        return [
            ScheduleCandidate(schedule=schedule, tier=ScopeTier.from_assignment_type(assignment_type))
            for schedule, assignment_type in rows
        ]
