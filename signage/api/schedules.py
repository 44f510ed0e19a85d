import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from sqlalchemy.orm import Session, selectinload

from signage.api.deps import WRITE_ROLES, Page, current_user, pagination, require_roles
from signage.db import get_db
from signage.models.customer import Site
from signage.models.layout import Layout
from signage.models.player import Player
from signage.models.schedule import Schedule, ScheduleAssignment
from signage.schemas.common import paginated, success
from signage.schemas.layout import LayoutWithLayersOut
from signage.schemas.player_device import ContentEntryOut
from signage.schemas.schedule import (
    ScheduleAssignmentCreate,
    ScheduleAssignmentOut,
    ScheduleCreate,
    ScheduleOut,
    ScheduleUpdate,
    ScheduleWithAssignmentsOut,
)
from signage.services.auth import UserPrincipal
from signage.services.player_schedule import build_player_schedule
from signage.services.webhooks import dispatch_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schedules", tags=["schedules"])

writers = require_roles(*WRITE_ROLES)


def _get_schedule(db: Session, schedule_id: int, customer_id: int) -> Schedule:
    schedule = (
        db.query(Schedule)
        .options(selectinload(Schedule.assignments))
        .filter(Schedule.id == schedule_id, Schedule.customer_id == customer_id)
        .first()
    )
    if not schedule:
        raise HTTPException(status_code=404, detail="Schedule not found")
    return schedule


def _check_layout(db: Session, layout_id: int, customer_id: int) -> None:
    if not db.query(Layout.id).filter(Layout.id == layout_id, Layout.customer_id == customer_id).first():
        raise HTTPException(status_code=400, detail="Layout not found")


def _check_target(db: Session, payload: ScheduleAssignmentCreate, customer_id: int) -> None:
    if payload.assignment_type == "Customer" and payload.target_customer_id != customer_id:
        raise HTTPException(status_code=400, detail="Target customer must be your own customer")
    if payload.assignment_type == "Site":
        found = db.query(Site.id).filter(Site.id == payload.target_site_id, Site.customer_id == customer_id).first()
        if not found:
            raise HTTPException(status_code=400, detail="Target site not found")
    if payload.assignment_type == "Player":
        found = (
            db.query(Player.id)
            .filter(Player.id == payload.target_player_id, Player.customer_id == customer_id)
            .first()
        )
        if not found:
            raise HTTPException(status_code=400, detail="Target player not found")


def _changed(background_tasks: BackgroundTasks, schedule: Schedule, action: str) -> None:
    background_tasks.add_task(
        dispatch_event,
        schedule.customer_id,
        "schedule.updated",
        {"scheduleId": schedule.id, "name": schedule.name, "action": action},
    )


@router.get("")
def list_schedules(
    is_active: bool | None = Query(None, alias="isActive"),
    page: Page = Depends(pagination),
    user: UserPrincipal = Depends(current_user),
    db: Session = Depends(get_db),
):
    query = db.query(Schedule).filter(Schedule.customer_id == user.customer_id)
    if is_active is not None:
        query = query.filter(Schedule.is_active.is_(is_active))
    total = query.count()
    rows = (
        query.order_by(Schedule.priority.desc(), Schedule.id.asc())
        .offset(page.offset)
        .limit(page.limit)
        .all()
    )
    return paginated([ScheduleOut.model_validate(row) for row in rows], total, page.page, page.limit)


@router.post("", status_code=201)
def create_schedule(
    payload: ScheduleCreate,
    background_tasks: BackgroundTasks,
    user: UserPrincipal = Depends(writers),
    db: Session = Depends(get_db),
):
    _check_layout(db, payload.layout_id, user.customer_id)
    schedule = Schedule(customer_id=user.customer_id, created_by=user.user_id, **payload.model_dump())
    db.add(schedule)
    db.commit()
    db.refresh(schedule)
    logger.info("Created schedule %s", schedule.id)
    _changed(background_tasks, schedule, "created")
    return success(ScheduleOut.model_validate(schedule))


@router.get("/preview/{player_id}")
def preview_for_player(player_id: int, user: UserPrincipal = Depends(current_user), db: Session = Depends(get_db)):
    player = db.query(Player).filter(Player.id == player_id, Player.customer_id == user.customer_id).first()
    if not player:
        raise HTTPException(status_code=404, detail="Player not found")
    resolved = build_player_schedule(db, player)
    return success(
        {
            "schedule": ScheduleOut.model_validate(resolved["schedule"]),
            "layout": LayoutWithLayersOut.model_validate(resolved["layout"]),
            "content": [ContentEntryOut.model_validate(entry) for entry in resolved["content"]],
        }
    )


@router.get("/{schedule_id}")
def get_schedule(schedule_id: int, user: UserPrincipal = Depends(current_user), db: Session = Depends(get_db)):
    return success(ScheduleWithAssignmentsOut.model_validate(_get_schedule(db, schedule_id, user.customer_id)))


@router.put("/{schedule_id}")
def update_schedule(
    schedule_id: int,
    payload: ScheduleUpdate,
    background_tasks: BackgroundTasks,
    user: UserPrincipal = Depends(writers),
    db: Session = Depends(get_db),
):
    schedule = _get_schedule(db, schedule_id, user.customer_id)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("layout_id") is not None:
        _check_layout(db, changes["layout_id"], user.customer_id)
    if "name" in changes:
        cleaned = (changes["name"] or "").strip()
        if not cleaned:
            raise HTTPException(status_code=400, detail="Schedule name is required")
        changes["name"] = cleaned

    start_date = changes.get("start_date", schedule.start_date)
    end_date = changes.get("end_date", schedule.end_date)
    if start_date and end_date and end_date < start_date:
        raise HTTPException(status_code=400, detail="End date must be on or after start date")

    for field, value in changes.items():
        setattr(schedule, field, value)
    db.commit()
    db.refresh(schedule)
    logger.info("Updated schedule %s", schedule.id)
    _changed(background_tasks, schedule, "updated")
    return success(ScheduleOut.model_validate(schedule))


@router.delete("/{schedule_id}")
def delete_schedule(
    schedule_id: int,
    background_tasks: BackgroundTasks,
    user: UserPrincipal = Depends(writers),
    db: Session = Depends(get_db),
):
    schedule = _get_schedule(db, schedule_id, user.customer_id)
    _changed(background_tasks, schedule, "deleted")
    db.delete(schedule)
    db.commit()
    logger.info("Deleted schedule %s", schedule_id)
    return success(message="Schedule deleted")


@router.post("/{schedule_id}/assignments", status_code=201)
def create_assignment(
    schedule_id: int,
    payload: ScheduleAssignmentCreate,
    background_tasks: BackgroundTasks,
    user: UserPrincipal = Depends(writers),
    db: Session = Depends(get_db),
):
    schedule = _get_schedule(db, schedule_id, user.customer_id)
    _check_target(db, payload, user.customer_id)
    assignment = ScheduleAssignment(schedule_id=schedule.id, **payload.model_dump())
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    logger.info("Assigned schedule %s to %s", schedule.id, payload.assignment_type)
    _changed(background_tasks, schedule, "assigned")
    return success(ScheduleAssignmentOut.model_validate(assignment))


@router.delete("/{schedule_id}/assignments/{assignment_id}")
def delete_assignment(
    schedule_id: int,
    assignment_id: int,
    background_tasks: BackgroundTasks,
    user: UserPrincipal = Depends(writers),
    db: Session = Depends(get_db),
):
    schedule = _get_schedule(db, schedule_id, user.customer_id)
    assignment = (
        db.query(ScheduleAssignment)
        .filter(ScheduleAssignment.id == assignment_id, ScheduleAssignment.schedule_id == schedule.id)
        .first()
    )
    if not assignment:
        raise HTTPException(status_code=404, detail="Assignment not found")
    db.delete(assignment)
    db.commit()
    _changed(background_tasks, schedule, "unassigned")
    return success(message="Assignment deleted")
