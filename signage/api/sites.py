import logging
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from signage.api.deps import SITE_WRITE_ROLES, Page, current_user, ensure_site_access, pagination, require_roles
from signage.db import get_db
from signage.models.customer import Site
from signage.schemas.common import paginated, success
from signage.schemas.customer import SiteCreate, SiteOut, SiteUpdate
from signage.services.auth import UserPrincipal
from signage.services.errors import ConflictError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sites", tags=["sites"])


def _get_site(db: Session, site_id: int, customer_id: int) -> Site:
    site = db.query(Site).filter(Site.id == site_id, Site.customer_id == customer_id).first()
    if not site:
        raise HTTPException(status_code=404, detail="Site not found")
    return site


def _check_time_zone(name: str | None) -> None:
    if name is None:
        return
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=f"Unknown time zone: {name}") from exc


def _check_code_free(db: Session, customer_id: int, site_code: str, site_id: int | None = None) -> None:
    query = db.query(Site.id).filter(Site.customer_id == customer_id, Site.site_code == site_code)
    if site_id is not None:
        query = query.filter(Site.id != site_id)
    if query.first():
        raise ConflictError("Site code already exists", code="SITE_CODE_EXISTS")


@router.get("")
def list_sites(
    page: Page = Depends(pagination),
    user: UserPrincipal = Depends(current_user),
    db: Session = Depends(get_db),
):
    query = db.query(Site).filter(Site.customer_id == user.customer_id)
    if user.role == "SiteManager":
        query = query.filter(Site.id == user.assigned_site_id)
    total = query.count()
    rows = query.order_by(Site.id.asc()).offset(page.offset).limit(page.limit).all()
    return paginated([SiteOut.model_validate(row) for row in rows], total, page.page, page.limit)


@router.post("", status_code=201)
def create_site(
    payload: SiteCreate,
    user: UserPrincipal = Depends(require_roles("Admin", "Editor")),
    db: Session = Depends(get_db),
):
    _check_time_zone(payload.time_zone)
    _check_code_free(db, user.customer_id, payload.site_code)
    site = Site(customer_id=user.customer_id, **payload.model_dump())
    db.add(site)
    db.commit()
    db.refresh(site)
    logger.info("Created site %s", site.id)
    return success(SiteOut.model_validate(site))


@router.get("/{site_id}")
def get_site(site_id: int, user: UserPrincipal = Depends(current_user), db: Session = Depends(get_db)):
    ensure_site_access(user, site_id)
    return success(SiteOut.model_validate(_get_site(db, site_id, user.customer_id)))


@router.put("/{site_id}")
def update_site(
    site_id: int,
    payload: SiteUpdate,
    user: UserPrincipal = Depends(require_roles(*SITE_WRITE_ROLES)),
    db: Session = Depends(get_db),
):
    ensure_site_access(user, site_id)
    site = _get_site(db, site_id, user.customer_id)
    changes = payload.model_dump(exclude_unset=True)
    _check_time_zone(changes.get("time_zone"))
    if changes.get("site_code"):
        _check_code_free(db, user.customer_id, changes["site_code"], site_id)
    for field, value in changes.items():
        setattr(site, field, value)
    db.commit()
    db.refresh(site)
    logger.info("Updated site %s", site.id)
    return success(SiteOut.model_validate(site))


@router.delete("/{site_id}")
def delete_site(
    site_id: int,
    user: UserPrincipal = Depends(require_roles("Admin")),
    db: Session = Depends(get_db),
):
    site = _get_site(db, site_id, user.customer_id)
    db.delete(site)
    db.commit()
    logger.info("Deleted site %s", site_id)
    return success(message="Site deleted")
