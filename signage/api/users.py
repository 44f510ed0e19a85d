import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from signage.api.deps import Page, pagination, require_roles
from signage.db import get_db
from signage.models.customer import Site
from signage.models.user import User
from signage.schemas.auth import UserCreate, UserOut, UserUpdate
from signage.schemas.common import paginated, success
from signage.services.auth import UserPrincipal, hash_password
from signage.services.errors import ConflictError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

admin_only = require_roles("Admin")


def _get_user(db: Session, user_id: int, customer_id: int) -> User:
    user = db.query(User).filter(User.id == user_id, User.customer_id == customer_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def _check_site(db: Session, site_id: int | None, customer_id: int) -> None:
    if site_id is None:
        return
    if not db.query(Site.id).filter(Site.id == site_id, Site.customer_id == customer_id).first():
        raise HTTPException(status_code=400, detail="Assigned site not found")


@router.get("")
def list_users(
    page: Page = Depends(pagination),
    admin: UserPrincipal = Depends(admin_only),
    db: Session = Depends(get_db),
):
    query = db.query(User).filter(User.customer_id == admin.customer_id)
    total = query.count()
    rows = query.order_by(User.id.asc()).offset(page.offset).limit(page.limit).all()
    return paginated([UserOut.model_validate(row) for row in rows], total, page.page, page.limit)


@router.post("", status_code=201)
def create_user(payload: UserCreate, admin: UserPrincipal = Depends(admin_only), db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    if db.query(User.id).filter(User.customer_id == admin.customer_id, User.email == email).first():
        raise ConflictError("Email already registered", code="EMAIL_EXISTS")
    if payload.role == "SiteManager" and payload.assigned_site_id is None:
        raise HTTPException(status_code=400, detail="SiteManager users need an assigned site")
    _check_site(db, payload.assigned_site_id, admin.customer_id)
    user = User(
        customer_id=admin.customer_id,
        email=email,
        password_hash=hash_password(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
        role=payload.role,
        assigned_site_id=payload.assigned_site_id,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created user %s", user.id)
    return success(UserOut.model_validate(user))


@router.get("/{user_id}")
def get_user(user_id: int, admin: UserPrincipal = Depends(admin_only), db: Session = Depends(get_db)):
    return success(UserOut.model_validate(_get_user(db, user_id, admin.customer_id)))


@router.put("/{user_id}")
def update_user(
    user_id: int,
    payload: UserUpdate,
    admin: UserPrincipal = Depends(admin_only),
    db: Session = Depends(get_db),
):
    user = _get_user(db, user_id, admin.customer_id)
    changes = payload.model_dump(exclude_unset=True)
    if "assigned_site_id" in changes:
        _check_site(db, changes["assigned_site_id"], admin.customer_id)
    password = changes.pop("password", None)
    if password:
        user.password_hash = hash_password(password)
    for field, value in changes.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    logger.info("Updated user %s", user.id)
    return success(UserOut.model_validate(user))


@router.delete("/{user_id}")
def delete_user(user_id: int, admin: UserPrincipal = Depends(admin_only), db: Session = Depends(get_db)):
    if user_id == admin.user_id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")
    user = _get_user(db, user_id, admin.customer_id)
    db.delete(user)
    db.commit()
    logger.info("Deleted user %s", user_id)
    return success(message="User deleted")
