import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from signage.api.deps import current_user
from signage.db import get_db
from signage.models.customer import Customer
from signage.models.user import User
from signage.schemas.auth import LoginIn, RefreshIn, RegisterIn, TokensOut, UserOut
from signage.schemas.common import success
from signage.services.auth import (
    USER_REFRESH,
    UserPrincipal,
    decode_token,
    hash_password,
    issue_user_tokens,
    verify_password,
)
from signage.services.errors import ConflictError, UnauthorizedError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _tokens(user: User) -> TokensOut:
    return TokensOut(**issue_user_tokens(user), user=UserOut.model_validate(user))


@router.post("/register", status_code=201)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    customer = db.query(Customer).filter(Customer.subdomain == payload.subdomain).first()
    role = "Viewer"
    if customer is None:
        customer = Customer(name=payload.subdomain, subdomain=payload.subdomain, contact_email=email)
        db.add(customer)
        db.flush()
        logger.info("Created customer %s (%s)", customer.id, customer.subdomain)
    elif not customer.is_active:
        raise HTTPException(status_code=403, detail="Customer account is inactive")

    existing = db.query(User).filter(User.customer_id == customer.id, User.email == email).first()
    if existing is not None:
        raise ConflictError("Email already registered", code="EMAIL_EXISTS")
    if db.query(User).filter(User.customer_id == customer.id).count() == 0:
        role = "Admin"

    user = User(
        customer_id=customer.id,
        email=email,
        password_hash=hash_password(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s for customer %s as %s", user.id, customer.id, role)
    return success(_tokens(user), message="Registration successful")


@router.post("/login")
def login(payload: LoginIn, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    user = (
        db.query(User)
        .join(Customer, Customer.id == User.customer_id)
        .filter(Customer.subdomain == payload.subdomain, User.email == email)
        .first()
    )
    if user is None or not verify_password(user.password_hash, payload.password):
        logger.warning("Failed login for %s on %s", email, payload.subdomain)
        raise UnauthorizedError("Invalid credentials", code="INVALID_CREDENTIALS")
    if not user.is_active:
        raise UnauthorizedError("User account is inactive", code="ACCOUNT_INACTIVE")

    user.last_login_at = datetime.utcnow()
    db.commit()
    db.refresh(user)
    return success(_tokens(user))


@router.post("/refresh")
def refresh(payload: RefreshIn, db: Session = Depends(get_db)):
    claims = decode_token(payload.refresh_token, USER_REFRESH)
    user = db.query(User).filter(User.id == int(claims["sub"])).first()
    if user is None or not user.is_active:
        raise UnauthorizedError("User not found or inactive", code="INVALID_TOKEN")
    return success(_tokens(user))


@router.get("/me")
def me(principal: UserPrincipal = Depends(current_user), db: Session = Depends(get_db)):
    user = db.query(User).filter(User.id == principal.user_id).first()
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return success(UserOut.model_validate(user))
