import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from signage.api.deps import current_user, require_roles
from signage.db import get_db
from signage.models.customer import Customer
from signage.schemas.common import success
from signage.schemas.customer import CustomerOut, CustomerUpdate
from signage.services.auth import UserPrincipal

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers", tags=["customers"])


def _current(db: Session, customer_id: int) -> Customer:
    customer = db.query(Customer).filter(Customer.id == customer_id).first()
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


@router.get("/current")
def get_current_customer(user: UserPrincipal = Depends(current_user), db: Session = Depends(get_db)):
    return success(CustomerOut.model_validate(_current(db, user.customer_id)))


@router.put("/current")
def update_current_customer(
    payload: CustomerUpdate,
    user: UserPrincipal = Depends(require_roles("Admin")),
    db: Session = Depends(get_db),
):
    customer = _current(db, user.customer_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        if field == "name" and value is not None:
            value = value.strip()
            if not value:
                raise HTTPException(status_code=400, detail="Customer name cannot be empty")
        setattr(customer, field, value)
    db.commit()
    db.refresh(customer)
    logger.info("Updated customer %s", customer.id)
    return success(CustomerOut.model_validate(customer))
