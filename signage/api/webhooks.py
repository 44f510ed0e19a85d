import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from signage.api.deps import require_roles
from signage.db import get_db
from signage.models.webhook import Webhook, WebhookDelivery
from signage.schemas.common import success
from signage.schemas.webhook import (
    WebhookCreate,
    WebhookCreatedOut,
    WebhookDeliveryOut,
    WebhookOut,
    WebhookTestResult,
    WebhookUpdate,
)
from signage.services.auth import UserPrincipal
from signage.services.webhooks import generate_secret, send_test

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])

admin_only = require_roles("Admin")


def _get_webhook(db: Session, webhook_id: int, customer_id: int) -> Webhook:
    webhook = db.query(Webhook).filter(Webhook.id == webhook_id, Webhook.customer_id == customer_id).first()
    if not webhook:
        raise HTTPException(status_code=404, detail="Webhook not found")
    return webhook


@router.get("")
def list_webhooks(admin: UserPrincipal = Depends(admin_only), db: Session = Depends(get_db)):
    rows = db.query(Webhook).filter(Webhook.customer_id == admin.customer_id).order_by(Webhook.id.asc()).all()
    return success([WebhookOut.model_validate(row) for row in rows])


@router.post("", status_code=201)
def create_webhook(payload: WebhookCreate, admin: UserPrincipal = Depends(admin_only), db: Session = Depends(get_db)):
    webhook = Webhook(
        customer_id=admin.customer_id,
        name=payload.name.strip(),
        url=payload.url,
        secret=payload.secret or generate_secret(),
        events=",".join(payload.events),
    )
    db.add(webhook)
    db.commit()
    db.refresh(webhook)
    logger.info("Created webhook %s for customer %s", webhook.id, admin.customer_id)
    # The secret is only ever returned here.
    return success(WebhookCreatedOut.model_validate(webhook))


@router.get("/{webhook_id}")
def get_webhook(webhook_id: int, admin: UserPrincipal = Depends(admin_only), db: Session = Depends(get_db)):
    return success(WebhookOut.model_validate(_get_webhook(db, webhook_id, admin.customer_id)))


@router.put("/{webhook_id}")
def update_webhook(
    webhook_id: int,
    payload: WebhookUpdate,
    admin: UserPrincipal = Depends(admin_only),
    db: Session = Depends(get_db),
):
    webhook = _get_webhook(db, webhook_id, admin.customer_id)
    changes = payload.model_dump(exclude_unset=True)
    if "events" in changes:
        changes["events"] = ",".join(changes["events"])
    for field, value in changes.items():
        setattr(webhook, field, value)
    db.commit()
    db.refresh(webhook)
    logger.info("Updated webhook %s", webhook.id)
    return success(WebhookOut.model_validate(webhook))


@router.delete("/{webhook_id}")
def delete_webhook(webhook_id: int, admin: UserPrincipal = Depends(admin_only), db: Session = Depends(get_db)):
    webhook = _get_webhook(db, webhook_id, admin.customer_id)
    db.delete(webhook)
    db.commit()
    logger.info("Deleted webhook %s", webhook_id)
    return success(message="Webhook deleted")


@router.post("/{webhook_id}/test")
def test_webhook(webhook_id: int, admin: UserPrincipal = Depends(admin_only), db: Session = Depends(get_db)):
    webhook = _get_webhook(db, webhook_id, admin.customer_id)
    return success(WebhookTestResult(**send_test(webhook)))


@router.get("/{webhook_id}/deliveries")
def list_deliveries(
    webhook_id: int,
    limit: int = Query(50, ge=1, le=100),
    admin: UserPrincipal = Depends(admin_only),
    db: Session = Depends(get_db),
):
    webhook = _get_webhook(db, webhook_id, admin.customer_id)
    rows = (
        db.query(WebhookDelivery)
        .filter(WebhookDelivery.webhook_id == webhook.id)
        .order_by(WebhookDelivery.id.desc())
        .limit(limit)
        .all()
    )
    return success([WebhookDeliveryOut.model_validate(row) for row in rows])
