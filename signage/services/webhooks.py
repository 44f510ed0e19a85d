import hashlib
import hmac
import json
import logging
import secrets
import time
from datetime import datetime, timezone

import requests
from sqlalchemy.orm import Session

from signage.db import SessionLocal
from signage.models.webhook import Webhook, WebhookDelivery
from signage.settings import WEBHOOK_TIMEOUT_SEC

logger = logging.getLogger(__name__)

USER_AGENT = "DigitalSignage-Webhook/1.0"
MAX_RESPONSE_CHARS = 4000


def generate_secret() -> str:
    return secrets.token_hex(32)


def sign(body: str, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), body.encode("utf-8"), hashlib.sha256).hexdigest()


def event_list(webhook: Webhook) -> list[str]:
    return [event for event in (webhook.events or "").split(",") if event]


def build_payload(event: str, customer_id: int, data: dict) -> str:
    payload = {
        "event": event,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "customerId": customer_id,
        "data": data,
    }
    return json.dumps(payload, separators=(",", ":"), default=str)


def _post(webhook: Webhook, event: str, body: str) -> requests.Response:
    return requests.post(
        webhook.url,
        data=body.encode("utf-8"),
        headers={
            "Content-Type": "application/json",
            "X-Webhook-Signature": sign(body, webhook.secret),
            "X-Webhook-Event": event,
            "User-Agent": USER_AGENT,
        },
        timeout=WEBHOOK_TIMEOUT_SEC,
    )


def deliver(db: Session, webhook: Webhook, event: str, body: str) -> WebhookDelivery:
    """POST one event to one webhook and record the outcome. Never retried."""
    delivery = WebhookDelivery(webhook_id=webhook.id, event=event, payload=body, success=False)
    db.add(delivery)
    db.flush()

    try:
        response = _post(webhook, event, body)
    except requests.RequestException as exc:
        delivery.status_code = 0
        delivery.response = str(exc)[:MAX_RESPONSE_CHARS]
        logger.warning("Webhook %s delivery %s failed: %s", webhook.id, delivery.id, exc)
    else:
        delivery.status_code = response.status_code
        delivery.response = (response.text or "")[:MAX_RESPONSE_CHARS]
        delivery.success = response.ok
        if not response.ok:
            logger.warning(
                "Webhook %s delivery %s rejected with HTTP %s", webhook.id, delivery.id, response.status_code
            )

    delivery.delivered_at = datetime.utcnow()
    webhook.last_triggered_at = delivery.delivered_at
    webhook.failure_count = 0 if delivery.success else (webhook.failure_count or 0) + 1
    db.commit()
    return delivery


def subscribed_webhooks(db: Session, customer_id: int, event: str) -> list[Webhook]:
    candidates = (
        db.query(Webhook)
        .filter(Webhook.customer_id == customer_id, Webhook.is_active.is_(True))
        .order_by(Webhook.id.asc())
        .all()
    )
    return [webhook for webhook in candidates if event in event_list(webhook)]


def dispatch_event(customer_id: int, event: str, data: dict) -> int:
    """Deliver an event to every subscribed webhook; returns how many were attempted.

    Runs outside the request cycle, so it opens its own session.
    """
    db = SessionLocal()
    try:
        webhooks = subscribed_webhooks(db, customer_id, event)
        if not webhooks:
            logger.debug("No webhooks subscribed to %s for customer %s", event, customer_id)
            return 0
        body = build_payload(event, customer_id, data)
        for webhook in webhooks:
            deliver(db, webhook, event, body)
        logger.info("Triggered %d webhooks for event %s", len(webhooks), event)
        return len(webhooks)
    finally:
        db.close()


def send_test(webhook: Webhook) -> dict:
    body = build_payload(
        "player.online",
        webhook.customer_id,
        {"test": True, "message": "This is a test webhook delivery"},
    )
    started = time.monotonic()
    try:
        response = _post(webhook, "player.online", body)
    except requests.RequestException as exc:
        logger.warning("Webhook %s test failed: %s", webhook.id, exc)
        return {
            "success": False,
            "status_code": None,
            "response_time_ms": int((time.monotonic() - started) * 1000),
            "error": str(exc),
        }
    return {
        "success": response.ok,
        "status_code": response.status_code,
        "response_time_ms": int((time.monotonic() - started) * 1000),
        "error": None if response.ok else f"HTTP {response.status_code}",
    }
