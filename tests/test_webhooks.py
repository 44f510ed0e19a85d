import hashlib
import hmac
import json

import pytest
import requests

from signage.models.webhook import Webhook, WebhookDelivery
from signage.services import webhooks


class FakeResponse:
    def __init__(self, status_code=200, text="ok"):
        self.status_code = status_code
        self.text = text

    @property
    def ok(self):
        return self.status_code < 400


@pytest.fixture
def sent(monkeypatch):
    calls = []

    def fake_post(url, data=None, headers=None, timeout=None):
        calls.append({"url": url, "body": data.decode("utf-8"), "headers": headers, "timeout": timeout})
        return FakeResponse()

    monkeypatch.setattr(webhooks.requests, "post", fake_post)
    return calls


@pytest.fixture
def hook(db, tenant):
    row = Webhook(
        customer_id=tenant.customer.id,
        name="Ops",
        url="https://hooks.example.com/signage",
        secret="s" * 32,
        events="player.online,content.uploaded",
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def test_signature_is_hex_hmac_sha256_of_the_body():
    body = '{"event":"player.online"}'
    expected = hmac.new(b"topsecret", body.encode(), hashlib.sha256).hexdigest()
    assert webhooks.sign(body, "topsecret") == expected


def test_dispatch_posts_signed_payload_and_records_delivery(db, tenant, hook, sent):
    attempted = webhooks.dispatch_event(tenant.customer.id, "player.online", {"playerId": 7})
    assert attempted == 1

    call = sent[0]
    assert call["url"] == hook.url
    assert call["headers"]["X-Webhook-Event"] == "player.online"
    assert call["headers"]["User-Agent"] == "DigitalSignage-Webhook/1.0"
    assert call["headers"]["X-Webhook-Signature"] == webhooks.sign(call["body"], hook.secret)
    payload = json.loads(call["body"])
    assert payload["event"] == "player.online"
    assert payload["customerId"] == tenant.customer.id
    assert payload["data"] == {"playerId": 7}

    delivery = db.query(WebhookDelivery).one()
    assert delivery.success is True
    assert delivery.status_code == 200


def test_unsubscribed_events_are_not_sent(tenant, hook, sent):
    assert webhooks.dispatch_event(tenant.customer.id, "schedule.updated", {}) == 0
    assert sent == []


def test_inactive_webhooks_are_skipped(db, tenant, hook, sent):
    hook.is_active = False
    db.commit()
    assert webhooks.dispatch_event(tenant.customer.id, "player.online", {}) == 0


def test_failed_delivery_is_recorded_without_retry(db, tenant, hook, monkeypatch):
    attempts = []

    def refuse(*args, **kwargs):
        attempts.append(1)
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(webhooks.requests, "post", refuse)
    webhooks.dispatch_event(tenant.customer.id, "player.online", {})
    assert len(attempts) == 1

    delivery = db.query(WebhookDelivery).one()
    assert delivery.success is False
    assert delivery.status_code == 0
    assert "refused" in delivery.response
    db.refresh(hook)
    assert hook.failure_count == 1


def test_non_2xx_response_is_a_failed_delivery(db, tenant, hook, monkeypatch):
    monkeypatch.setattr(webhooks.requests, "post", lambda *a, **k: FakeResponse(500, "boom"))
    webhooks.dispatch_event(tenant.customer.id, "content.uploaded", {})
    delivery = db.query(WebhookDelivery).one()
    assert delivery.success is False
    assert delivery.status_code == 500


def test_heartbeat_coming_online_fires_player_online(client, db, tenant, hook, sent):
    response = client.post(
        f"/api/v1/player-devices/{tenant.player.id}/heartbeat",
        json={"status": "Online", "ipAddress": "10.0.0.5"},
        headers=tenant.player_headers,
    )
    assert response.status_code == 200
    assert len(sent) == 1
    assert json.loads(sent[0]["body"])["data"]["playerId"] == tenant.player.id

    # Already online: no second event.
    client.post(f"/api/v1/player-devices/{tenant.player.id}/heartbeat", json={}, headers=tenant.player_headers)
    assert len(sent) == 1


def test_create_webhook_generates_secret_once(client, tenant):
    response = client.post(
        "/api/v1/webhooks",
        json={"name": "Slack", "url": "https://example.com/hook", "events": ["schedule.updated"]},
        headers=tenant.admin_headers,
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert len(data["secret"]) == 64
    assert data["events"] == ["schedule.updated"]

    listed = client.get("/api/v1/webhooks", headers=tenant.admin_headers).json()["data"]
    assert "secret" not in listed[0]


@pytest.mark.parametrize(
    "payload",
    [
        {"name": "x", "url": "ftp://example.com", "events": ["player.online"]},
        {"name": "x", "url": "https://example.com", "events": []},
        {"name": "x", "url": "https://example.com", "events": ["player.exploded"]},
    ],
)
def test_invalid_webhooks_are_rejected(client, tenant, payload):
    response = client.post("/api/v1/webhooks", json=payload, headers=tenant.admin_headers)
    assert response.status_code == 400


def test_webhooks_are_admin_only(client, tenant):
    assert client.get("/api/v1/webhooks", headers=tenant.editor_headers).status_code == 403


def test_test_endpoint_and_delivery_history(client, tenant, hook, sent):
    result = client.post(f"/api/v1/webhooks/{hook.id}/test", headers=tenant.admin_headers).json()["data"]
    assert result["success"] is True
    assert result["statusCode"] == 200
    assert json.loads(sent[0]["body"])["data"]["test"] is True

    client.post(
        "/api/v1/content",
        json={"name": "Banner", "contentType": "URL", "fileUrl": "https://example.com/banner"},
        headers=tenant.editor_headers,
    )
    history = client.get(f"/api/v1/webhooks/{hook.id}/deliveries", headers=tenant.admin_headers).json()["data"]
    assert [row["event"] for row in history] == ["content.uploaded"]
