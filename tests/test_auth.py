from datetime import datetime, timedelta

import jwt
import pytest

from signage.models.player import Player, PlayerToken
from signage.services.auth import (
    PlayerPrincipal,
    UserPrincipal,
    decode_principal,
    issue_player_access_token,
    issue_user_tokens,
)
from signage.services.errors import UnauthorizedError
from signage.settings import JWT_SECRET


def register(client, subdomain="newco", email="owner@newco.test", password="long-enough-1"):
    return client.post(
        "/api/v1/auth/register",
        json={"subdomain": subdomain, "email": email, "password": password, "firstName": "Ada"},
    )


def test_first_registered_user_becomes_admin(client):
    response = register(client)
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["user"]["role"] == "Admin"
    assert data["user"]["firstName"] == "Ada"
    assert data["accessToken"] and data["refreshToken"]

    second = register(client, email="staff@newco.test")
    assert second.json()["data"]["user"]["role"] == "Viewer"


def test_duplicate_email_is_a_conflict(client):
    register(client)
    response = register(client)
    assert response.status_code == 409
    assert response.json()["code"] == "EMAIL_EXISTS"


def test_short_password_is_rejected(client):
    response = register(client, password="short")
    assert response.status_code == 400
    assert response.json()["status"] == "error"


def test_login_refresh_and_me(client):
    register(client)
    login = client.post(
        "/api/v1/auth/login",
        json={"subdomain": "newco", "email": "Owner@NewCo.test", "password": "long-enough-1"},
    )
    assert login.status_code == 200
    tokens = login.json()["data"]

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {tokens['accessToken']}"})
    assert me.json()["data"]["email"] == "owner@newco.test"
    assert me.json()["data"]["lastLoginAt"] is not None

    refreshed = client.post("/api/v1/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
    assert refreshed.status_code == 200
    assert refreshed.json()["data"]["accessToken"] != tokens["accessToken"]


def test_wrong_password_is_401(client):
    register(client)
    response = client.post(
        "/api/v1/auth/login",
        json={"subdomain": "newco", "email": "owner@newco.test", "password": "nope-nope-nope"},
    )
    assert response.status_code == 401
    assert response.json()["code"] == "INVALID_CREDENTIALS"


def test_access_token_cannot_be_used_as_refresh_token(client):
    tokens = register(client).json()["data"]
    response = client.post("/api/v1/auth/refresh", json={"refreshToken": tokens["accessToken"]})
    assert response.status_code == 401


def test_decode_principal_dispatches_on_token_type(tenant):
    user = decode_principal(issue_user_tokens(tenant.admin)["access_token"])
    player = decode_principal(issue_player_access_token(tenant.player))
    assert user == UserPrincipal(
        user_id=tenant.admin.id,
        customer_id=tenant.customer.id,
        email=tenant.admin.email,
        role="Admin",
        assigned_site_id=None,
    )
    assert player == PlayerPrincipal(
        player_id=tenant.player.id,
        customer_id=tenant.customer.id,
        site_id=tenant.site.id,
    )


def test_player_claims_signed_with_the_user_secret_are_rejected(tenant):
    forged = jwt.encode(
        {
            "sub": str(tenant.player.id),
            "customerId": tenant.customer.id,
            "siteId": tenant.site.id,
            "type": "player",
            "exp": datetime.utcnow() + timedelta(minutes=5),
        },
        JWT_SECRET,
        algorithm="HS256",
    )
    with pytest.raises(UnauthorizedError):
        decode_principal(forged)


def test_refresh_tokens_are_not_principals(tenant):
    with pytest.raises(UnauthorizedError):
        decode_principal(issue_user_tokens(tenant.admin)["refresh_token"])


def test_expired_token_has_its_own_code(tenant):
    expired = jwt.encode(
        {"sub": "1", "type": "user", "exp": datetime.utcnow() - timedelta(minutes=1)},
        JWT_SECRET,
        algorithm="HS256",
    )
    with pytest.raises(UnauthorizedError) as excinfo:
        decode_principal(expired)
    assert excinfo.value.code == "TOKEN_EXPIRED"


def test_player_activation_flow(client, db, tenant):
    issued = client.post(f"/api/v1/players/{tenant.player.id}/activation-code", headers=tenant.editor_headers)
    assert issued.status_code == 200
    code = issued.json()["data"]["activationCode"]
    assert len(code) == 6

    activated = client.post(
        "/api/v1/player-auth/activate",
        json={"playerCode": "HQ-LOBBY", "activationCode": code.lower()},
    )
    assert activated.status_code == 200
    tokens = activated.json()["data"]
    assert tokens["playerId"] == tenant.player.id

    # The code is single use.
    again = client.post("/api/v1/player-auth/activate", json={"playerCode": "HQ-LOBBY", "activationCode": code})
    assert again.status_code == 401

    heartbeat = client.post(
        f"/api/v1/player-devices/{tenant.player.id}/heartbeat",
        json={"status": "Online"},
        headers={"Authorization": f"Bearer {tokens['accessToken']}"},
    )
    assert heartbeat.status_code == 200

    refreshed = client.post("/api/v1/player-auth/refresh", json={"refreshToken": tokens["refreshToken"]})
    assert refreshed.status_code == 200
    assert refreshed.json()["data"]["accessToken"]

    logout = client.post("/api/v1/player-auth/logout", json={"refreshToken": tokens["refreshToken"]})
    assert logout.status_code == 200
    assert db.query(PlayerToken).filter(PlayerToken.player_id == tenant.player.id).one().revoked_at is not None

    after_logout = client.post("/api/v1/player-auth/refresh", json={"refreshToken": tokens["refreshToken"]})
    assert after_logout.status_code == 401


def test_expired_activation_code_is_rejected(client, db, tenant):
    db.query(Player).filter(Player.id == tenant.player.id).update(
        {"activation_code": "ABC123", "activation_code_expires_at": datetime.utcnow() - timedelta(hours=1)}
    )
    db.commit()
    response = client.post("/api/v1/player-auth/activate", json={"playerCode": "HQ-LOBBY", "activationCode": "ABC123"})
    assert response.status_code == 401
    assert response.json()["code"] == "ACTIVATION_EXPIRED"


def test_viewer_cannot_issue_activation_codes(client, tenant):
    response = client.post(f"/api/v1/players/{tenant.player.id}/activation-code", headers=tenant.viewer_headers)
    assert response.status_code == 403
