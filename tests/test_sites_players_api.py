import pytest

from conftest import make_user, user_headers


def test_create_site_and_player(client, tenant):
    response = client.post(
        "/api/v1/sites",
        json={"name": "Warehouse", "siteCode": "WH", "timeZone": "Europe/Berlin"},
        headers=tenant.admin_headers,
    )
    assert response.status_code == 201
    site = response.json()["data"]
    assert site["timeZone"] == "Europe/Berlin"

    response = client.post(
        "/api/v1/players",
        json={"siteId": site["id"], "name": "Dock", "playerCode": "WH-DOCK"},
        headers=tenant.admin_headers,
    )
    assert response.status_code == 201
    player = response.json()["data"]
    assert player["status"] == "Offline"
    assert player["customerId"] == tenant.customer.id


def test_unknown_time_zone_is_rejected(client, tenant):
    response = client.post(
        "/api/v1/sites",
        json={"name": "Moon", "siteCode": "MOON", "timeZone": "Moon/Base"},
        headers=tenant.admin_headers,
    )
    assert response.status_code == 400


def test_duplicate_codes_conflict(client, tenant):
    response = client.post(
        "/api/v1/sites",
        json={"name": "Again", "siteCode": "HQ"},
        headers=tenant.admin_headers,
    )
    assert response.status_code == 409
    assert response.json()["code"] == "SITE_CODE_EXISTS"

    response = client.post(
        "/api/v1/players",
        json={"siteId": tenant.site.id, "name": "Copy", "playerCode": "HQ-LOBBY"},
        headers=tenant.admin_headers,
    )
    assert response.status_code == 409
    assert response.json()["code"] == "PLAYER_CODE_EXISTS"


def test_player_on_foreign_site_is_rejected(client, tenant, other_tenant):
    response = client.post(
        "/api/v1/players",
        json={"siteId": other_tenant.site.id, "name": "Sneaky", "playerCode": "SNEAKY"},
        headers=tenant.admin_headers,
    )
    assert response.status_code == 400


def test_player_list_filters(client, tenant):
    body = client.get(f"/api/v1/players?siteId={tenant.site.id}", headers=tenant.viewer_headers).json()
    assert [row["playerCode"] for row in body["data"]] == ["HQ-LOBBY"]
    body = client.get("/api/v1/players?status=Online", headers=tenant.viewer_headers).json()
    assert body["data"] == []


def test_activation_code_is_issued(client, tenant):
    response = client.post(
        f"/api/v1/players/{tenant.player.id}/activation-code",
        headers=tenant.admin_headers,
    )
    assert response.status_code == 200
    code = response.json()["data"]["activationCode"]
    assert len(code) == 6
    assert code == code.upper()


@pytest.fixture
def manager_headers(db, tenant):
    return user_headers(make_user(db, tenant.customer, "SiteManager", site=tenant.site))


def test_site_manager_is_scoped_to_own_site(client, db, tenant, manager_headers):
    response = client.post(
        "/api/v1/sites",
        json={"name": "Branch", "siteCode": "BR"},
        headers=tenant.admin_headers,
    )
    branch = response.json()["data"]

    body = client.get("/api/v1/sites", headers=manager_headers).json()
    assert [row["id"] for row in body["data"]] == [tenant.site.id]
    assert client.get(f"/api/v1/sites/{branch['id']}", headers=manager_headers).status_code == 403


def test_only_admin_deletes_sites(client, tenant):
    assert client.delete(f"/api/v1/sites/{tenant.site.id}", headers=tenant.editor_headers).status_code == 403
    assert client.delete(f"/api/v1/sites/{tenant.site.id}", headers=tenant.admin_headers).status_code == 200
    assert client.get(f"/api/v1/players/{tenant.player.id}", headers=tenant.admin_headers).status_code == 404
