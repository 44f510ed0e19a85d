import pytest

from signage.models.layout import Layout
from signage.models.schedule import ScheduleAssignment


@pytest.fixture
def layout(db, tenant):
    row = Layout(customer_id=tenant.customer.id, name="Main")
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def create(client, headers, **overrides):
    body = {"name": "Weekdays", "layoutId": overrides.pop("layout_id"), "priority": 10}
    body.update(overrides)
    return client.post("/api/v1/schedules", json=body, headers=headers)


def test_create_and_fetch_schedule_with_assignment(client, tenant, layout):
    created = create(
        client,
        tenant.editor_headers,
        layout_id=layout.id,
        startDate="2024-01-01",
        endDate="2024-12-31",
        startTime="08:00",
        endTime="18:00",
        daysOfWeek="fri,Mon",
    )
    assert created.status_code == 201
    schedule = created.json()["data"]
    assert schedule["daysOfWeek"] == "Mon,Fri"
    assert schedule["startTime"] == "08:00:00"

    assigned = client.post(
        f"/api/v1/schedules/{schedule['id']}/assignments",
        json={"assignmentType": "Site", "targetSiteId": tenant.site.id},
        headers=tenant.editor_headers,
    )
    assert assigned.status_code == 201

    fetched = client.get(f"/api/v1/schedules/{schedule['id']}", headers=tenant.viewer_headers).json()["data"]
    assert fetched["assignments"][0]["assignmentType"] == "Site"
    assert fetched["assignments"][0]["targetSiteId"] == tenant.site.id


@pytest.mark.parametrize(
    "overrides, fragment",
    [
        ({"priority": 101}, "priority"),
        ({"priority": -1}, "priority"),
        ({"name": "   "}, "name"),
        ({"startDate": "2024-05-02", "endDate": "2024-05-01"}, "End date"),
        ({"startTime": "25:00"}, "startTime"),
        ({"daysOfWeek": "Mon,Someday"}, "Someday"),
    ],
)
def test_invalid_schedules_are_rejected(client, tenant, layout, overrides, fragment):
    response = create(client, tenant.editor_headers, layout_id=layout.id, **overrides)
    assert response.status_code == 400
    assert fragment in response.json()["message"]


def test_layout_must_belong_to_the_customer(client, tenant, other_tenant, db):
    foreign = Layout(customer_id=other_tenant.customer.id, name="Theirs")
    db.add(foreign)
    db.commit()
    response = create(client, tenant.editor_headers, layout_id=foreign.id)
    assert response.status_code == 400


def test_viewer_cannot_create_schedules(client, tenant, layout):
    response = create(client, tenant.viewer_headers, layout_id=layout.id)
    assert response.status_code == 403


@pytest.mark.parametrize(
    "payload",
    [
        {"assignmentType": "Site"},
        {"assignmentType": "Player", "targetSiteId": 1},
        {"assignmentType": "Site", "targetSiteId": 1, "targetPlayerId": 1},
    ],
)
def test_assignment_needs_exactly_the_matching_target(client, tenant, layout, payload):
    schedule_id = create(client, tenant.editor_headers, layout_id=layout.id).json()["data"]["id"]
    response = client.post(f"/api/v1/schedules/{schedule_id}/assignments", json=payload, headers=tenant.editor_headers)
    assert response.status_code == 400


def test_assignment_target_must_belong_to_the_customer(client, tenant, other_tenant, layout):
    schedule_id = create(client, tenant.editor_headers, layout_id=layout.id).json()["data"]["id"]
    response = client.post(
        f"/api/v1/schedules/{schedule_id}/assignments",
        json={"assignmentType": "Player", "targetPlayerId": other_tenant.player.id},
        headers=tenant.editor_headers,
    )
    assert response.status_code == 400


def test_update_keeps_date_range_consistent(client, tenant, layout):
    schedule_id = create(
        client, tenant.editor_headers, layout_id=layout.id, startDate="2024-03-01", endDate="2024-03-31"
    ).json()["data"]["id"]
    response = client.put(
        f"/api/v1/schedules/{schedule_id}",
        json={"endDate": "2024-02-01"},
        headers=tenant.editor_headers,
    )
    assert response.status_code == 400
    ok = client.put(f"/api/v1/schedules/{schedule_id}", json={"priority": 55}, headers=tenant.editor_headers)
    assert ok.json()["data"]["priority"] == 55


@pytest.mark.parametrize("field", ["priority", "isActive", "name", "layoutId"])
def test_update_rejects_null_for_required_fields(client, tenant, layout, field):
    schedule_id = create(client, tenant.editor_headers, layout_id=layout.id).json()["data"]["id"]
    response = client.put(f"/api/v1/schedules/{schedule_id}", json={field: None}, headers=tenant.editor_headers)
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
    assert f"{field} cannot be null" in response.json()["message"]

    unchanged = client.get(f"/api/v1/schedules/{schedule_id}", headers=tenant.viewer_headers).json()["data"]
    assert unchanged["priority"] == 10
    assert unchanged["isActive"] is True


def test_update_may_clear_optional_fields(client, tenant, layout):
    schedule_id = create(
        client, tenant.editor_headers, layout_id=layout.id, startDate="2024-03-01", endDate="2024-03-31"
    ).json()["data"]["id"]
    response = client.put(f"/api/v1/schedules/{schedule_id}", json={"endDate": None}, headers=tenant.editor_headers)
    assert response.status_code == 200
    assert response.json()["data"]["endDate"] is None


def test_deleting_a_schedule_removes_its_assignments(client, tenant, layout, db):
    schedule_id = create(client, tenant.editor_headers, layout_id=layout.id).json()["data"]["id"]
    client.post(
        f"/api/v1/schedules/{schedule_id}/assignments",
        json={"assignmentType": "Customer", "targetCustomerId": tenant.customer.id},
        headers=tenant.editor_headers,
    )
    assert client.delete(f"/api/v1/schedules/{schedule_id}", headers=tenant.editor_headers).status_code == 200
    assert db.query(ScheduleAssignment).count() == 0


def test_list_is_paginated_and_scoped(client, tenant, other_tenant, layout):
    for index in range(3):
        create(client, tenant.editor_headers, layout_id=layout.id, name=f"S{index}", priority=index)
    response = client.get("/api/v1/schedules?page=1&limit=2", headers=tenant.viewer_headers).json()
    assert [row["priority"] for row in response["data"]] == [2, 1]
    assert response["pagination"] == {"page": 1, "limit": 2, "total": 3, "totalPages": 2}
    assert client.get("/api/v1/schedules", headers=other_tenant.admin_headers).json()["data"] == []


def test_limit_above_maximum_is_rejected(client, tenant):
    assert client.get("/api/v1/schedules?limit=101", headers=tenant.viewer_headers).status_code == 400
