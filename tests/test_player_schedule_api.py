from datetime import datetime, time

import pytest

from conftest import player_headers
from signage.models.content import Content
from signage.models.customer import Site
from signage.models.layout import Layout, LayoutLayer
from signage.models.player import Player
from signage.models.playlist import Playlist, PlaylistItem
from signage.models.schedule import Schedule, ScheduleAssignment
from signage.services.errors import NotFoundError
from signage.services.player_schedule import build_player_schedule


def add_content(db, customer, content_id, name, content_type="Image"):
    row = Content(
        id=content_id,
        customer_id=customer.id,
        name=name,
        content_type=content_type,
        file_url=f"/storage/content/{customer.id}/{name}.png",
    )
    db.add(row)
    db.commit()
    return row


def add_playlist(db, customer, items, is_active=True):
    playlist = Playlist(customer_id=customer.id, name="Loop", is_active=is_active)
    for content_id, display_order, duration in items:
        playlist.items.append(PlaylistItem(content_id=content_id, display_order=display_order, duration=duration))
    db.add(playlist)
    db.commit()
    return playlist


def add_layout(db, customer, layout_id, playlist_ids):
    layout = Layout(id=layout_id, customer_id=customer.id, name=f"Layout {layout_id}")
    layout.layers.append(
        LayoutLayer(layer_name="Title", layer_type="text", z_index=0, width=1920, height=100, content_config={"text": "Hi"})
    )
    for z_index, playlist_id in enumerate(playlist_ids, start=1):
        layout.layers.append(
            LayoutLayer(
                layer_name=f"Zone {z_index}",
                layer_type="playlist",
                z_index=z_index,
                width=960,
                height=980,
                content_config={"playlistId": playlist_id},
            )
        )
    db.add(layout)
    db.commit()
    return layout


def add_schedule(db, customer, schedule_id, layout_id, priority, assignment, **fields):
    schedule = Schedule(
        id=schedule_id,
        customer_id=customer.id,
        name=f"Schedule {schedule_id}",
        layout_id=layout_id,
        priority=priority,
        **fields,
    )
    schedule.assignments.append(ScheduleAssignment(**assignment))
    db.add(schedule)
    db.commit()
    return schedule


@pytest.fixture
def player_42(db, tenant):
    site = Site(id=5, customer_id=tenant.customer.id, name="Store 5", site_code="S5", time_zone="UTC")
    db.add(site)
    db.commit()
    player = Player(
        id=42,
        site_id=site.id,
        customer_id=tenant.customer.id,
        name="Window",
        player_code="HQ-WINDOW",
    )
    db.add(player)
    db.commit()
    db.refresh(player)
    return player


@pytest.fixture
def scenario(db, tenant, player_42):
    customer = tenant.customer
    add_content(db, customer, 501, "welcome")
    add_content(db, customer, 502, "promo", "Video")
    add_content(db, customer, 503, "menu")
    specific = add_playlist(db, customer, [(502, 2, None), (503, 0, 20)])
    wide = add_playlist(db, customer, [(501, 0, 15)])
    add_layout(db, customer, 101, [specific.id])
    add_layout(db, customer, 102, [wide.id])
    # The player schedule has the higher id and the lower priority; scope alone decides.
    add_schedule(db, customer, 7, 101, 50, {"assignment_type": "Player", "target_player_id": player_42.id})
    add_schedule(db, customer, 3, 102, 100, {"assignment_type": "Customer", "target_customer_id": customer.id})
    return player_42


def test_player_scoped_schedule_wins_over_higher_priority_customer_schedule(client, scenario):
    response = client.get("/api/v1/player-devices/42/schedule", headers=player_headers(scenario))
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    assert body["data"]["schedule"]["id"] == 7
    assert body["data"]["layout"]["id"] == 101
    assert [entry["contentId"] for entry in body["data"]["content"]] == [503, 502]


def test_content_entries_carry_defaults_and_null_extras(client, tenant, scenario):
    response = client.get("/api/v1/player-devices/42/schedule", headers=player_headers(scenario))
    promo = response.json()["data"]["content"][1]
    assert promo == {
        "contentId": 502,
        "name": "promo",
        "contentType": "Video",
        "fileUrl": f"/storage/content/{tenant.customer.id}/promo.png",
        "duration": 10,
        "displayOrder": 2,
        "transitionType": "None",
        "transitionDuration": 0,
        "thumbnailUrl": None,
        "mimeType": None,
        "fileSize": None,
        "width": None,
        "height": None,
    }


def test_layout_is_returned_with_its_layers(client, scenario):
    layout = client.get("/api/v1/player-devices/42/schedule", headers=player_headers(scenario)).json()["data"]["layout"]
    assert [layer["layerType"] for layer in layout["layers"]] == ["text", "playlist"]


def test_falls_back_to_customer_schedule_when_player_schedule_is_inactive(client, db, scenario):
    db.query(Schedule).filter(Schedule.id == 7).update({"is_active": False})
    db.commit()
    body = client.get("/api/v1/player-devices/42/schedule", headers=player_headers(scenario)).json()
    assert body["data"]["schedule"]["id"] == 3
    assert [entry["contentId"] for entry in body["data"]["content"]] == [501]
    assert body["data"]["content"][0]["duration"] == 15


def test_no_active_schedule_is_404_with_its_own_code(client, tenant):
    response = client.get(f"/api/v1/player-devices/{tenant.player.id}/schedule", headers=tenant.player_headers)
    assert response.status_code == 404
    assert response.json() == {
        "status": "error",
        "message": "No active schedule found for this player",
        "code": "NO_ACTIVE_SCHEDULE",
    }


def test_deleted_player_is_404_player_not_found(client, db, tenant):
    headers = tenant.player_headers
    player_id = tenant.player.id
    db.delete(tenant.player)
    db.commit()
    response = client.get(f"/api/v1/player-devices/{player_id}/schedule", headers=headers)
    assert response.status_code == 404
    assert response.json()["code"] == "PLAYER_NOT_FOUND"


def test_layout_outside_the_customer_is_layout_not_found(client, db, tenant, other_tenant):
    foreign = add_layout(db, other_tenant.customer, 900, [])
    add_schedule(
        db,
        tenant.customer,
        11,
        foreign.id,
        0,
        {"assignment_type": "Site", "target_site_id": tenant.site.id},
    )
    response = client.get(f"/api/v1/player-devices/{tenant.player.id}/schedule", headers=tenant.player_headers)
    assert response.status_code == 404
    assert response.json()["code"] == "LAYOUT_NOT_FOUND"


def test_missing_or_inactive_playlist_yields_empty_content(client, db, tenant):
    add_content(db, tenant.customer, 600, "hidden")
    inactive = add_playlist(db, tenant.customer, [(600, 0, None)], is_active=False)
    add_layout(db, tenant.customer, 120, [inactive.id, 99999])
    add_schedule(db, tenant.customer, 12, 120, 0, {"assignment_type": "Site", "target_site_id": tenant.site.id})
    response = client.get(f"/api/v1/player-devices/{tenant.player.id}/schedule", headers=tenant.player_headers)
    assert response.status_code == 200
    assert response.json()["data"]["content"] == []


def test_player_cannot_read_another_players_schedule(client, tenant, scenario):
    response = client.get("/api/v1/player-devices/42/schedule", headers=tenant.player_headers)
    assert response.status_code == 403


def test_unknown_player_id_is_404_not_forbidden(client, tenant):
    response = client.get("/api/v1/player-devices/99999/schedule", headers=tenant.player_headers)
    assert response.status_code == 404
    assert response.json()["code"] == "PLAYER_NOT_FOUND"


def test_player_of_another_customer_is_404(client, tenant, other_tenant):
    response = client.post(
        f"/api/v1/player-devices/{other_tenant.player.id}/heartbeat",
        json={},
        headers=tenant.player_headers,
    )
    assert response.status_code == 404


def test_user_token_is_rejected_on_device_endpoints(client, tenant):
    response = client.get(f"/api/v1/player-devices/{tenant.player.id}/schedule", headers=tenant.admin_headers)
    assert response.status_code == 403


def test_missing_token_is_401(client, tenant):
    response = client.get(f"/api/v1/player-devices/{tenant.player.id}/schedule")
    assert response.status_code == 401
    assert response.json()["code"] == "NO_TOKEN"


def test_resolution_follows_the_clock(db, tenant):
    add_content(db, tenant.customer, 700, "night")
    add_content(db, tenant.customer, 701, "day")
    night = add_playlist(db, tenant.customer, [(700, 0, None)])
    day = add_playlist(db, tenant.customer, [(701, 0, None)])
    add_layout(db, tenant.customer, 130, [night.id])
    add_layout(db, tenant.customer, 131, [day.id])
    add_schedule(
        db,
        tenant.customer,
        20,
        130,
        0,
        {"assignment_type": "Site", "target_site_id": tenant.site.id},
        start_time=time(22, 0),
        end_time=time(6, 0),
    )
    add_schedule(db, tenant.customer, 21, 131, 0, {"assignment_type": "Customer", "target_customer_id": tenant.customer.id})

    late = build_player_schedule(db, tenant.player, now=datetime(2024, 3, 4, 23, 30))
    noon = build_player_schedule(db, tenant.player, now=datetime(2024, 3, 4, 12, 0))
    assert late["schedule"].id == 20
    assert [entry.content_id for entry in late["content"]] == [700]
    assert noon["schedule"].id == 21


def test_resolution_reads_the_store_fresh_every_time(db, tenant):
    with pytest.raises(NotFoundError):
        build_player_schedule(db, tenant.player, now=datetime(2024, 3, 4, 12, 0))
    add_layout(db, tenant.customer, 140, [])
    add_schedule(db, tenant.customer, 30, 140, 0, {"assignment_type": "Player", "target_player_id": tenant.player.id})
    assert build_player_schedule(db, tenant.player, now=datetime(2024, 3, 4, 12, 0))["schedule"].id == 30


def test_cms_preview_matches_device_view(client, tenant, scenario):
    response = client.get("/api/v1/schedules/preview/42", headers=tenant.viewer_headers)
    assert response.status_code == 200
    assert response.json()["data"]["schedule"]["id"] == 7
