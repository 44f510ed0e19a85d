import pytest

from signage.models.content import Content
from signage.models.layout import Layout, LayoutLayer
from signage.models.playlist import Playlist, PlaylistItem
from signage.models.webhook import Webhook


@pytest.fixture
def rows(db, tenant):
    content = Content(customer_id=tenant.customer.id, name="Slide", content_type="Image", file_url="/s/1.png")
    playlist = Playlist(customer_id=tenant.customer.id, name="Loop")
    layout = Layout(customer_id=tenant.customer.id, name="Main")
    webhook = Webhook(
        customer_id=tenant.customer.id,
        name="Ops",
        url="https://hooks.example.com/x",
        secret="s" * 32,
        events="player.online",
    )
    db.add_all([content, playlist, layout, webhook])
    db.commit()
    item = PlaylistItem(playlist_id=playlist.id, content_id=content.id, display_order=0)
    layer = LayoutLayer(layout_id=layout.id, layer_name="Title", layer_type="text", width=100, height=100)
    db.add_all([item, layer])
    db.commit()
    return {
        "site": tenant.site.id,
        "player": tenant.player.id,
        "user": tenant.viewer.id,
        "content": content.id,
        "playlist": playlist.id,
        "item": item.id,
        "layout": layout.id,
        "layer": layer.id,
        "webhook": webhook.id,
    }


@pytest.mark.parametrize(
    "path, body",
    [
        ("/customers/current", {"name": None}),
        ("/sites/{site}", {"timeZone": None}),
        ("/sites/{site}", {"isActive": None}),
        ("/players/{player}", {"siteId": None}),
        ("/players/{player}", {"orientation": None}),
        ("/users/{user}", {"role": None}),
        ("/content/{content}", {"contentType": None}),
        ("/playlists/{playlist}", {"isActive": None}),
        ("/playlists/{playlist}/items/{item}", {"displayOrder": None}),
        ("/layouts/{layout}", {"width": None}),
        ("/layouts/{layout}/layers/{layer}", {"zIndex": None}),
        ("/webhooks/{webhook}", {"url": None}),
        ("/webhooks/{webhook}", {"events": None}),
    ],
)
def test_null_for_a_required_field_is_a_400(client, tenant, rows, path, body):
    response = client.put("/api/v1" + path.format(**rows), json=body, headers=tenant.admin_headers)
    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
    assert "cannot be null" in response.json()["message"]


@pytest.mark.parametrize(
    "path, body",
    [
        ("/sites/{site}", {"address": None}),
        ("/players/{player}", {"location": None}),
        ("/content/{content}", {"description": None}),
        ("/playlists/{playlist}/items/{item}", {"duration": None}),
        ("/layouts/{layout}/layers/{layer}", {"styleConfig": None}),
    ],
)
def test_null_clears_an_optional_field(client, tenant, rows, path, body):
    response = client.put("/api/v1" + path.format(**rows), json=body, headers=tenant.admin_headers)
    assert response.status_code == 200
    (key,) = body
    assert response.json()["data"][key] is None
