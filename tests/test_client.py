import json

import pytest
import responses

from musicboard.client import DevWriterClient, DevWriterError

BASE = "http://dev.local:8787"


@pytest.fixture
def client():
    return DevWriterClient(BASE)


@responses.activate
def test_fetch_all(client):
    responses.add(responses.GET, f"{BASE}/api/events", json={"ok": True, "data": [{"id": "e"}]})
    responses.add(responses.GET, f"{BASE}/api/venues", json={"ok": True, "data": [{"id": "v"}]})
    responses.add(responses.GET, f"{BASE}/api/partners", json={"ok": True, "data": []})

    events, venues, partners = client.fetch_all()
    assert events == [{"id": "e"}]
    assert venues == [{"id": "v"}]
    assert partners == []


@responses.activate
def test_add_event_posts_json(client):
    responses.add(responses.POST, f"{BASE}/api/events", json={"ok": True, "data": [{"id": "e1"}]})
    out = client.add_event({"title": "Show", "date": "2025-03-01", "time": "7 PM", "venueId": "tower"})
    assert out == [{"id": "e1"}]
    assert json.loads(responses.calls[0].request.body)["title"] == "Show"


@responses.activate
def test_delete_event_sends_id(client):
    responses.add(responses.POST, f"{BASE}/api/events/delete", json={"ok": True, "data": []})
    client.delete_event("evt_1")
    assert json.loads(responses.calls[0].request.body) == {"id": "evt_1"}


@responses.activate
def test_error_envelope_raises(client):
    responses.add(
        responses.POST, f"{BASE}/api/events/update",
        json={"ok": False, "error": "Event not found"}, status=400,
    )
    with pytest.raises(DevWriterError, match="Event not found"):
        client.update_event({"id": "nope"})


@responses.activate
def test_add_partner(client):
    responses.add(responses.POST, f"{BASE}/api/partners", json={"ok": True, "data": [{"id": "p"}]})
    assert client.add_partner("p", "P", "https://p") == [{"id": "p"}]
    assert json.loads(responses.calls[0].request.body) == {"id": "p", "name": "P", "link": "https://p"}


@responses.activate
def test_upload_flyer(client, tmp_path):
    flyer = tmp_path / "gig.png"
    flyer.write_bytes(b"png")
    responses.add(
        responses.POST, f"{BASE}/api/flyers/upload",
        json={"ok": True, "path": "/flyers/gig.png"},
    )
    assert client.upload_flyer(flyer) == "/flyers/gig.png"
    sent = json.loads(responses.calls[0].request.body)
    assert sent == {"filename": "gig.png", "dataBase64": "cG5n"}


@responses.activate
def test_health(client):
    responses.add(responses.GET, f"{BASE}/api/health", json={"ok": True})
    assert client.health() is True
