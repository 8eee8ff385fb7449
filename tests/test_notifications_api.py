# tests/test_notifications_api.py
from unittest.mock import AsyncMock

from conftest import CANDIDATE, STRANGER
from jobboard.repositories import notifications as notifications_repo
from jobboard.services import notifications


def _payload(**overrides):
    body = {"userId": "cand-1", "title": "Hello", "message": "Welcome aboard", "type": "system"}
    body.update(overrides)
    return body


async def test_notification_lifecycle(client, auth_headers):
    h = auth_headers(CANDIDATE)
    r = await client.post("/api/v1/notifications", json=_payload(), headers=h)
    assert r.status_code == 201
    created = r.json()
    assert created["read"] is False
    assert created["createdAt"] is not None
    await client.post("/api/v1/notifications", json=_payload(type="message", title="New Message"), headers=h)

    r = await client.get("/api/v1/notifications", params={"userId": "cand-1"}, headers=h)
    items = r.json()["items"]
    assert len(items) == 2
    assert items[0]["title"] == "New Message"

    r = await client.get("/api/v1/notifications/count", params={"userId": "cand-1"}, headers=h)
    assert r.json() == {"count": 2}

    r = await client.patch(f"/api/v1/notifications/{created['id']}", json={"read": True}, headers=h)
    assert r.json()["read"] is True

    r = await client.get("/api/v1/notifications/types", params={"userId": "cand-1", "read": "false"}, headers=h)
    assert r.json()["counts"] == {"message": 1}
    r = await client.get("/api/v1/notifications/types", params={"userId": "cand-1"}, headers=h)
    assert r.json()["counts"] == {"system": 1, "message": 1}

    r = await client.post("/api/v1/notifications/read-all", params={"userId": "cand-1"}, headers=h)
    assert r.json() == {"modified": 1}
    r = await client.get("/api/v1/notifications/count", params={"userId": "cand-1"}, headers=h)
    assert r.json() == {"count": 0}

    r = await client.delete(f"/api/v1/notifications/{created['id']}", headers=h)
    assert r.json() == {"deleted": True}
    r = await client.get(f"/api/v1/notifications/{created['id']}", headers=h)
    assert r.status_code == 404


async def test_user_id_is_required(client, auth_headers):
    h = auth_headers(CANDIDATE)
    for path in ("/api/v1/notifications", "/api/v1/notifications/count", "/api/v1/notifications/types"):
        r = await client.get(path, headers=h)
        assert r.status_code == 400
    r = await client.post("/api/v1/notifications/read-all", headers=h)
    assert r.status_code == 400


async def test_invalid_type_rejected(client, auth_headers):
    r = await client.post("/api/v1/notifications", json=_payload(type="carrier_pigeon"), headers=auth_headers(CANDIDATE))
    assert r.status_code == 422


async def test_status_change_titles(db):
    await notifications.notify_status_change("cand-1", "app-1", "Backend Engineer", "Acme", "shortlisted")
    await notifications.notify_status_change("cand-1", "app-1", "Backend Engineer", "Acme", "hired")
    rows = await notifications_repo.list_notifications("cand-1")
    assert {n.title for n in rows} == {"Application Shortlisted", "Offer Extended"}
    hired = next(n for n in rows if n.title == "Offer Extended")
    assert hired.actions[0].url == "/applicant/applications/app-1"


async def test_notify_failure_is_swallowed(monkeypatch):
    monkeypatch.setattr(notifications, "create_notification", AsyncMock(side_effect=RuntimeError("store down")))
    result = await notifications.notify_job_update("cand-1", "job-1", "Backend Engineer", "Acme", "filled")
    assert result is None


async def test_notifications_are_private_to_their_owner(client, auth_headers):
    owner = auth_headers(CANDIDATE)
    stranger = auth_headers(STRANGER)
    r = await client.post("/api/v1/notifications", json=_payload(), headers=owner)
    nid = r.json()["id"]

    r = await client.post("/api/v1/notifications", json=_payload(), headers=stranger)
    assert r.status_code == 403
    for path in ("/api/v1/notifications", "/api/v1/notifications/count", "/api/v1/notifications/types"):
        r = await client.get(path, params={"userId": "cand-1"}, headers=stranger)
        assert r.status_code == 403
    r = await client.post("/api/v1/notifications/read-all", params={"userId": "cand-1"}, headers=stranger)
    assert r.status_code == 403

    assert (await client.get(f"/api/v1/notifications/{nid}", headers=stranger)).status_code == 403
    assert (await client.patch(f"/api/v1/notifications/{nid}", json={"read": True}, headers=stranger)).status_code == 403
    assert (await client.delete(f"/api/v1/notifications/{nid}", headers=stranger)).status_code == 403

    r = await client.get(f"/api/v1/notifications/{nid}", headers=owner)
    assert r.json()["read"] is False
