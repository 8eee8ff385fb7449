# tests/test_conversations_api.py
import asyncio
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from conftest import CANDIDATE, RECRUITER, STRANGER, seed_people, token_for
from jobboard.api.v1.conversations import WS_LOAD_FAILED
from jobboard.main import app
from jobboard.models.conversation import ParticipantDetails
from jobboard.repositories import conversations as conversations_repo
from jobboard.repositories import messages as messages_repo
from jobboard.services import storage


async def _start(client, auth_headers):
    r = await client.post("/api/v1/conversations", json={"otherUserId": "cand-1", "jobId": "job-1"},
                          headers=auth_headers(RECRUITER))
    assert r.status_code == 200
    return r.json()


async def test_requires_token(client):
    r = await client.get("/api/v1/conversations")
    assert r.status_code in (401, 403)
    r = await client.get("/api/v1/conversations", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


async def test_healthz(client):
    r = await client.get("/api/v1/healthz")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


async def test_create_is_idempotent_and_listed(people, client, auth_headers):
    first = await _start(client, auth_headers)
    second = await _start(client, auth_headers)
    assert first["id"] == second["id"]
    assert first["jobTitle"] == "Backend Engineer"
    assert first["participantDetails"]["cand-1"]["name"] == "Jane Doe"

    r = await client.get("/api/v1/conversations", headers=auth_headers(CANDIDATE))
    assert r.status_code == 200
    assert [c["id"] for c in r.json()["items"]] == [first["id"]]

    r = await client.get("/api/v1/conversations", params={"q": "jane"}, headers=auth_headers(RECRUITER))
    assert r.json()["count"] == 1
    r = await client.get("/api/v1/conversations", params={"q": "nobody"}, headers=auth_headers(RECRUITER))
    assert r.json()["count"] == 0


async def test_create_with_unknown_user(people, client, auth_headers):
    r = await client.post("/api/v1/conversations", json={"otherUserId": "ghost"}, headers=auth_headers(RECRUITER))
    assert r.status_code == 404


async def test_send_and_open_marks_read(people, client, auth_headers):
    conv = await _start(client, auth_headers)
    url = f"/api/v1/conversations/{conv['id']}"

    r = await client.post(f"{url}/messages", json={"content": "Hello Jane"}, headers=auth_headers(RECRUITER))
    assert r.status_code == 200

    r = await client.get(url, headers=auth_headers(CANDIDATE))
    assert r.status_code == 200
    state = r.json()
    assert [m["content"] for m in state["messages"]] == ["Hello Jane"]
    assert state["participant"]["name"] == "Rita Recruiter"
    assert state["job"]["company"] == "Acme"
    assert state["scrollAnchor"] == state["messages"][0]["id"]

    stored = await messages_repo.list_messages(conv["id"])
    assert stored[0].read is True
    assert (await conversations_repo.get_conversation(conv["id"])).unread_for("cand-1") == 0


async def test_blank_message_rejected(people, client, auth_headers, db):
    conv = await _start(client, auth_headers)
    r = await client.post(f"/api/v1/conversations/{conv['id']}/messages", json={"content": "   "},
                          headers=auth_headers(RECRUITER))
    assert r.status_code == 400
    assert await db["messages"].count_documents({}) == 0


async def test_non_participant_and_missing(people, client, auth_headers):
    conv = await _start(client, auth_headers)
    r = await client.get(f"/api/v1/conversations/{conv['id']}", headers=auth_headers(STRANGER))
    assert r.status_code == 403
    r = await client.get("/api/v1/conversations/0123456789abcdef01234567", headers=auth_headers(RECRUITER))
    assert r.status_code == 404


async def test_attachment_upload(people, client, auth_headers, monkeypatch):
    conv = await _start(client, auth_headers)
    monkeypatch.setattr(storage, "store_bytes", AsyncMock(return_value="https://cdn.test/resume.png"))

    files = {"file": ("resume.png", b"\x89PNG" + b"\x00" * 64, "image/png")}
    r = await client.post(f"/api/v1/conversations/{conv['id']}/attachments", files=files,
                          headers=auth_headers(CANDIDATE))
    assert r.status_code == 200

    m = (await messages_repo.list_messages(conv["id"]))[0]
    assert m.attachment_type == "image"
    assert m.content == "Sent an attachment: resume.png"
    assert m.receiver_id == "rec-1"


async def test_apply_template(people, client, auth_headers, db):
    conv = await _start(client, auth_headers)
    r = await client.post(f"/api/v1/conversations/{conv['id']}/apply-template", json={"templateId": "default-2"},
                          headers=auth_headers(RECRUITER))
    assert r.status_code == 200
    draft = r.json()["draft"]
    assert draft.startswith("Hi Jane,")
    assert "[Position]" not in draft
    assert await db["messages"].count_documents({}) == 0

    r = await client.post(f"/api/v1/conversations/{conv['id']}/apply-template", json={"templateId": "default-9"},
                          headers=auth_headers(RECRUITER))
    assert r.status_code == 404


async def test_template_crud(people, client, auth_headers):
    h = auth_headers(RECRUITER)
    r = await client.get("/api/v1/message-templates", headers=h)
    assert [t["id"] for t in r.json()["items"]] == ["default-1", "default-2", "default-3"]

    r = await client.post("/api/v1/message-templates", json={"name": "Nudge", "content": "Hi [Name]!"}, headers=h)
    assert r.status_code == 201
    tid = r.json()["id"]

    r = await client.get("/api/v1/message-templates", headers=h)
    assert [t["name"] for t in r.json()["items"]] == ["Nudge"]

    r = await client.put(f"/api/v1/message-templates/{tid}", json={"name": "Nudge", "content": "Hey [Name]"}, headers=h)
    assert r.status_code == 200
    r = await client.put("/api/v1/message-templates/default-1", json={"name": "x", "content": "y"}, headers=h)
    assert r.status_code == 400

    r = await client.delete(f"/api/v1/message-templates/{tid}", headers=h)
    assert r.json()["deleted"] is True
    r = await client.delete(f"/api/v1/message-templates/{tid}", headers=h)
    assert r.status_code == 404


def test_websocket_pushes_thread_state(db):
    async def seed():
        await seed_people(db)
        conv = await conversations_repo.create_conversation(
            ["rec-1", "cand-1"],
            {"rec-1": ParticipantDetails(name="Rita Recruiter", role="recruiter"),
             "cand-1": ParticipantDetails(name="Jane Doe", role="candidate")},
            job_id="job-1", job_title="Backend Engineer",
        )
        await messages_repo.create_message(conv.id, "cand-1", "rec-1", "Hello")
        return conv.id

    cid = asyncio.run(seed())
    client = TestClient(app)
    with client.websocket_connect(f"/api/v1/ws/conversations/{cid}?token={token_for(RECRUITER)}") as ws:
        frame = ws.receive_json()
        assert [m["content"] for m in frame["messages"]] == ["Hello"]
        assert frame["loading"] is False
        assert frame["participant"]["name"] == "Jane Doe"

        ws.send_json({"action": "template", "templateId": "default-1"})
        for _ in range(10):
            frame = ws.receive_json()
            if frame["draft"]:
                break
        assert frame["draft"].startswith("Hi Jane,")
        assert frame["selectedTemplateId"] == "default-1"


def test_websocket_rejects_bad_token(db):
    client = TestClient(app)
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/api/v1/ws/conversations/abc?token=bad") as ws:
            ws.receive_json()


def test_websocket_load_failure_uses_its_own_close_code(db, monkeypatch):
    monkeypatch.setattr(conversations_repo, "get_conversation", AsyncMock(side_effect=RuntimeError("store down")))
    client = TestClient(app)
    with client.websocket_connect(f"/api/v1/ws/conversations/c1?token={token_for(RECRUITER)}") as ws:
        frame = ws.receive_json()
        assert frame["banner"] == "Failed to load conversation"
        assert frame["loading"] is False
        with pytest.raises(WebSocketDisconnect) as exc:
            ws.receive_json()
    assert exc.value.code == WS_LOAD_FAILED


async def test_templates_are_private_to_their_author(people, client, auth_headers):
    r = await client.post("/api/v1/message-templates", json={"name": "Mine", "content": "Hi [Name]"},
                          headers=auth_headers(RECRUITER))
    tid = r.json()["id"]
    stranger = auth_headers(STRANGER)

    r = await client.put(f"/api/v1/message-templates/{tid}", json={"name": "x", "content": "y"}, headers=stranger)
    assert r.status_code == 403
    r = await client.delete(f"/api/v1/message-templates/{tid}", headers=stranger)
    assert r.status_code == 403

    r = await client.post("/api/v1/conversations", json={"otherUserId": "rec-1"}, headers=stranger)
    conv_id = r.json()["id"]
    r = await client.post(f"/api/v1/conversations/{conv_id}/apply-template", json={"templateId": tid},
                          headers=stranger)
    assert r.status_code == 403
    # shared defaults stay usable by everyone
    r = await client.post(f"/api/v1/conversations/{conv_id}/apply-template", json={"templateId": "default-1"},
                          headers=stranger)
    assert r.status_code == 200

    r = await client.get("/api/v1/message-templates", headers=auth_headers(RECRUITER))
    assert [t["content"] for t in r.json()["items"]] == ["Hi [Name]"]
