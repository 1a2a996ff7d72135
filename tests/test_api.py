import json

import pytest
from fastapi.testclient import TestClient

from services.conversation.intents import Intent
from services.conversation.templates import ENGLISH, HINDI
from tests.helpers import png_bytes, poll


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_DIR", str(tmp_path))
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    for name in ("CHAT_RESPONSE_DELAY_MS", "CHAT_STATUS_UPDATE_DELAY_MS", "CHAT_REWARD_DELAY_MS"):
        monkeypatch.setenv(name, "0")

    from main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client


def _start(client, **payload):
    response = client.post("/sessions", json=payload)
    assert response.status_code == 200
    return response.json()


def _messages(client, session_id):
    return client.get(f"/sessions/{session_id}/messages").json()["messages"]


def test_health_reports_missing_classifier(client):
    body = client.get("/health").json()
    assert body["ok"] is True
    assert body["db_initialized"] is True
    assert body["waste_analysis_available"] is False


def test_session_starts_with_greeting(client):
    body = _start(client, user_id="resident-1")
    assert [m["text"] for m in body["messages"]] == [ENGLISH.greeting]
    assert body["state"]["language"] == "english"

    hindi = _start(client, language="hindi")
    assert hindi["messages"][0]["text"] == HINDI.greeting


def test_unsupported_language_is_rejected(client):
    assert client.post("/sessions", json={"language": "french"}).status_code == 422


def test_complaint_turn_is_answered_and_followed_up(client):
    session_id = _start(client)["session_id"]
    body = client.post(f"/sessions/{session_id}/messages", json={"text": "garbage near MG Road"}).json()
    assert body["accepted"] is True
    assert [m["sender"] for m in body["appended"]] == ["user"]

    messages = poll(lambda: (lambda ms: ms if len(ms) >= 4 else None)(_messages(client, session_id)))
    assert "#GC-2023-" in messages[2]["text"]
    assert messages[3]["text"] == ENGLISH.status_update.format(category="garbage")


def test_empty_message_is_ignored(client):
    session_id = _start(client)["session_id"]
    body = client.post(f"/sessions/{session_id}/messages", json={"text": ""}).json()
    assert body["accepted"] is False
    assert len(_messages(client, session_id)) == 1


def test_unknown_session_is_404(client):
    assert client.get("/sessions/nope/messages").status_code == 404
    assert client.post("/sessions/nope/messages", json={"text": "hi"}).status_code == 404
    assert client.delete("/sessions/nope").status_code == 404


def test_language_toggle(client):
    session_id = _start(client)["session_id"]
    body = client.post(f"/sessions/{session_id}/language").json()
    assert body["language"] == "hindi"
    assert body["message"]["text"] == HINDI.switched


def test_attachment_then_analysis_without_api_key(client):
    session_id = _start(client)["session_id"]
    files = {"image": ("bin.png", png_bytes(), "image/png")}
    attached = client.post(f"/sessions/{session_id}/attachment", files=files, data={"draft_text": ""}).json()
    assert attached["accepted"] is True
    assert attached["prompt"] == ENGLISH.attach_prompt

    body = client.post(f"/sessions/{session_id}/messages", json={"text": ""}).json()
    placeholder = body["appended"][1]
    assert placeholder["status"] == "pending"

    def resolved():
        for message in _messages(client, session_id):
            if message["id"] == placeholder["id"] and message["status"] != "pending":
                return message
        return None

    final = poll(resolved)
    assert final["status"] == "error"
    assert final["text"] == ENGLISH.analysis_failed


def test_non_image_attachment_is_reported_in_body(client):
    session_id = _start(client)["session_id"]
    files = {"image": ("notes.txt", b"hello", "text/plain")}
    body = client.post(f"/sessions/{session_id}/attachment", files=files).json()
    assert body["accepted"] is False
    assert body["reason"] == "unsupported_type"
    assert body["notification"]["variant"] == "warning"
    assert client.delete(f"/sessions/{session_id}/attachment").json()["cleared"] is False


def test_complaint_form_and_letter(client):
    session_id = _start(client)["session_id"]
    missing = client.post(f"/sessions/{session_id}/complaint", json={"type": "garbage", "location": " "})
    assert missing.status_code == 400

    body = client.post(
        f"/sessions/{session_id}/complaint",
        json={"type": "water", "location": "Sector 4", "description": "No supply since morning"},
    ).json()
    assert body["appended"][0]["text"] == "I want to report a water issue at Sector 4. No supply since morning"

    letter = client.post(
        f"/sessions/{session_id}/complaint-letter", json={"issue": "water logging", "location": "Sector 4"}
    ).json()
    assert "Subject: Complaint regarding water logging at Sector 4" in letter["letter"]


def test_end_session(client):
    session_id = _start(client)["session_id"]
    assert client.delete(f"/sessions/{session_id}").json() == {"session_id": session_id, "closed": True}
    assert client.get(f"/sessions/{session_id}/messages").status_code == 404


def _receive_until(ws, event_type, predicate=lambda event: True):
    for _ in range(30):
        event = ws.receive_json()
        if event["type"] == event_type and predicate(event):
            return event
    raise AssertionError(f"no matching {event_type} event received")


def test_websocket_commands_and_events(client):
    session_id = _start(client)["session_id"]
    with client.websocket_connect(f"/ws/{session_id}") as ws:
        ws.send_text(json.dumps({"type": "language.switch", "request_id": "r1"}))
        switched = _receive_until(ws, "language.switched")
        assert switched["language"] == "hindi"
        assert switched["request_id"] == "r1"

        ws.send_text(json.dumps({"type": "message.submit", "text": "बिल भुगतान"}))
        expected = HINDI.replies[Intent.BILL]
        ack, reply = None, None
        for _ in range(30):
            event = ws.receive_json()
            if event["type"] == "message.ack":
                ack = event
            elif event["type"] == "message.appended" and event["message"]["text"] == expected:
                reply = event
            if ack and reply:
                break
        assert ack["appended"][0]["text"] == "बिल भुगतान"
        assert reply["message"]["sender"] == "bot"

        ws.send_text("[1, 2]")
        assert _receive_until(ws, "error")["detail"] == "Payload must be a JSON object"

        ws.send_text(json.dumps({"type": "nonsense"}))
        assert _receive_until(ws, "error")["detail"] == "Unsupported message type."


def test_websocket_unknown_session(client):
    with client.websocket_connect("/ws/missing") as ws:
        assert ws.receive_json() == {"type": "error", "detail": "Session not found"}


def test_health_reports_classifier_with_api_key(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_DIR", str(tmp_path))
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    from main import create_app

    with TestClient(create_app()) as test_client:
        assert test_client.get("/health").json()["waste_analysis_available"] is True


def test_closing_the_last_socket_ends_the_session(client):
    rest_only = _start(client)["session_id"]
    socket_sessions = [_start(client)["session_id"] for _ in range(4)]
    assert client.get("/health").json()["active_sessions"] == 5

    for session_id in socket_sessions:
        with client.websocket_connect(f"/ws/{session_id}") as ws:
            ws.send_text(json.dumps({"type": "attachment.clear", "request_id": session_id}))
            assert _receive_until(ws, "attachment.cleared")["cleared"] is False

    poll(lambda: client.get("/health").json()["active_sessions"] == 1)
    for session_id in socket_sessions:
        assert client.get(f"/sessions/{session_id}/messages").status_code == 404
    assert client.get(f"/sessions/{rest_only}/messages").status_code == 200


def test_websocket_invalid_base64_is_unsupported(client):
    session_id = _start(client)["session_id"]
    with client.websocket_connect(f"/ws/{session_id}") as ws:
        ws.send_text(json.dumps({"type": "attachment.add", "image_b64": "%%%", "media_type": "image/png"}))
        result = _receive_until(ws, "attachment.result")
        assert result["accepted"] is False
        assert result["reason"] == "unsupported_type"


def test_snapshot_includes_recent_notifications(client):
    session_id = _start(client)["session_id"]
    files = {"image": ("notes.txt", b"hello", "text/plain")}
    client.post(f"/sessions/{session_id}/attachment", files=files)

    notifications = client.get(f"/sessions/{session_id}/messages").json()["notifications"]
    assert notifications[-1]["title"] == ENGLISH.notifications["unsupported_type"].title
