# pylint: disable=missing-module-docstring,missing-function-docstring

from typing import Any

import pytest
from fastapi.testclient import TestClient

import orchestrator.controller as controller_mod
import session.gateway as gateway_mod
from config import AppConfig
from server.app import create_app


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch) -> TestClient:
    emitted: list[dict[str, Any]] = []
    monkeypatch.setattr(gateway_mod, "log_event", emitted.append)
    monkeypatch.setattr(controller_mod, "log_event", emitted.append)
    return TestClient(create_app(AppConfig()))


def test_health(client: TestClient):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_commands_lists_table_and_search(client: TestClient):
    body = client.get("/commands").json()

    assert [c["action"] for c in body][:2] == ["next", "previous"]
    assert body[-1]["action"] == "search"


def test_resolve_returns_intent(client: TestClient):
    response = client.post("/resolve", json={"transcript": "Turn Down please"})

    assert response.status_code == 200
    assert response.json() == {
        "action": "volumeDown",
        "feedback": "Volume decreased",
        "transcript": "turn down please",
        "matchedKeyword": "turn down",
    }


def test_resolve_empty_transcript_is_null(client: TestClient):
    response = client.post("/resolve", json={"transcript": "   "})

    assert response.status_code == 200
    assert response.json() is None


def test_websocket_session_round_trip(client: TestClient):
    with client.websocket_connect("/ws") as ws:
        init = ws.receive_json()
        assert init["type"] == "SESSION_INIT"

        ws.send_json({"type": "VOICE_START"})
        assert ws.receive_json()["type"] == "CAPTURE_START"
        assert ws.receive_json()["voice"]["state"] == "LISTENING"

        ws.send_json({"type": "CAPTURE_RESULT", "text": "shuffle", "is_final": True})
        command = ws.receive_json()
        assert command["type"] == "COMMAND_RESULT"
        assert command["result"]["message"] == "Shuffle toggled"
        assert command["player"]["shuffle"] is True


def test_websocket_without_speech_support(client: TestClient):
    with client.websocket_connect("/ws?speech=0") as ws:
        init = ws.receive_json()

        assert init["speech_supported"] is False


def test_websocket_pushes_timeout_without_client_message(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(gateway_mod, "log_event", lambda event: None)
    monkeypatch.setattr(controller_mod, "log_event", lambda event: None)
    client = TestClient(create_app(AppConfig(listen_timeout_ms=50)))

    with client.websocket_connect("/ws") as ws:
        ws.receive_json()
        ws.send_json({"type": "VOICE_START"})
        assert ws.receive_json()["type"] == "CAPTURE_START"
        assert ws.receive_json()["voice"]["state"] == "LISTENING"

        # No further client message: the timer output must arrive by itself
        stop = ws.receive_json()
        state = ws.receive_json()

    assert stop["type"] == "CAPTURE_STOP"
    assert stop["capture_id"] == 1
    assert state["type"] == "VOICE_STATE"
    assert state["voice"]["state"] == "TIMING_OUT"
    assert state["voice"]["error"] == "timeout"
