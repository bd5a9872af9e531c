from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from siteguide.app import create_app
from siteguide.core.llm import LLMConfig
from siteguide.core.session_store import SessionStore
from siteguide.services.handler import GuideHandler


@pytest.fixture
def store():
    return SessionStore(idle_seconds=1800)


@pytest.fixture
def client(store):
    return TestClient(create_app(LLMConfig(provider="none"), store))


def post(client, sid, kind, data):
    return client.post("/api/agent", json={"sessionId": sid, "type": kind, "data": data})


def test_health(client):
    body = client.get("/api/health").json()
    assert body["ok"] is True
    assert body["provider"] == "none"


def test_dwell_flow_over_http(client):
    assert post(client, "v1", "behavior", {"behaviorType": "page_loaded"}).json() == {"success": True}
    post(client, "v1", "behavior", {"behaviorType": "section_entered", "section": "showcase"})
    assert post(client, "v1", "behavior",
                {"behaviorType": "section_dwell", "section": "showcase", "dwellTime": 7}).json() == {"success": True}
    resp = post(client, "v1", "behavior", {"behaviorType": "section_dwell", "section": "showcase", "dwellTime": 8})
    assert resp.status_code == 200
    assert resp.json()["type"] == "analysis"


def test_client_errors_are_400_with_reason(client):
    resp = client.post("/api/agent", json={"type": "behavior", "data": {}})
    assert resp.status_code == 400
    assert resp.json() == {"error": "sessionId required"}

    resp = client.post("/api/agent", content=b"{not json", headers={"content-type": "application/json"})
    assert resp.status_code == 400
    assert "error" in resp.json()


def test_session_endpoints(client, store):
    post(client, "v1", "behavior", {"behaviorType": "section_entered", "section": "hero"})
    behavior = client.get("/api/sessions/v1/behavior").json()
    assert behavior["behavior"]["visitedSections"] == ["hero"]
    assert behavior["mode"] == "detailed"

    ok = client.post("/api/sessions/v1/actions/switch_mode", json={"mode": "executive"})
    assert ok.status_code == 200
    assert store.get("v1").mode == "executive"

    bad = client.post("/api/sessions/v1/actions/reorder_showcase", json={"order": ["mms", "zzz", "vzt"]})
    assert bad.status_code == 400
    assert bad.json()["success"] is False
    assert store.get("v1").showcase_order == ["mms", "vzt", "training", "vcg"]

    assert client.delete("/api/sessions/v1").json() == {"sid": "v1", "removed": True}
    assert client.get("/api/sessions/v1/behavior").status_code == 404
    assert client.post("/api/sessions/v1/actions/open_demo", json={"demo_id": "mms"}).status_code == 404


def test_logs_record_analysis(client):
    post(client, "v1", "behavior", {"behaviorType": "section_entered", "section": "hero"})
    post(client, "v1", "behavior", {"behaviorType": "section_dwell", "section": "hero", "dwellTime": 8})
    logs = client.get("/logs", params={"kind": "analysis"}).json()
    assert logs["count"] == 1
    assert logs["logs"][0]["payload"]["depth"] == "dwell"


def test_websocket_session_lifecycle(client, store):
    with client.websocket_connect("/ws") as ws:
        hello = ws.receive_json()
        assert hello["type"] == "connected"
        sid = hello["sessionId"]
        assert sid in store

        ws.send_json({"type": "behavior", "data": {"behaviorType": "section_entered", "section": "economics"}})
        assert ws.receive_json()["type"] == "thinking"
        assert ws.receive_json()["message"].startswith("📍")

        ws.send_json({"type": "behavior", "data": {"behaviorType": "section_dwell", "section": "economics",
                                                   "dwellTime": 8}})
        assert ws.receive_json()["type"] == "thinking"
        suggestion = ws.receive_json()
        assert suggestion["type"] == "suggestion"
        assert "ROI" in suggestion["message"] or "observing" in suggestion["message"]

        ws.send_text("{broken")
        assert ws.receive_json()["type"] == "error"

        ws.send_json({"type": "behavior", "data": {"behaviorType": "section_dwell", "section": "hero"}})
        error = ws.receive_json()
        assert error == {"type": "error", "message": "dwellTime required for section_dwell"}

    assert sid not in store


def test_create_app_keeps_an_empty_injected_store(store):
    assert len(store) == 0
    app = create_app(LLMConfig(provider="none"), store)
    assert app.state.handler.store is store

    client = TestClient(app)
    post(client, "v1", "behavior", {"behaviorType": "section_entered", "section": "hero"})
    assert "v1" in store


def test_unexpected_handler_failure_is_500(client):
    with patch.object(GuideHandler, "handle", side_effect=RuntimeError("boom")):
        resp = post(client, "v1", "behavior", {"behaviorType": "page_loaded"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error", "message": "boom"}


def test_websocket_reports_unexpected_failure_and_stays_open(client):
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()
        with patch.object(GuideHandler, "push", side_effect=RuntimeError("boom")):
            ws.send_json({"type": "behavior", "data": {"behaviorType": "page_loaded"}})
            assert ws.receive_json() == {"type": "error", "message": "Something went wrong"}

        ws.send_json({"type": "behavior", "data": {"behaviorType": "section_entered", "section": "hero"}})
        assert ws.receive_json()["type"] == "thinking"


def test_websocket_rejects_binary_frames_and_stays_open(client, store):
    with client.websocket_connect("/ws") as ws:
        sid = ws.receive_json()["sessionId"]
        ws.send_bytes(b"\x00\x01")
        assert ws.receive_json() == {"type": "error", "message": "Frames must be JSON text"}
        assert sid in store

        ws.send_json({"type": "behavior", "data": {"behaviorType": "section_entered", "section": "hero"}})
        assert ws.receive_json()["type"] == "thinking"
    assert sid not in store
