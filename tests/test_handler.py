from unittest.mock import patch

import httpx
import openai
import pytest

from siteguide.core.config import Settings
from siteguide.services.handler import GuideHandler, InvalidRequest

from conftest import T0


@pytest.fixture
def handler(store, no_llm):
    return GuideHandler(store, no_llm, Settings())


def behavior(sid, kind, **data):
    return {"sessionId": sid, "type": "behavior", "data": {"behaviorType": kind, **data}}


def test_state_only_events_return_success(handler):
    assert handler.handle(behavior("v1", "page_loaded"), now=T0) == {"success": True}
    assert handler.handle(behavior("v1", "section_entered", section="hero"), now=T0 + 1) == {"success": True}
    sess = handler.store.get("v1")
    assert sess.visited_sections == ["hero"]
    assert sess.current_section == "hero"


def test_page_loaded_resets_start_time(handler):
    handler.handle(behavior("v1", "section_entered", section="hero"), now=T0)
    handler.handle(behavior("v1", "page_loaded"), now=T0 + 100)
    assert handler.store.get("v1").session_start == T0 + 100


def test_repeated_entries_do_not_duplicate(handler):
    for i in range(3):
        handler.handle(behavior("v1", "section_entered", section="hero"), now=T0 + i)
        handler.handle(behavior("v1", "section_entered", section="showcase"), now=T0 + 10 + i)
    assert handler.store.get("v1").visited_sections == ["hero", "showcase"]


def test_scenario_d_dwell_checkpoint(handler):
    handler.handle(behavior("v1", "section_entered", section="showcase"), now=T0)
    below = handler.handle(behavior("v1", "section_dwell", section="showcase", dwellTime=7), now=T0 + 7)
    assert below == {"success": True}

    at = handler.handle(behavior("v1", "section_dwell", section="showcase", dwellTime=8), now=T0 + 8)
    assert at["type"] == "analysis"
    assert at["narrative"].startswith("I'm observing")
    assert at["thinking"]["depth"] == "dwell"
    assert at["thinking"]["dwellTimes"] == {"showcase": 8}
    assert at["thinking"]["engagement"] == "8s on site, 1 sections visited"


def test_deep_checkpoint_produces_summary_narrative(handler):
    handler.handle(behavior("v1", "section_entered", section="how-it-works"), now=T0)
    result = handler.handle(behavior("v1", "section_dwell", section="how-it-works", dwellTime=15), now=T0 + 15)
    assert result["type"] == "analysis"
    assert result["thinking"]["depth"] == "summary"
    assert result["thinking"]["profile"] == "analyst"
    assert "implementation" in result["thinking"]["interests"]
    assert "I see you as a **analyst**" in result["narrative"]
    assert "PROFILE" in result["thinking"]["reasoning"]


def test_summary_checkpoint_survives_provider_failure(store, cloud_llm):
    handler = GuideHandler(store, cloud_llm, Settings())
    handler.handle(behavior("v1", "section_entered", section="economics"), now=T0)
    down = openai.APIConnectionError(request=httpx.Request("POST", "https://llm.invalid/v1/chat/completions"))
    with patch("siteguide.core.llm_cloud.OpenAI") as client_cls:
        client_cls.return_value.chat.completions.create.side_effect = down
        result = handler.handle(behavior("v1", "section_dwell", section="economics", dwellTime=15), now=T0 + 15)
    assert result["type"] == "analysis"
    assert result["thinking"]["source"] == "rule"
    assert result["narrative"]
    # the dwell report was committed before the provider call
    assert store.get("v1").dwell_times == {"economics": 15}


def test_message_routing(handler):
    summary = handler.handle({"sessionId": "v1", "type": "message", "data": {"message": "My Journey?"}}, now=T0)
    assert summary["type"] == "response"
    assert "thinking" in summary
    other = handler.handle({"sessionId": "v1", "type": "message", "data": {"message": "hi"}}, now=T0)
    assert "summary" in other["message"]
    assert "thinking" not in other


def test_action_requests(handler):
    ok = handler.handle({"sessionId": "v1", "type": "action",
                         "data": {"name": "reorder_showcase", "args": {"order": ["vcg", "vzt", "mms", "training"]}}})
    assert ok["result"]["success"] is True
    bad = handler.handle({"sessionId": "v1", "type": "action",
                          "data": {"name": "open_demo", "args": {"demo_id": "unknown"}}})
    assert bad["result"] == {"success": False, "error": "Demo 'unknown' not found", "demo_id": "unknown"}
    assert handler.store.get("v1").showcase_order == ["vcg", "vzt", "mms", "training"]


@pytest.mark.parametrize("payload,reason", [
    ({"type": "behavior", "data": {"behaviorType": "page_loaded"}}, "sessionId required"),
    ({"sessionId": "  ", "type": "message", "data": {"message": "x"}}, "sessionId required"),
    ({"sessionId": "v1", "type": "telemetry", "data": {}}, "Invalid request type"),
    ({"sessionId": "v1", "type": "behavior", "data": {"behaviorType": "scrolled"}}, "Unknown behaviorType"),
    ({"sessionId": "v1", "type": "behavior", "data": {"behaviorType": "section_entered"}}, "section required"),
    ({"sessionId": "v1", "type": "behavior",
      "data": {"behaviorType": "section_dwell", "section": "hero"}}, "dwellTime required"),
    ({"sessionId": "v1", "type": "behavior",
      "data": {"behaviorType": "section_dwell", "section": "hero", "dwellTime": -1}}, "Invalid dwellTime"),
    ({"sessionId": "v1", "type": "message", "data": {}}, "Invalid message"),
    (["not", "an", "object"], "JSON object"),
])
def test_malformed_requests_raise_invalid_request(handler, payload, reason):
    with pytest.raises(InvalidRequest, match=reason):
        handler.handle(payload, now=T0)


def test_push_stream_frames(handler):
    assert handler.push("ws1", {"type": "behavior", "data": {"behaviorType": "page_loaded"}}, now=T0)[0]["type"] == "narrative"

    entered = handler.push("ws1", {"type": "behavior",
                                   "data": {"behaviorType": "section_entered", "section": "hero"}}, now=T0 + 1)
    assert [f["type"] for f in entered] == ["thinking", "narrative"]
    assert entered[1]["message"] == "📍 You're viewing **Hero**"

    quiet = handler.push("ws1", {"type": "behavior",
                                 "data": {"behaviorType": "section_dwell", "section": "hero", "dwellTime": 3}}, now=T0 + 4)
    assert quiet == []

    deep = handler.push("ws1", {"type": "behavior",
                                "data": {"behaviorType": "section_dwell", "section": "hero", "dwellTime": 15}}, now=T0 + 16)
    assert [f["type"] for f in deep] == ["thinking", "suggestion"]
    assert deep[0]["thought"].startswith("🔬 DEEP ANALYSIS")

    chat = handler.push("ws1", {"type": "message", "data": {"message": "hello"}}, now=T0 + 17)
    assert chat[0]["type"] == "response"
