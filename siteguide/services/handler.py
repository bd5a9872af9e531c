"""Transport-agnostic request handling.

``GuideHandler.handle`` serves the request/response endpoint and
``GuideHandler.push`` serves the WebSocket stream. Both validate the same
payloads, mutate the session first, and only then run narrative generation
(the one step that may block on a provider call).
"""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from siteguide.core.config import Settings, settings as default_settings
from siteguide.core.llm import LLMConfig
from siteguide.core.session_store import Session, SessionStore
from siteguide.event_log import add_event
from siteguide.inference.behavior import analyze_behavior, detailed_reasoning, predict_next, unvisited_sections
from siteguide.services.actions import dispatch_action
from siteguide.services.agent import respond_to_message
from siteguide.services.narrative import narrate, narrate_enter

logger = logging.getLogger(__name__)

WELCOME = ('Welcome to "From Decks to Demos." I\'ll guide you through this site. '
           "Scroll to begin your journey.")
BEHAVIOR_TYPES = ("page_loaded", "section_entered", "section_dwell")


class InvalidRequest(ValueError):
    """Malformed client input; surfaced as a 4xx."""


class AgentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: Optional[str] = Field(default=None, alias="sessionId")
    type: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)


class BehaviorData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    behavior_type: str = Field(alias="behaviorType")
    section: Optional[str] = Field(default=None, min_length=1)
    dwell_time: Optional[int] = Field(default=None, ge=0, alias="dwellTime")


class MessageData(BaseModel):
    message: str
    dwell_time: Optional[int] = Field(default=None, ge=0, alias="dwellTime")


class ActionData(BaseModel):
    name: str
    args: Dict[str, Any] = Field(default_factory=dict)


def _parse(model: type[BaseModel], data: Any) -> Any:
    try:
        return model.model_validate(data or {})
    except ValidationError as exc:
        first = exc.errors()[0]
        where = ".".join(str(p) for p in first.get("loc", ())) or "data"
        raise InvalidRequest(f"Invalid {where}: {first.get('msg')}") from exc


class GuideHandler:
    def __init__(self, store: SessionStore, llm_cfg: LLMConfig, cfg: Settings = default_settings) -> None:
        self.store = store
        self.llm_cfg = llm_cfg
        self.cfg = cfg

    # -- request/response --------------------------------------------------

    def handle(self, payload: Any, now: Optional[float] = None) -> Dict[str, Any]:
        now = time.time() if now is None else now
        if not isinstance(payload, dict):
            raise InvalidRequest("Request body must be a JSON object")
        req = _parse(AgentRequest, payload)
        if not req.session_id or not req.session_id.strip():
            raise InvalidRequest("sessionId required")
        session = self.store.ensure(req.session_id.strip(), now)

        if req.type == "behavior":
            data = _parse(BehaviorData, req.data)
            self.apply_behavior(session, data, now)
            if data.behavior_type == "section_dwell" and data.dwell_time >= self.cfg.dwell_checkpoint:
                return self.analysis(session, data.dwell_time, now)
            return {"success": True}
        if req.type == "message":
            data = _parse(MessageData, req.data)
            return self.message(session, data, now)
        if req.type == "action":
            data = _parse(ActionData, req.data)
            return self.action(session, data)
        raise InvalidRequest("Invalid request type")

    # -- push stream -------------------------------------------------------

    def push(self, session_id: str, frame: Any, now: Optional[float] = None) -> List[Dict[str, Any]]:
        """Handle one WebSocket frame and return the frames to send back."""
        now = time.time() if now is None else now
        if not isinstance(frame, dict):
            raise InvalidRequest("Frame must be a JSON object")
        payload = dict(frame, sessionId=session_id)
        req = _parse(AgentRequest, payload)
        session = self.store.ensure(session_id, now)

        if req.type != "behavior":
            return [self.handle(payload, now)]

        data = _parse(BehaviorData, req.data)
        self.apply_behavior(session, data, now)
        if data.behavior_type == "page_loaded":
            return [{"type": "narrative", "message": WELCOME}]
        if data.behavior_type == "section_entered":
            return [
                {"type": "thinking", "thought": f'User entered "{data.section}" section. Analyzing content...'},
                {"type": "narrative", "message": narrate_enter(session, data.section), "actions": []},
            ]
        if data.dwell_time < self.cfg.dwell_checkpoint:
            return []
        result = self.analysis(session, data.dwell_time, now)
        thought = result["thinking"]["reasoning"]
        if result["thinking"]["depth"] == "summary":
            thought = "🔬 DEEP ANALYSIS:\n\n" + thought
        return [
            {"type": "thinking", "thought": thought},
            {"type": "suggestion", "message": result["narrative"], "actions": []},
        ]

    # -- shared steps ------------------------------------------------------

    def apply_behavior(self, session: Session, data: BehaviorData, now: float) -> None:
        kind = data.behavior_type
        if kind not in BEHAVIOR_TYPES:
            raise InvalidRequest(f"Unknown behaviorType '{kind}'")
        if kind == "page_loaded":
            session.session_start = now
            return
        if not data.section:
            raise InvalidRequest(f"section required for {kind}")
        if kind == "section_entered":
            session.enter_section(data.section, now)
            return
        if data.dwell_time is None:
            raise InvalidRequest("dwellTime required for section_dwell")
        session.record_dwell(data.section, data.dwell_time, now)

    def analysis(self, session: Session, dwell_time: int, now: float) -> Dict[str, Any]:
        depth = "summary" if dwell_time >= self.cfg.summary_checkpoint else "dwell"
        behavior = analyze_behavior(session, now)
        thinking = {
            "engagement": f"{behavior.time_on_site}s on site, {behavior.visited_count} sections visited",
            "dwellTimes": dict(behavior.dwell_times),
            "profile": behavior.profile,
            "interests": list(behavior.interests),
            "navigationPattern": behavior.navigation_pattern,
            "prediction": predict_next(behavior, unvisited_sections(session)),
            "reasoning": detailed_reasoning(session, now),
            "depth": depth,
        }
        # Session state is final here; the narrative may call out to a provider.
        narrative = narrate(session, depth, self.llm_cfg, now)
        thinking["source"] = narrative.source
        add_event("analysis", {"sid": session.sid, "depth": depth, "profile": behavior.profile,
                               "interests": behavior.interests, "source": narrative.source})
        return {"type": "analysis", "narrative": narrative.message, "thinking": thinking}

    def message(self, session: Session, data: MessageData, now: float) -> Dict[str, Any]:
        response = respond_to_message(session, data.message, self.llm_cfg, now, data.dwell_time)
        add_event("message", {"sid": session.sid, "message_preview": data.message[:120],
                              "reply_preview": response["message"][:160]})
        return response

    def action(self, session: Session, data: ActionData) -> Dict[str, Any]:
        result = dispatch_action(session, data.name, data.args)
        add_event("action", {"sid": session.sid, "name": data.name, "success": result["success"]})
        return {"type": "action", "name": data.name, "result": result}
