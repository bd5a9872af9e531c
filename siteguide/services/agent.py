"""Chat message handling for the site guide.

Summary requests always go through the narrative generator. Other messages use
a tool-calling turn against the hosted model when one is configured, and a
keyword fallback otherwise.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from siteguide.core import llm_cloud
from siteguide.core.config import settings
from siteguide.core.content import GUIDE_SECTIONS, SUMMARIES, section_name
from siteguide.core.llm import LLMConfig, build_agent_prompt
from siteguide.core.session_store import Session
from siteguide.event_log import add_event
from siteguide.services.actions import TOOLS, dispatch_action, highlight_section, summarize_section
from siteguide.services.narrative import narrate_summary

logger = logging.getLogger(__name__)

NUDGE = "I'm observing your journey through the site. Ask me for a \"summary\" of your journey for insights."
SUMMARY_KEYWORDS = ("summary", "journey")


def wants_summary(text: str) -> bool:
    low = text.lower()
    return any(k in low for k in SUMMARY_KEYWORDS)


def _first_sentence(text: str) -> str:
    head, sep, _ = text.partition(". ")
    return head + "." if sep else text


def tour(session: Session) -> Dict[str, Any]:
    lines: List[str] = []
    actions: List[Dict[str, Any]] = []
    for section in GUIDE_SECTIONS:
        summary = SUMMARIES[section]
        if session.mode == "executive":
            summary = _first_sentence(summary)
        lines.append(f"**{section_name(section)}**: {summary}")
        actions.append({"tool": "summarize_section", "args": {"section_id": section},
                        "result": summarize_section(section)})
        actions.append({"tool": "highlight_section", "args": {"section_id": section},
                        "result": highlight_section(section)})
    return {"type": "response", "message": "Here's the 60-second tour:\n\n" + "\n\n".join(lines),
            "actions": actions}


def run_tool_agent(session: Session, text: str, cfg: LLMConfig,
                   dwell_time: Optional[int] = None) -> Dict[str, Any]:
    system = build_agent_prompt(session.mode, session.current_section, session.visited_sections, dwell_time)
    messages: List[Dict[str, Any]] = [{"role": "system", "content": system}]
    messages.extend(session.conversation_history)
    messages.append({"role": "user", "content": text})

    assistant = llm_cloud.chat_completion(cfg, messages, tools=TOOLS)
    tool_calls = assistant.get("tool_calls") or []
    actions: List[Dict[str, Any]] = []
    reply = (assistant.get("content") or "").strip()

    if tool_calls:
        logger.info("Agent executing tools: %s", [c["function"]["name"] for c in tool_calls])
        messages.append(assistant)
        for call in tool_calls:
            name = call["function"]["name"]
            try:
                args = json.loads(call["function"].get("arguments") or "{}")
            except json.JSONDecodeError:
                args = {}
            result = dispatch_action(session, name, args)
            actions.append({"tool": name, "args": args, "result": result})
            messages.append({"role": "tool", "tool_call_id": call.get("id"), "content": json.dumps(result)})
        final = llm_cloud.chat_completion(cfg, messages, max_tokens=300)
        reply = (final.get("content") or "").strip()

    reply = reply or NUDGE
    session.add_turn("user", text, settings.max_history_turns)
    session.add_turn("assistant", reply, settings.max_history_turns)
    return {"type": "response", "message": reply, "actions": actions}


def respond_to_message(session: Session, text: str, cfg: LLMConfig, now: Optional[float] = None,
                       dwell_time: Optional[int] = None) -> Dict[str, Any]:
    if wants_summary(text):
        narrative = narrate_summary(session, cfg, now)
        return {"type": "response", "message": narrative.message, "thinking": narrative.thinking}

    if cfg.provider == "cloud":
        try:
            return run_tool_agent(session, text, cfg, dwell_time)
        except Exception as exc:
            logger.warning("Agent turn failed for %s: %s", session.sid, exc)
            add_event("agent.fallback", {"sid": session.sid, "error": str(exc)})

    if "tour" in text.lower():
        return tour(session)
    return {"type": "response", "message": NUDGE}
