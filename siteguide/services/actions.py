"""Named guide actions the agent (or a client) may invoke.

Every action returns a small result dict describing the side effect the client
should perform. Bad arguments produce ``{"success": False, "error": ...}``;
nothing here raises for unknown ids.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List

from siteguide.core.content import DEMOS, GUIDE_SECTIONS, MODES, SUMMARIES
from siteguide.core.session_store import Session

logger = logging.getLogger(__name__)


def _failure(error: str, **extra: Any) -> Dict[str, Any]:
    return {"success": False, "error": error, **extra}


def summarize_section(section_id: str) -> Dict[str, Any]:
    summary = SUMMARIES.get(section_id)
    if summary is None:
        return _failure(f"Section '{section_id}' not found", section_id=section_id)
    return {"success": True, "summary": summary, "section_id": section_id}


def highlight_section(section_id: str) -> Dict[str, Any]:
    if section_id not in SUMMARIES:
        return _failure(f"Section '{section_id}' not found", section_id=section_id)
    return {"success": True, "action": "scroll_and_highlight", "section_id": section_id}


def open_demo(demo_id: str) -> Dict[str, Any]:
    demo = DEMOS.get(demo_id)
    if demo is None:
        return _failure(f"Demo '{demo_id}' not found", demo_id=demo_id)
    return {"success": True, "action": "open_url", "url": demo["url"], "title": demo["title"], "demo_id": demo_id}


def switch_mode(session: Session, mode: str) -> Dict[str, Any]:
    if mode not in MODES:
        return _failure(f"Unknown mode '{mode}'", mode=session.mode)
    session.mode = mode
    message = ("Switched to executive view - responses will be concise"
               if mode == "executive" else "Switched to detailed view")
    return {"success": True, "action": "switch_mode", "mode": mode, "message": message}


def reorder_showcase(session: Session, order: Any) -> Dict[str, Any]:
    """Apply a new tile order; on any validation failure the stored order is kept."""
    current = list(session.showcase_order)
    if not isinstance(order, list) or not all(isinstance(d, str) for d in order):
        return _failure("Order must be a list of demo ids", order=current)
    unknown = [d for d in order if d not in DEMOS]
    if unknown:
        return _failure(f"Unknown demo id(s): {', '.join(unknown)}", order=current)
    if len(set(order)) != len(order):
        return _failure("Order contains duplicate demo ids", order=current)
    if not 3 <= len(order) <= len(DEMOS):
        return _failure(f"Order must list 3 to {len(DEMOS)} demo ids", order=current)

    new_order = list(order) + [d for d in current if d not in order]
    session.showcase_order = new_order
    return {"success": True, "action": "reorder", "order": list(new_order)}


_SECTION_ENUM = {"type": "string", "enum": GUIDE_SECTIONS}
_DEMO_ENUM = {"type": "string", "enum": list(DEMOS)}

TOOLS: List[Dict[str, Any]] = [
    {
        "type": "function",
        "function": {
            "name": "summarize_section",
            "description": "Return a 2-3 sentence executive summary of a specific section",
            "parameters": {"type": "object", "properties": {"section_id": _SECTION_ENUM},
                           "required": ["section_id"]},
        },
    },
    {
        "type": "function",
        "function": {
            "name": "highlight_section",
            "description": "Smooth-scroll to a section and briefly highlight it",
            "parameters": {"type": "object", "properties": {"section_id": _SECTION_ENUM},
                           "required": ["section_id"]},
        },
    },
    {
        "type": "function",
        "function": {
            "name": "open_demo",
            "description": "Open one of the showcase demo URLs",
            "parameters": {"type": "object", "properties": {"demo_id": _DEMO_ENUM},
                           "required": ["demo_id"]},
        },
    },
    {
        "type": "function",
        "function": {
            "name": "switch_mode",
            "description": "Toggle copy density between executive and detailed",
            "parameters": {"type": "object",
                           "properties": {"mode": {"type": "string", "enum": list(MODES)}},
                           "required": ["mode"]},
        },
    },
    {
        "type": "function",
        "function": {
            "name": "reorder_showcase",
            "description": "Reorder the four showcase tiles",
            "parameters": {
                "type": "object",
                "properties": {"order": {"type": "array", "items": _DEMO_ENUM, "minItems": 3, "maxItems": 4}},
                "required": ["order"],
            },
        },
    },
]

# name -> (required argument, handler)
_ACTIONS: Dict[str, tuple[str, Callable[[Session, Any], Dict[str, Any]]]] = {
    "summarize_section": ("section_id", lambda s, v: summarize_section(v)),
    "highlight_section": ("section_id", lambda s, v: highlight_section(v)),
    "open_demo": ("demo_id", lambda s, v: open_demo(v)),
    "switch_mode": ("mode", switch_mode),
    "reorder_showcase": ("order", reorder_showcase),
}

ACTION_NAMES = tuple(_ACTIONS)


def dispatch_action(session: Session, name: str, args: Dict[str, Any] | None) -> Dict[str, Any]:
    entry = _ACTIONS.get(name)
    if entry is None:
        return _failure(f"Unknown action '{name}'")
    arg_name, handler = entry
    args = args or {}
    if arg_name not in args:
        return _failure(f"Missing argument '{arg_name}' for {name}")
    result = handler(session, args[arg_name])
    if not result["success"]:
        logger.info("Action %s rejected for %s: %s", name, session.sid, result["error"])
    return result
