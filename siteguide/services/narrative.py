"""Narrative generation for the enter, dwell and summary triggers.

Only ``summary`` may call a language model. Whatever happens on that call, the
caller gets text back: provider failures fall through to the rule-based
templates below.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from siteguide.core import llm_cloud, llm_ollama
from siteguide.core.config import settings
from siteguide.core.content import section_name
from siteguide.core.llm import LLMConfig
from siteguide.core.session_store import Session
from siteguide.event_log import add_event
from siteguide.inference.behavior import BehaviorSummary, analyze_behavior, unvisited_sections

logger = logging.getLogger(__name__)

TRIGGERS = ("enter", "dwell", "summary")
MAX_LLM_REPLY_CHARS = 1200

PROFILE_TEMPLATES = {
    "decision-maker": "You've shown strong interest in business value and ROI. "
                      "You're evaluating whether this is worth investing in.",
    "analyst": "You're diving deep into how this actually works. "
               "You want to understand the mechanics before committing.",
    "explorer": "You're browsing to get a sense of what's possible. Still forming your opinion.",
    "skeptic": "You're moving quickly, possibly skeptical. You need a compelling reason to engage further.",
}

PROFILE_TRAITS = {
    "decision-maker": "ROI-focused, time-conscious, looks for executive summary, has approval authority.",
    "analyst": "Detail-oriented, seeks technical validation, wants proof of concept, methodical.",
    "skeptic": "Requires proof, experienced with failed promises, risk-aware.",
    "explorer": "Open-minded, learning-focused, curious about possibilities.",
}

INTEREST_LABELS = {
    "real-examples": "**Real Examples** - you want proof before committing",
    "implementation": '**Implementation** - you need to understand the "how" deeply',
    "business-value": "**Business Value** - ROI-focused, need to justify investment",
}

# interest -> (observation, section to suggest, call to action)
INTEREST_PROMPTS = {
    "real-examples": ("Seems like you're interested in **real examples**.", "showcase",
                      "Check out **Showcase** for 3 more."),
    "implementation": ("Seems like you want to know **how it works**.", "capabilities",
                       "See **Capabilities** next."),
    "business-value": ("Seems like you care about **ROI**.", "economics",
                       "Don't miss **Economics** - 99% cost reduction."),
}
INTEREST_PRIORITY = ("real-examples", "implementation", "business-value")

RECOMMENDATIONS = {
    "real-examples": "Open one of the showcase demos to see the proof for yourself.",
    "implementation": "The How It Works walkthrough shows the full build loop step by step.",
    "business-value": "The Economics section lays out the cost comparison you'll need for stakeholders.",
}


@dataclass
class Narrative:
    message: str
    source: str = "rule"  # "rule" | "llm"
    thinking: Dict[str, Any] = field(default_factory=dict)


def narrate_enter(session: Session, section: str) -> str:
    message = f"📍 You're viewing **{section_name(section)}**"
    if len(session.visited_sections) > 2:
        recent = " → ".join(section_name(s) for s in session.visited_sections[-3:])
        message += f"\n\nYour path: {recent}"
    return message


def narrate_dwell(session: Session, behavior: BehaviorSummary) -> str:
    seen = ", ".join(section_name(s) for s in session.visited_sections[:4]) or "nothing yet"
    message = f"I'm observing: You've seen {seen}"
    if len(session.visited_sections) > 4:
        message += f" + {len(session.visited_sections) - 4} more"
    message += "."

    unvisited = unvisited_sections(session)
    for interest in INTEREST_PRIORITY:
        if interest in behavior.interests:
            observation, target, cta = INTEREST_PROMPTS[interest]
            message += f" {observation}"
            if target in unvisited:
                message += f" {cta}"
            return message
    if unvisited:
        message += f" You may want to see **{section_name(unvisited[0])}**."
    return message


def rule_based_summary(behavior: BehaviorSummary, mode: str = "detailed") -> str:
    profile = behavior.profile
    message = (f"Based on {behavior.time_on_site}s across {behavior.visited_count} sections, "
               f"I see you as a **{profile}**.\n\n{PROFILE_TEMPLATES[profile]}")
    if mode == "detailed":
        message += f"\n\n**{profile.title()} Traits:** {PROFILE_TRAITS[profile]}"
        if behavior.interests:
            message += "\n\n**Detected Interests:**\n"
            message += "\n".join(f"• {INTEREST_LABELS[i]}" for i in behavior.interests)
    elif behavior.interests:
        message += f"\n\n**Key interests**: {', '.join(behavior.interests)}"

    for interest in INTEREST_PRIORITY:
        if interest in behavior.interests:
            message += f"\n\n{RECOMMENDATIONS[interest]}"
            break
    return message


def generate_with_provider(cfg: LLMConfig, behavior: Dict[str, Any],
                           history: Optional[List[Dict[str, str]]] = None) -> Optional[str]:
    if cfg.provider == "cloud":
        return llm_cloud.generate_with_cloud(cfg, behavior, history)
    if cfg.provider == "ollama":
        return llm_ollama.generate_with_ollama(cfg, behavior, history)
    return None


def narrate_summary(session: Session, cfg: LLMConfig, now: Optional[float] = None) -> Narrative:
    behavior = analyze_behavior(session, now)
    thinking = behavior.to_payload()

    reply = None
    if cfg.enabled:
        try:
            reply = generate_with_provider(cfg, behavior.as_dict(), session.conversation_history)
        except Exception as exc:
            logger.warning("Summary provider %s failed, using rule-based narrative: %s", cfg.provider, exc)
            add_event("narrative.fallback", {"sid": session.sid, "provider": cfg.provider, "error": str(exc)})
            reply = None

    if reply and len(reply) <= MAX_LLM_REPLY_CHARS:
        session.add_turn("user", "Summarize my journey through the site.", settings.max_history_turns)
        session.add_turn("assistant", reply, settings.max_history_turns)
        return Narrative(message=reply, source="llm", thinking=thinking)
    return Narrative(message=rule_based_summary(behavior, session.mode), thinking=thinking)


def narrate(session: Session, trigger: str, cfg: LLMConfig, now: Optional[float] = None,
            section: Optional[str] = None) -> Narrative:
    if trigger == "enter":
        return Narrative(message=narrate_enter(session, section or session.current_section or ""))
    if trigger == "dwell":
        behavior = analyze_behavior(session, now)
        return Narrative(message=narrate_dwell(session, behavior), thinking=behavior.to_payload())
    if trigger == "summary":
        return narrate_summary(session, cfg, now)
    raise ValueError(f"Unknown narrative trigger '{trigger}'.")
