# siteguide/core/llm.py
from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

@dataclass
class LLMConfig:
    provider: str = "none"  # "none" | "cloud" | "ollama"
    model: str = "gpt-4o-mini"
    api_key: Optional[str] = None
    endpoint: Optional[str] = None
    temperature: float = 0.7
    max_tokens: int = 300
    timeout: float = 8.0

    @property
    def enabled(self) -> bool:
        return self.provider in {"cloud", "ollama"}

    @classmethod
    def from_env(cls) -> "LLMConfig":
        return cls(
            provider=os.getenv("LLM_PROVIDER", "none"),
            model=os.getenv("LLM_MODEL", "gpt-4o-mini"),
            api_key=os.getenv("LLM_API_KEY") or os.getenv("OPENAI_API_KEY"),
            endpoint=os.getenv("LLM_ENDPOINT"),
            temperature=float(os.getenv("LLM_TEMPERATURE", "0.7")),
            max_tokens=int(os.getenv("LLM_MAX_TOKENS", "300")),
            timeout=float(os.getenv("LLM_TIMEOUT", "8")),
        )

SYSTEM_PROMPT = """You are the Site Guide, an observant assistant embedded in a website
about building prototypes with AI development tools. You watch how a visitor moves
through the page and offer a short psychological read of their intent.
Style: 2-3 sentences, second person, warm, specific to the data, no bullet lists,
no speculation about identity or demographics."""

def build_prompt(behavior: Dict[str, Any]) -> str:
    dwell = behavior.get("dwell_times") or {}
    dwell_text = ", ".join(f"{k}: {v}s" for k, v in dwell.items()) or "none reported"
    visited = ", ".join(behavior.get("visited_sections") or []) or "none"
    interests = ", ".join(behavior.get("interests") or []) or "none detected"
    return f"""TIME ON SITE: {behavior.get('time_on_site', 0)}s
VISITED SECTIONS ({behavior.get('visited_count', 0)}): {visited}
DWELL TIMES: {dwell_text}
NAVIGATION: {behavior.get('navigation_pattern', 'linear')}
INTERESTS: {interests}
PROFILE: {behavior.get('profile', 'explorer')}

Explain in 2-3 sentences what this browsing suggests about the visitor and what
they should look at next."""

def build_agent_prompt(mode: str, current_section: Optional[str], visited: List[str],
                       dwell_time: Optional[int] = None) -> str:
    prompt = f"""You are the Site Guide Agent, an assistant that helps executives navigate this website.

CURRENT MODE: {mode}
CURRENT SECTION: {current_section or 'unknown'}
VISITED SECTIONS: {', '.join(visited) or 'none'}

BEHAVIOR POLICY:
1. If the user asks for a tour: summarize sections in order using summarize_section and highlight_section.
2. If the user requests an executive view: call switch_mode('executive') and keep replies to 1-3 sentences.
3. When asked to show a demo: pick one (mms, vzt, training, vcg), call open_demo, explain why in one sentence.
4. ALWAYS keep responses to 1-3 sentences unless asked for more.
5. Use tools when appropriate; don't just describe actions, call them.
6. When summarizing, mention key metrics: $70M pipeline, 99% cost reduction, 2-hour builds."""
    if dwell_time is not None and dwell_time >= 6:
        prompt += (f"\n\nUSER CONTEXT: User has been on this section for {dwell_time} seconds "
                   "- proactively offer help!")
    return prompt
