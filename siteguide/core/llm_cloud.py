# siteguide/core/llm_cloud.py
"""Hosted chat-completion provider (any OpenAI-compatible endpoint)."""
from __future__ import annotations
from typing import Any, Dict, List, Optional

import openai
from openai import OpenAI

from .llm import LLMConfig, SYSTEM_PROMPT, build_prompt

DEFAULT_ENDPOINT = "https://api.openai.com/v1"


class ProviderError(RuntimeError):
    """Raised when the hosted model cannot produce a completion."""


def _client(cfg: LLMConfig) -> OpenAI:
    # Retries would stretch a failed call past the configured timeout.
    return OpenAI(api_key=cfg.api_key, base_url=cfg.endpoint or DEFAULT_ENDPOINT,
                  timeout=cfg.timeout, max_retries=0)


def chat_completion(cfg: LLMConfig, messages: List[Dict[str, Any]],
                    tools: Optional[List[Dict[str, Any]]] = None,
                    max_tokens: Optional[int] = None) -> Dict[str, Any]:
    """Return the first choice's message as a plain dict."""
    if not cfg.api_key:
        raise ProviderError("LLM_API_KEY is not configured")
    kwargs: Dict[str, Any] = {
        "model": cfg.model,
        "messages": messages,
        "temperature": cfg.temperature,
        "max_tokens": max_tokens or cfg.max_tokens,
    }
    if tools:
        kwargs["tools"] = tools
        kwargs["tool_choice"] = "auto"
    try:
        resp = _client(cfg).chat.completions.create(**kwargs)
    except openai.AuthenticationError as exc:
        raise ProviderError("API key is invalid") from exc
    except openai.RateLimitError as exc:
        raise ProviderError("API quota exceeded or rate limited") from exc
    if not resp.choices:
        raise ProviderError("Completion returned no choices")
    return resp.choices[0].message.model_dump(exclude_none=True)


def generate_with_cloud(cfg: LLMConfig, behavior: Dict[str, Any],
                        history: Optional[List[Dict[str, str]]] = None) -> str:
    messages: List[Dict[str, Any]] = [{"role": "system", "content": SYSTEM_PROMPT}]
    messages.extend(history or [])
    messages.append({"role": "user", "content": build_prompt(behavior)})
    message = chat_completion(cfg, messages)
    return (message.get("content") or "").strip()
