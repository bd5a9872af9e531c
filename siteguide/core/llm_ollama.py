# siteguide/core/llm_ollama.py
import os
from typing import Any, Dict, List, Optional

import requests

from .llm import LLMConfig, SYSTEM_PROMPT, build_prompt

def generate_with_ollama(cfg: LLMConfig, behavior: Dict[str, Any],
                         history: Optional[List[Dict[str, str]]] = None) -> str:
    prompt = build_prompt(behavior)
    earlier = "\n".join(f"{t['role'].upper()}: {t['content']}" for t in history or [])
    if earlier:
        prompt = f"CONVERSATION SO FAR:\n{earlier}\n\n{prompt}"
    body = {
        "model": cfg.model,
        "prompt": f"{SYSTEM_PROMPT}\n\n{prompt}",
        "options": {"temperature": cfg.temperature, "num_predict": cfg.max_tokens},
        "stream": False,
    }
    url = cfg.endpoint or os.getenv("OLLAMA_URL", "http://localhost:11434/api/generate")
    r = requests.post(url, json=body, timeout=cfg.timeout)
    r.raise_for_status()
    data = r.json()
    return (data.get("response") or "").strip()
