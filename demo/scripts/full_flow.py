#!/usr/bin/env python3

"""
Walk a scripted visitor through the site guide from the CLI.

Steps:
1. Loads the page and enters a handful of sections.
2. Reports dwell checkpoints and prints any analysis the guide returns.
3. Asks the guide to summarize the journey.
4. Displays recent entries from the diagnostic log.

Pass --check-key to only verify the configured LLM credential with one tiny
chat completion.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
import uuid
from typing import Any, Dict, List, Tuple

import requests


def post_json(url: str, payload: Dict[str, Any]) -> requests.Response:
    try:
        return requests.post(url, json=payload, timeout=15)
    except requests.RequestException as exc:
        raise SystemExit(f"Request to {url} failed: {exc}")


def get_json(url: str) -> Dict[str, Any]:
    try:
        response = requests.get(url, timeout=15)
        response.raise_for_status()
        return response.json()
    except requests.RequestException as exc:
        raise SystemExit(f"Request to {url} failed: {exc}")


def check_key() -> None:
    from siteguide.core.llm import LLMConfig
    from siteguide.core.llm_cloud import chat_completion

    cfg = LLMConfig.from_env()
    print("API key present:", bool(cfg.api_key))
    try:
        message = chat_completion(cfg, [{"role": "user", "content": "Say hello in 5 words"}], max_tokens=20)
    except Exception as exc:
        print("ERROR:", exc)
        sys.exit(1)
    print("SUCCESS:", message.get("content"))


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--check-key", action="store_true", help="only verify the LLM credential")
    args = parser.parse_args()
    if args.check_key:
        check_key()
        return

    base_url = os.getenv("SITEGUIDE_BASE_URL", "http://localhost:8000").rstrip("/")
    sid = f"demo-{uuid.uuid4().hex[:8]}"
    agent_url = f"{base_url}/api/agent"

    def send(kind: str, data: Dict[str, Any]) -> Dict[str, Any]:
        resp = post_json(agent_url, {"sessionId": sid, "type": kind, "data": data})
        if resp.status_code != 200:
            print(f"  ⚠ request failed ({resp.status_code}): {resp.text}")
            sys.exit(1)
        return resp.json()

    print(f"[1/4] Loading page as {sid}")
    send("behavior", {"behaviorType": "page_loaded"})
    journey: List[Tuple[str, int]] = [
        ("hero", 3),
        ("featured-demo", 8),
        ("how-it-works", 15),
        ("showcase", 8),
    ]

    print("[2/4] Visiting sections")
    for section, dwell in journey:
        send("behavior", {"behaviorType": "section_entered", "section": section})
        result = send("behavior", {"behaviorType": "section_dwell", "section": section, "dwellTime": dwell})
        print(f"  • {section} ({dwell}s)")
        if result.get("type") == "analysis":
            print("-" * 60)
            print(result["narrative"])
            print(f"  profile={result['thinking']['profile']} interests={result['thinking']['interests']}")
            print("-" * 60)

    print("[3/4] Asking for a journey summary")
    reply = send("message", {"message": "Give me a summary of my journey"})
    print(reply["message"])

    print("[4/4] Recent diagnostic events from /logs")
    logs = get_json(f"{base_url}/logs?limit=10")
    print(json.dumps([{"kind": e["kind"], "payload": e["payload"]} for e in logs.get("logs", [])], indent=2))


if __name__ == "__main__":
    main()
