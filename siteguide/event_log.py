"""Bounded in-memory diagnostic log served at ``/logs``."""
from __future__ import annotations

import os
from collections import deque
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Deque, Dict, List

_MAX_LEN = int(os.getenv("GUIDE_EVENT_LOG_LIMIT", "500"))
_log: Deque[Dict[str, Any]] = deque(maxlen=_MAX_LEN)
_lock = Lock()


def add_event(kind: str, payload: Dict[str, Any]) -> None:
    entry = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "kind": kind,
        "payload": payload,
    }
    with _lock:
        _log.appendleft(entry)


def get_events(limit: int | None = None, kind: str | None = None) -> List[Dict[str, Any]]:
    with _lock:
        items = list(_log)
    if kind:
        items = [e for e in items if e["kind"] == kind]
    if limit is None:
        return items
    return items[: max(0, min(limit, _MAX_LEN))]


def clear_events() -> None:
    with _lock:
        _log.clear()
