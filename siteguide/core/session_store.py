"""In-memory session store.

A session holds one visitor's browsing telemetry under a session id (sid).
Sessions are created lazily on first contact and evicted after an idle period;
the WebSocket transport also removes its session when the socket closes.
Nothing is persisted or shared across processes.

Handlers run on threadpool workers, so the registry and each session's
mutators are guarded by locks.
"""
from __future__ import annotations
import time
from dataclasses import dataclass, field
from threading import Lock
from typing import Callable, Dict, List, Optional

from siteguide.core.content import DEFAULT_SHOWCASE_ORDER

@dataclass
class Session:
    sid: str
    created_at: float
    session_start: float
    last_seen: float
    visited_sections: List[str] = field(default_factory=list)
    section_timestamps: Dict[str, float] = field(default_factory=dict)
    dwell_times: Dict[str, int] = field(default_factory=dict)
    current_section: Optional[str] = None
    mode: str = "detailed"
    conversation_history: List[Dict[str, str]] = field(default_factory=list)
    showcase_order: List[str] = field(default_factory=lambda: list(DEFAULT_SHOWCASE_ORDER))
    _lock: Lock = field(default_factory=Lock, init=False, repr=False, compare=False)

    def enter_section(self, section: str, now: float) -> bool:
        """Mark ``section`` as current. Returns True on the first visit."""
        with self._lock:
            self.current_section = section
            if section in self.section_timestamps:
                return False
            self.visited_sections.append(section)
            self.section_timestamps[section] = now
            return True

    def record_dwell(self, section: str, seconds: int, now: float) -> None:
        with self._lock:
            # A dwell report implies the section was entered at some point.
            if section not in self.section_timestamps:
                self.visited_sections.append(section)
                self.section_timestamps[section] = now
                if self.current_section is None:
                    self.current_section = section
            self.dwell_times[section] = seconds

    def add_turn(self, role: str, content: str, limit: int) -> None:
        with self._lock:
            self.conversation_history.append({"role": role, "content": content})
            if len(self.conversation_history) > limit:
                del self.conversation_history[: len(self.conversation_history) - limit]

class SessionStore:
    def __init__(self, idle_seconds: Optional[float] = None,
                 clock: Callable[[], float] = time.time) -> None:
        self._sessions: Dict[str, Session] = {}
        self._idle_seconds = idle_seconds
        self._clock = clock
        self._lock = Lock()

    def ensure(self, sid: str, now: Optional[float] = None) -> Session:
        now = self._clock() if now is None else now
        with self._lock:
            self._prune_locked(now)
            sess = self._sessions.get(sid)
            if sess is None:
                sess = Session(sid=sid, created_at=now, session_start=now, last_seen=now)
                self._sessions[sid] = sess
            sess.last_seen = now
            return sess

    def get(self, sid: str) -> Session | None:
        with self._lock:
            return self._sessions.get(sid)

    def remove(self, sid: str) -> bool:
        with self._lock:
            return self._sessions.pop(sid, None) is not None

    def prune_idle(self, now: Optional[float] = None) -> list[str]:
        now = self._clock() if now is None else now
        with self._lock:
            return self._prune_locked(now)

    def _prune_locked(self, now: float) -> list[str]:
        if not self._idle_seconds:
            return []
        expired = [sid for sid, s in self._sessions.items() if now - s.last_seen > self._idle_seconds]
        for sid in expired:
            del self._sessions[sid]
        return expired

    def __contains__(self, sid: object) -> bool:
        with self._lock:
            return sid in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
