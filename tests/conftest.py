import pytest

from siteguide.core.llm import LLMConfig
from siteguide.core.session_store import Session, SessionStore
from siteguide.event_log import clear_events

T0 = 1_700_000_000.0


@pytest.fixture(autouse=True)
def _fresh_event_log():
    clear_events()
    yield
    clear_events()


@pytest.fixture
def store():
    return SessionStore(idle_seconds=1800, clock=lambda: T0)


@pytest.fixture
def no_llm():
    return LLMConfig(provider="none")


@pytest.fixture
def cloud_llm():
    return LLMConfig(provider="cloud", api_key="sk-test", endpoint="https://llm.invalid/v1", timeout=1)


def make_session(visited=(), dwell=None, start=T0, sid="s-1"):
    """Build a session that visited ``visited`` in order with reported ``dwell``."""
    sess = Session(sid=sid, created_at=start, session_start=start, last_seen=start)
    for i, section in enumerate(visited):
        sess.enter_section(section, start + i)
    for section, seconds in (dwell or {}).items():
        sess.record_dwell(section, seconds, start)
    return sess
