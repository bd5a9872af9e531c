import sys
import threading

from siteguide.core.session_store import SessionStore

from conftest import T0, make_session


def test_ensure_creates_lazily_and_reuses(store):
    assert "a" not in store
    first = store.ensure("a", now=T0)
    again = store.ensure("a", now=T0 + 5)
    assert first is again
    assert again.last_seen == T0 + 5
    assert len(store) == 1


def test_remove_reports_whether_session_existed(store):
    store.ensure("a", now=T0)
    assert store.remove("a") is True
    assert store.remove("a") is False
    assert store.get("a") is None


def test_idle_sessions_are_evicted_on_next_contact():
    store = SessionStore(idle_seconds=60)
    store.ensure("old", now=T0)
    store.ensure("fresh", now=T0 + 50)
    store.ensure("new", now=T0 + 100)
    assert "old" not in store
    assert "fresh" in store
    assert "new" in store


def test_no_idle_limit_keeps_everything():
    store = SessionStore(idle_seconds=None)
    store.ensure("a", now=T0)
    assert store.prune_idle(now=T0 + 10**6) == []
    assert "a" in store


def test_repeated_entries_never_duplicate_visits():
    sess = make_session()
    for i in range(5):
        sess.enter_section("hero", T0 + i)
        sess.enter_section("economics", T0 + 10 + i)
    assert sess.visited_sections == ["hero", "economics"]
    assert sess.section_timestamps == {"hero": T0, "economics": T0 + 10}
    assert sess.current_section == "economics"


def test_dwell_overwrites_and_implies_a_visit():
    sess = make_session(["hero"])
    sess.record_dwell("showcase", 8, T0 + 3)
    sess.record_dwell("showcase", 15, T0 + 10)
    assert sess.dwell_times == {"showcase": 15}
    assert sess.visited_sections == ["hero", "showcase"]
    assert set(sess.dwell_times) <= set(sess.visited_sections)


def test_conversation_history_is_bounded():
    sess = make_session()
    for i in range(7):
        sess.add_turn("user", f"m{i}", limit=4)
    assert [t["content"] for t in sess.conversation_history] == ["m3", "m4", "m5", "m6"]


def _run_threads(target, count=8):
    errors = []

    def guarded(n):
        try:
            target(n)
        except Exception as exc:  # surfaced through the assertion below
            errors.append(exc)

    old_interval = sys.getswitchinterval()
    sys.setswitchinterval(1e-6)
    try:
        threads = [threading.Thread(target=guarded, args=(n,)) for n in range(count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
    finally:
        sys.setswitchinterval(old_interval)
    return errors


def test_concurrent_ensure_and_prune_are_safe():
    store = SessionStore(idle_seconds=60)

    def worker(n):
        for i in range(2000):
            store.ensure(f"{n}-{i}", now=T0 + i)

    assert _run_threads(worker) == []
    assert len(store) > 0


def test_concurrent_entries_record_each_section_once():
    sess = make_session()
    sections = ["hero", "featured-demo", "showcase", "economics"]

    def worker(n):
        for i in range(500):
            sess.enter_section(sections[(n + i) % len(sections)], T0 + i)
            sess.record_dwell(sections[i % len(sections)], i, T0 + i)

    assert _run_threads(worker) == []
    assert sorted(sess.visited_sections) == sorted(sections)
    assert set(sess.section_timestamps) == set(sections)
