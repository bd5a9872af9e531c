from __future__ import annotations

import os
import sys
import uuid
from pathlib import Path
from typing import Any, Dict, List, Tuple

import requests
import streamlit as st

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from siteguide.core.content import SECTION_ORDER, section_name  # noqa: E402


def _normalize_url(base_url: str) -> str:
    return base_url.rstrip("/")


def post_agent(base_url: str, sid: str, kind: str, data: Dict[str, Any]) -> Tuple[Dict[str, Any] | None, str | None]:
    url = f"{_normalize_url(base_url)}/api/agent"
    try:
        response = requests.post(url, json={"sessionId": sid, "type": kind, "data": data}, timeout=15)
        body = response.json()
        if response.status_code >= 400:
            return None, body.get("error") or f"HTTP {response.status_code}"
        return body, None
    except requests.RequestException as exc:
        return None, f"Failed to reach /api/agent: {exc}"
    except ValueError as exc:
        return None, f"Invalid JSON returned by /api/agent: {exc}"


def fetch_logs(base_url: str) -> Tuple[List[Dict[str, Any]], str | None]:
    url = f"{_normalize_url(base_url)}/logs"
    try:
        response = requests.get(url, timeout=6)
        response.raise_for_status()
        data = response.json()
        if isinstance(data, dict) and isinstance(data.get("logs"), list):
            return [{"ts": e["ts"], "kind": e["kind"], "payload": str(e["payload"])} for e in data["logs"]], None
        return [], "Unexpected response format from /logs."
    except requests.RequestException as exc:
        return [], f"Failed to fetch logs: {exc}"
    except ValueError as exc:
        return [], f"Invalid JSON returned by /logs: {exc}"


def _show_result(result: Dict[str, Any]) -> None:
    kind = result.get("type")
    if kind == "analysis":
        st.markdown(result["narrative"])
        with st.expander("Guide thinking"):
            st.text(result["thinking"].get("reasoning", ""))
            st.json({k: v for k, v in result["thinking"].items() if k != "reasoning"})
    elif kind == "response":
        st.markdown(result["message"])
        if result.get("thinking"):
            with st.expander("Behavior snapshot"):
                st.json(result["thinking"])
    else:
        st.json(result)


def main() -> None:
    st.set_page_config(page_title="SiteGuide Console", page_icon="🧭", layout="wide")
    st.title("Site Guide Console")
    st.caption("Simulate a visitor: load the page, move between sections, report dwell time, chat.")

    if "sid" not in st.session_state:
        st.session_state.sid = f"console-{uuid.uuid4().hex[:8]}"
    if "results" not in st.session_state:
        st.session_state.results = []

    with st.sidebar:
        backend_url = st.text_input("Backend URL", value=os.getenv("BACKEND_URL", "http://localhost:8000"))
        st.caption(f"Session: `{st.session_state.sid}`")
        if st.button("New visitor", use_container_width=True):
            st.session_state.sid = f"console-{uuid.uuid4().hex[:8]}"
            st.session_state.results = []
            st.rerun()

    if not backend_url.strip():
        st.info("Configure a backend URL to begin.")
        return

    sid = st.session_state.sid
    controls, output = st.columns([1, 2])

    with controls:
        st.subheader("Telemetry")
        if st.button("Page loaded", use_container_width=True):
            st.session_state.results.append(post_agent(backend_url, sid, "behavior", {"behaviorType": "page_loaded"}))
        section = st.selectbox("Section", SECTION_ORDER, format_func=section_name)
        if st.button("Enter section", use_container_width=True):
            st.session_state.results.append(
                post_agent(backend_url, sid, "behavior", {"behaviorType": "section_entered", "section": section})
            )
        dwell = st.select_slider("Dwell checkpoint (s)", options=[3, 8, 15, 30, 45], value=8)
        if st.button("Report dwell", use_container_width=True):
            st.session_state.results.append(
                post_agent(backend_url, sid, "behavior",
                           {"behaviorType": "section_dwell", "section": section, "dwellTime": dwell})
            )

    with output:
        st.subheader("Guide")
        msg = st.chat_input("Ask the guide (try: give me a summary of my journey)")
        if msg:
            st.session_state.results.append(post_agent(backend_url, sid, "message", {"message": msg}))
        for result, error in reversed(st.session_state.results[-10:]):
            if error:
                st.error(error)
            elif result:
                _show_result(result)
            st.divider()

    st.subheader("System Logs")
    logs, log_error = fetch_logs(backend_url)
    if log_error:
        st.warning(log_error)
    if logs:
        st.dataframe(logs, use_container_width=True)
    elif not log_error:
        st.info("No log entries returned.")


if __name__ == "__main__":
    main()
