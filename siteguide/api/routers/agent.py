"""Request/response endpoints for the site guide."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from siteguide.event_log import add_event
from siteguide.inference.behavior import analyze_behavior
from siteguide.services.actions import dispatch_action
from siteguide.services.handler import GuideHandler, InvalidRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _handler(request: Request) -> GuideHandler:
    return request.app.state.handler


@router.post("/agent")
async def agent(request: Request) -> JSONResponse:
    try:
        payload = await request.json()
    except ValueError:
        return JSONResponse(status_code=400, content={"error": "Request body must be valid JSON"})

    try:
        result = await run_in_threadpool(_handler(request).handle, payload)
    except InvalidRequest as exc:
        add_event("agent.rejected", {"error": str(exc)})
        return JSONResponse(status_code=400, content={"error": str(exc)})
    except Exception as exc:
        logger.exception("Agent request failed")
        add_event("agent.error", {"error": str(exc)})
        return JSONResponse(status_code=500, content={"error": "Internal server error", "message": str(exc)})
    return JSONResponse(content=result)


@router.get("/sessions/{sid}/behavior")
def session_behavior(sid: str, request: Request) -> Dict[str, Any]:
    handler = _handler(request)
    sess = handler.store.get(sid)
    if not sess:
        raise HTTPException(status_code=404, detail=f"Unknown session '{sid}'")
    return {
        "sid": sid,
        "mode": sess.mode,
        "showcaseOrder": list(sess.showcase_order),
        "behavior": analyze_behavior(sess).to_payload(),
    }


@router.post("/sessions/{sid}/actions/{name}")
def session_action(sid: str, name: str, request: Request,
                   args: Optional[Dict[str, Any]] = Body(default=None)) -> JSONResponse:
    handler = _handler(request)
    sess = handler.store.get(sid)
    if not sess:
        raise HTTPException(status_code=404, detail=f"Unknown session '{sid}'")
    result = dispatch_action(sess, name, args or {})
    add_event("action", {"sid": sid, "name": name, "success": result["success"]})
    return JSONResponse(status_code=200 if result["success"] else 400, content=result)


@router.delete("/sessions/{sid}")
def remove_session(sid: str, request: Request) -> Dict[str, Any]:
    removed = _handler(request).store.remove(sid)
    return {"sid": sid, "removed": removed}
