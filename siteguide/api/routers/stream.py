"""WebSocket stream: one session per connection, removed on disconnect."""
from __future__ import annotations

import json
import logging
import uuid

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool

from siteguide.event_log import add_event
from siteguide.services.handler import GuideHandler, InvalidRequest

logger = logging.getLogger(__name__)

router = APIRouter()

CONNECTED_MESSAGE = 'Site Guide Agent ready. Try "Give me a 60-sec tour" or ask me anything!'


@router.websocket("/ws")
async def guide_stream(websocket: WebSocket) -> None:
    handler: GuideHandler = websocket.app.state.handler
    await websocket.accept()
    sid = uuid.uuid4().hex
    handler.store.ensure(sid)
    logger.info("Client connected: %s", sid)
    add_event("ws.connected", {"sid": sid})
    await websocket.send_json({"type": "connected", "sessionId": sid, "message": CONNECTED_MESSAGE})

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            raw = message.get("text")
            if raw is None:
                await websocket.send_json({"type": "error", "message": "Frames must be JSON text"})
                continue
            try:
                frame = json.loads(raw)
                replies = await run_in_threadpool(handler.push, sid, frame)
            except (json.JSONDecodeError, InvalidRequest) as exc:
                replies = [{"type": "error", "message": str(exc)}]
            except Exception:
                logger.exception("Frame handling failed for %s", sid)
                replies = [{"type": "error", "message": "Something went wrong"}]
            for reply in replies:
                await websocket.send_json(reply)
    except WebSocketDisconnect:
        pass
    finally:
        handler.store.remove(sid)
        logger.info("Client disconnected: %s", sid)
        add_event("ws.disconnected", {"sid": sid})
