from __future__ import annotations
import logging
import os
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from siteguide.api import agent_router, stream_router
from siteguide.core.config import Settings, settings
from siteguide.core.llm import LLMConfig
from siteguide.core.session_store import SessionStore
from siteguide.event_log import get_events
from siteguide.services.handler import GuideHandler

logging.basicConfig(
    level=os.getenv("GUIDE_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
)
logger = logging.getLogger("siteguide")


def create_app(llm_cfg: Optional[LLMConfig] = None, store: Optional[SessionStore] = None,
               cfg: Settings = settings) -> FastAPI:
    if llm_cfg is None:
        llm_cfg = LLMConfig.from_env()
    if store is None:
        store = SessionStore(idle_seconds=cfg.session_idle_seconds)

    app = FastAPI(title=cfg.app_name)
    app.state.handler = GuideHandler(store, llm_cfg, cfg)
    app.include_router(agent_router)
    app.include_router(stream_router)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cfg.allow_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/health")
    def health() -> dict:
        return {"ok": True, "provider": llm_cfg.provider, "sessions": len(store)}

    @app.get("/logs")
    def get_logs(limit: int = 100, kind: Optional[str] = None) -> dict:
        safe_limit = max(1, min(limit, 500))
        events = get_events(safe_limit, kind)
        return {"count": len(events), "logs": events}

    logger.info("Site guide ready (provider=%s)", llm_cfg.provider)
    return app


app = create_app()
