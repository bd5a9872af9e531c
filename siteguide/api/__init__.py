"""API package that assembles FastAPI routers."""

from .routers.agent import router as agent_router
from .routers.stream import router as stream_router

__all__ = ["agent_router", "stream_router"]
