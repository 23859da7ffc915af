"""HTTP routers for the web API."""

from .filesystem_routes import router as filesystem_router
from .stream_routes import router as stream_router
from .subtitle_routes import router as subtitle_router

__all__ = ["filesystem_router", "stream_router", "subtitle_router"]
