"""FastAPI surface for browsing, streaming and subtitles."""

from .application import create_app

__all__ = ["create_app"]
