"""Sandboxed media browsing, streaming and subtitle extraction service."""

from .environment import load_environment

# Load .env-style files as soon as the package is imported so the CLI and the
# uvicorn factory see the same settings.
load_environment()

__all__ = ["load_environment"]
