"""Pydantic schemas exposed by the web API."""

from .base import CamelModel, ErrorResponse, to_camel
from .filesystem import (
    AllowedPathPayload,
    AllowedRootsResponse,
    FileSystemItem,
    FileSystemResponse,
)
from .subtitles import (
    ExtractionResponse,
    StreamOutcomePayload,
    SubtitleListResponse,
    SubtitleStreamPayload,
    SubtitleStreamsResponse,
    SubtitleTrackPayload,
)

__all__ = [
    "AllowedPathPayload",
    "AllowedRootsResponse",
    "CamelModel",
    "ErrorResponse",
    "ExtractionResponse",
    "FileSystemItem",
    "FileSystemResponse",
    "StreamOutcomePayload",
    "SubtitleListResponse",
    "SubtitleStreamPayload",
    "SubtitleStreamsResponse",
    "SubtitleTrackPayload",
    "to_camel",
]
