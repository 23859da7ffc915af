"""Schemas for subtitle extraction and lookup endpoints."""
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import Field

from mediavault.subtitles import ExtractionReport, StreamOutcome, SubtitleStream, SubtitleTrack

from .base import CamelModel


class SubtitleTrackPayload(CamelModel):
    stream_index: int
    language_tag: str
    title: str
    cache_file_name: str
    url: str

    @classmethod
    def from_track(cls, track: SubtitleTrack) -> "SubtitleTrackPayload":
        return cls(
            stream_index=track.stream_index,
            language_tag=track.language_tag,
            title=track.title,
            cache_file_name=track.cache_file_name,
            url=track.url,
        )


class StreamOutcomePayload(CamelModel):
    """Per-stream outcome of an extraction request."""

    stream_index: int
    language_tag: str
    title: str
    status: Literal["extracted", "cached", "failed"]
    success: bool
    cache_file_name: Optional[str] = None
    url: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def from_outcome(cls, outcome: StreamOutcome, *, url: Optional[str] = None) -> "StreamOutcomePayload":
        return cls(
            stream_index=outcome.stream_index,
            language_tag=outcome.language_tag,
            title=outcome.title,
            status=outcome.status,
            success=outcome.succeeded,
            cache_file_name=outcome.cache_file_name,
            url=url,
            error=outcome.error,
        )


class ExtractionResponse(CamelModel):
    success: bool
    message: str
    results: List[StreamOutcomePayload] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: ExtractionReport, results: List[StreamOutcomePayload]) -> "ExtractionResponse":
        return cls(success=report.success, message=report.message, results=results)


class SubtitleListResponse(CamelModel):
    subtitles: List[SubtitleTrackPayload] = Field(default_factory=list)


class SubtitleStreamPayload(CamelModel):
    index: int
    language: str
    title: str
    codec: Optional[str] = None
    image_based: bool = False
    cached: bool = False

    @classmethod
    def from_stream(cls, stream: SubtitleStream, *, image_based: bool, cached: bool) -> "SubtitleStreamPayload":
        return cls(
            index=stream.index,
            language=stream.language,
            title=stream.display_title,
            codec=stream.codec,
            image_based=image_based,
            cached=cached,
        )


class SubtitleStreamsResponse(CamelModel):
    streams: List[SubtitleStreamPayload] = Field(default_factory=list)


__all__ = [
    "ExtractionResponse",
    "StreamOutcomePayload",
    "SubtitleListResponse",
    "SubtitleStreamPayload",
    "SubtitleStreamsResponse",
    "SubtitleTrackPayload",
]
