"""Data structures shared by the subtitle pipeline and cache index."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Literal, Optional

UNKNOWN_LANGUAGE = "unknown"

OutcomeStatus = Literal["extracted", "cached", "failed"]


@dataclass(frozen=True)
class SubtitleStream:
    """A subtitle stream reported by the prober."""

    index: int
    language: str = UNKNOWN_LANGUAGE
    title: Optional[str] = None
    codec: Optional[str] = None

    @property
    def display_title(self) -> str:
        return self.title or f"Subtitle {self.index}"


@dataclass(frozen=True)
class SubtitleTrack:
    """A cached subtitle artifact ready for playback."""

    stream_index: int
    language_tag: str
    title: str
    cache_file_name: str
    url: str


@dataclass(frozen=True)
class StreamOutcome:
    """Result of processing one subtitle stream during extraction."""

    stream_index: int
    language_tag: str
    title: str
    status: OutcomeStatus
    cache_file_name: Optional[str] = None
    path: Optional[Path] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status != "failed"


@dataclass(frozen=True)
class ExtractionReport:
    """Aggregate outcome of one extraction request."""

    container: Path
    supported: bool
    success: bool
    message: str
    results: List[StreamOutcome] = field(default_factory=list)

    @property
    def extracted_count(self) -> int:
        return sum(1 for outcome in self.results if outcome.status == "extracted")

    @property
    def cached_count(self) -> int:
        return sum(1 for outcome in self.results if outcome.status == "cached")

    @property
    def failed_count(self) -> int:
        return sum(1 for outcome in self.results if outcome.status == "failed")


__all__ = [
    "ExtractionReport",
    "OutcomeStatus",
    "StreamOutcome",
    "SubtitleStream",
    "SubtitleTrack",
    "UNKNOWN_LANGUAGE",
]
