"""Test doubles for the external media toolchain."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from mediavault.errors import ExtractionFailed, MediaVaultError, ToolchainUnavailable
from mediavault.subtitles import SubtitleStream

WEBVTT_TEMPLATE = "WEBVTT\n\n00:00:00.000 --> 00:00:01.000\nTrack {index}\n"


class FakeMediaInspector:
    """Return canned probe output and record every call."""

    def __init__(
        self,
        streams: Optional[Iterable[SubtitleStream]] = None,
        *,
        available: bool = True,
        failing_indexes: Iterable[int] = (),
        probe_error: Optional[MediaVaultError] = None,
    ) -> None:
        self.streams: List[SubtitleStream] = list(streams or [])
        self.available = available
        self.failing_indexes = set(failing_indexes)
        self.probe_error = probe_error
        self.availability_checks = 0
        self.probe_calls: List[Path] = []
        self.extract_calls: List[Tuple[Path, int, Path]] = []

    def ensure_available(self) -> None:
        self.availability_checks += 1
        if not self.available:
            raise ToolchainUnavailable("FFmpeg or FFprobe not installed or not working")

    def probe_subtitle_streams(self, container: Path) -> List[SubtitleStream]:
        self.probe_calls.append(container)
        if self.probe_error is not None:
            raise self.probe_error
        return list(self.streams)

    def extract_stream(self, container: Path, stream_index: int, destination: Path) -> None:
        self.extract_calls.append((container, stream_index, destination))
        if stream_index in self.failing_indexes:
            raise ExtractionFailed(
                f"Failed to extract subtitle track {stream_index}: Invalid data found",
                stream_index=stream_index,
            )
        destination.write_text(WEBVTT_TEMPLATE.format(index=stream_index), encoding="utf-8")


def default_streams() -> List[SubtitleStream]:
    return [
        SubtitleStream(index=2, language="eng", title="English", codec="subrip"),
        SubtitleStream(index=3, language="fre", title=None, codec="ass"),
    ]
