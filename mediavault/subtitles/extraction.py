"""On-demand extraction of embedded subtitle streams into the cache."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Iterable

from mediavault import logging_manager as log_mgr
from mediavault.config_manager import SubtitleConfig
from mediavault.errors import ExtractionFailed, NotFound

from .cache_layout import SubtitleCacheLayout, sanitize_language_tag
from .inspector import MediaInspector, subtitle_codec_is_image_based
from .models import ExtractionReport, StreamOutcome, SubtitleStream

logger = log_mgr.get_logger().getChild("subtitles.extraction")

NO_TRACKS_MESSAGE = "No subtitle tracks found in the container"


class SubtitleExtractor:
    """Probe a container and materialise each subtitle stream as a WebVTT file.

    Artifacts are only ever created, never rewritten: a stream whose artifact
    already exists is reported as ``cached`` without touching the extractor.
    Two concurrent first-time requests for the same stream may both run the
    extractor; each writes to a private temporary file that is atomically
    renamed into place, so the loser simply replaces identical content.
    """

    def __init__(
        self,
        config: SubtitleConfig,
        layout: SubtitleCacheLayout,
        inspector: MediaInspector,
    ) -> None:
        self._config = config
        self._layout = layout
        self._inspector = inspector

    @property
    def layout(self) -> SubtitleCacheLayout:
        return self._layout

    @property
    def container_extensions(self) -> frozenset[str]:
        return self._config.container_extensions

    def is_supported_container(self, container: Path) -> bool:
        return container.suffix.lower().lstrip(".") in self._config.container_extensions

    def ensure_extracted(self, container: Path) -> ExtractionReport:
        """Make sure every text subtitle stream of ``container`` is cached.

        Raises :class:`NotFound` for a missing container and lets
        :class:`ToolchainUnavailable` and :class:`ProbeFailed` propagate. Per
        stream failures are recorded in the report instead of raised.
        """

        if not container.is_file():
            raise NotFound("Container file not found")

        if not self.is_supported_container(container):
            return ExtractionReport(
                container=container,
                supported=False,
                success=True,
                message="Not a subtitle container; nothing to extract",
            )

        self._inspector.ensure_available()

        started = time.perf_counter()
        streams = self._inspector.probe_subtitle_streams(container)
        logger.info(
            "Probed subtitle streams",
            extra={
                "event": "subtitles.probe.completed",
                "path": str(container),
                "stream_count": len(streams),
            },
        )

        if not streams:
            return ExtractionReport(
                container=container,
                supported=True,
                success=False,
                message=NO_TRACKS_MESSAGE,
            )

        results = list(self._process_streams(container, streams))
        successful = sum(1 for outcome in results if outcome.succeeded)
        report = ExtractionReport(
            container=container,
            supported=True,
            success=successful > 0,
            message=f"Processed {len(results)} subtitle tracks ({successful} successful)",
            results=results,
        )
        logger.info(
            "Subtitle extraction finished",
            extra={
                "event": "subtitles.extract.completed",
                "path": str(container),
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                "extracted": report.extracted_count,
                "cached": report.cached_count,
                "failed": report.failed_count,
            },
        )
        return report

    def _process_streams(
        self, container: Path, streams: Iterable[SubtitleStream]
    ) -> Iterable[StreamOutcome]:
        for stream in streams:
            yield self._process_stream(container, stream)

    def _process_stream(self, container: Path, stream: SubtitleStream) -> StreamOutcome:
        language_tag = sanitize_language_tag(stream.language)
        file_name = self._layout.artifact_name(container, stream.language, stream.index)
        destination = self._layout.artifact_path(container, stream.language, stream.index)

        def outcome(status: str, *, error: str | None = None) -> StreamOutcome:
            return StreamOutcome(
                stream_index=stream.index,
                language_tag=language_tag,
                title=stream.display_title,
                status=status,  # type: ignore[arg-type]
                cache_file_name=file_name if status != "failed" else None,
                path=destination if status != "failed" else None,
                error=error,
            )

        if destination.is_file():
            logger.debug(
                "Subtitle artifact already cached",
                extra={"event": "subtitles.extract.cached", "path": str(destination)},
            )
            return outcome("cached")

        if subtitle_codec_is_image_based(stream.codec):
            return outcome(
                "failed",
                error=f"Image-based subtitle codec '{stream.codec}' cannot be converted to WebVTT",
            )

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            error = f"Unable to create subtitle cache directory: {exc.strerror or exc}"
            logger.warning(
                "Subtitle cache directory is not writable",
                extra={
                    "event": "subtitles.cache.mkdir_failed",
                    "path": str(destination.parent),
                    "stream_index": stream.index,
                    "error": error,
                },
            )
            return outcome("failed", error=error)

        logger.info(
            "Extracting subtitle stream",
            extra={
                "event": "subtitles.extract.started",
                "path": str(container),
                "stream_index": stream.index,
                "language": language_tag,
            },
        )
        try:
            self._inspector.extract_stream(container, stream.index, destination)
        except ExtractionFailed as exc:
            logger.warning(
                "Subtitle stream extraction failed",
                extra={
                    "event": "subtitles.extract.failed",
                    "path": str(container),
                    "stream_index": stream.index,
                    "error": exc.message,
                },
            )
            return outcome("failed", error=exc.message)
        return outcome("extracted")


__all__ = ["NO_TRACKS_MESSAGE", "SubtitleExtractor"]
