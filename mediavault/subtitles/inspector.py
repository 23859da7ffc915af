"""Probe and extract embedded subtitle streams with ffprobe/ffmpeg."""

from __future__ import annotations

import json
import os
import subprocess
import tempfile
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from mediavault import logging_manager as log_mgr
from mediavault.config_manager import SubtitleConfig
from mediavault.errors import ExtractionFailed, ProbeFailed, ToolchainUnavailable

from .models import UNKNOWN_LANGUAGE, SubtitleStream

logger = log_mgr.get_logger().getChild("subtitles.inspector")

# Bitmap codecs that cannot be converted to WebVTT without OCR.
IMAGE_SUBTITLE_CODECS = frozenset(
    {
        "hdmv_pgs_subtitle",
        "pgssub",
        "dvb_subtitle",
        "dvd_subtitle",
        "xsub",
        "dvb_teletext",
    }
)


def subtitle_codec_is_image_based(codec_name: Optional[str]) -> bool:
    if not codec_name:
        return False
    return codec_name.lower() in IMAGE_SUBTITLE_CODECS


class MediaInspector(Protocol):
    """Capability used by the extraction pipeline to talk to external tools."""

    def ensure_available(self) -> None:
        """Raise :class:`ToolchainUnavailable` when the tools cannot run."""

    def probe_subtitle_streams(self, container: Path) -> List[SubtitleStream]:
        """Return the subtitle streams embedded in ``container``."""

    def extract_stream(self, container: Path, stream_index: int, destination: Path) -> None:
        """Write stream ``stream_index`` of ``container`` to ``destination`` as WebVTT."""


def summarize_ffmpeg_error(stderr: str) -> str:
    """Return a compact error string instead of the full ffmpeg banner."""

    if not stderr:
        return "ffmpeg failed"
    lines = [line.strip() for line in stderr.splitlines() if line.strip()]
    while lines and lines[0].lower().startswith(("ffmpeg version", "ffprobe version")):
        lines.pop(0)
    for line in reversed(lines):
        lower = line.lower()
        if "error" in lower or "invalid" in lower or "unsupported" in lower:
            return line
    return lines[-1] if lines else "ffmpeg failed"


def _decode(payload: bytes | None) -> str:
    return payload.decode(errors="ignore") if payload else ""


def _tag(tags: dict, key: str) -> Optional[str]:
    value = tags.get(key) or tags.get(key.upper())
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def parse_probe_output(raw: bytes | str) -> List[SubtitleStream]:
    """Parse ffprobe JSON into :class:`SubtitleStream` records.

    Raises :class:`ProbeFailed` when the payload is not the expected JSON shape.
    """

    text = raw.decode(errors="ignore") if isinstance(raw, bytes) else raw
    try:
        payload = json.loads(text or "{}")
    except json.JSONDecodeError as exc:
        raise ProbeFailed("Failed to parse ffprobe output") from exc
    if not isinstance(payload, dict):
        raise ProbeFailed("Unexpected ffprobe output")
    streams = payload.get("streams", [])
    if not isinstance(streams, list):
        raise ProbeFailed("Unexpected ffprobe output")

    results: List[SubtitleStream] = []
    for stream in streams:
        if not isinstance(stream, dict):
            continue
        codec_type = stream.get("codec_type")
        if codec_type is not None and codec_type != "subtitle":
            continue
        index = stream.get("index")
        if isinstance(index, bool) or not isinstance(index, int):
            logger.warning(
                "Skipping subtitle stream without a numeric index",
                extra={"event": "subtitles.probe.bad_index", "stream": stream},
            )
            continue
        tags = stream.get("tags") if isinstance(stream.get("tags"), dict) else {}
        results.append(
            SubtitleStream(
                index=index,
                language=_tag(tags, "language") or UNKNOWN_LANGUAGE,
                title=_tag(tags, "title"),
                codec=stream.get("codec_name"),
            )
        )
    return results


class FFmpegInspector:
    """:class:`MediaInspector` backed by the ffprobe and ffmpeg executables."""

    def __init__(self, config: SubtitleConfig) -> None:
        self._ffmpeg = config.ffmpeg_path
        self._ffprobe = config.ffprobe_path
        self._timeout = config.tool_timeout_seconds

    def _run(self, command: Sequence[str]) -> subprocess.CompletedProcess:
        return subprocess.run(
            list(command),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            check=False,
            timeout=self._timeout,
        )

    def ensure_available(self) -> None:
        for binary in (self._ffmpeg, self._ffprobe):
            try:
                result = self._run([binary, "-version"])
            except (OSError, subprocess.SubprocessError) as exc:
                logger.error(
                    "Media toolchain binary is not runnable",
                    extra={"event": "subtitles.toolchain.missing", "binary": binary},
                )
                raise ToolchainUnavailable(
                    "FFmpeg or FFprobe not installed or not working"
                ) from exc
            if result.returncode != 0:
                raise ToolchainUnavailable("FFmpeg or FFprobe not installed or not working")

    def probe_subtitle_streams(self, container: Path) -> List[SubtitleStream]:
        command = [
            self._ffprobe,
            "-v",
            "error",
            "-select_streams",
            "s",
            "-show_entries",
            "stream=index,codec_type,codec_name:stream_tags=language,title",
            "-of",
            "json",
            str(container),
        ]
        try:
            result = self._run(command)
        except subprocess.TimeoutExpired as exc:
            raise ProbeFailed("ffprobe timed out") from exc
        except OSError as exc:
            raise ToolchainUnavailable("FFprobe not installed or not working") from exc
        if result.returncode != 0:
            summary = summarize_ffmpeg_error(_decode(result.stderr))
            raise ProbeFailed(f"ffprobe failed with exit code {result.returncode}: {summary}")
        return parse_probe_output(result.stdout)

    def extract_stream(self, container: Path, stream_index: int, destination: Path) -> None:
        # ffmpeg writes into a temporary sibling which is renamed into place, so
        # readers never observe a half-written artifact.
        try:
            with tempfile.NamedTemporaryFile(
                suffix=".vtt",
                prefix=".partial-",
                dir=destination.parent,
                delete=False,
            ) as handle:
                temp_output = Path(handle.name)
        except OSError as exc:
            raise ExtractionFailed(
                f"Unable to create a temporary file for subtitle track {stream_index}",
                stream_index=stream_index,
            ) from exc
        command = [
            self._ffmpeg,
            "-nostdin",
            "-y",
            "-v",
            "error",
            "-i",
            str(container),
            "-map",
            f"0:{stream_index}",
            "-c:s",
            "webvtt",
            str(temp_output),
        ]
        try:
            result = self._run(command)
        except subprocess.TimeoutExpired as exc:
            temp_output.unlink(missing_ok=True)
            raise ExtractionFailed(
                f"Timed out extracting subtitle track {stream_index}",
                stream_index=stream_index,
                command=command,
            ) from exc
        except OSError as exc:
            temp_output.unlink(missing_ok=True)
            raise ToolchainUnavailable("FFmpeg not installed or not working") from exc

        if result.returncode != 0:
            temp_output.unlink(missing_ok=True)
            raise ExtractionFailed(
                f"Failed to extract subtitle track {stream_index}: "
                f"{summarize_ffmpeg_error(_decode(result.stderr))}",
                stream_index=stream_index,
                command=command,
                returncode=result.returncode,
            )
        try:
            os.replace(temp_output, destination)
        except OSError as exc:
            temp_output.unlink(missing_ok=True)
            raise ExtractionFailed(
                f"Unable to store subtitle track {stream_index}",
                stream_index=stream_index,
                command=command,
            ) from exc


__all__ = [
    "FFmpegInspector",
    "IMAGE_SUBTITLE_CODECS",
    "MediaInspector",
    "parse_probe_output",
    "subtitle_codec_is_image_based",
    "summarize_ffmpeg_error",
]
