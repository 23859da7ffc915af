"""Range-aware byte streaming for permitted media files."""

from __future__ import annotations

import re
import stat
import urllib.parse
from dataclasses import dataclass, field
from pathlib import Path
from typing import AsyncIterator, Dict, Optional

from starlette.concurrency import run_in_threadpool

from mediavault import logging_manager as log_mgr
from mediavault.errors import MediaIOError, NotAFile, NotFound

from .ranges import parse_byte_range

logger = log_mgr.get_logger().getChild("streaming")

CHUNK_SIZE = 1 << 16
DEFAULT_MEDIA_TYPE = "application/octet-stream"

CONTENT_TYPES: Dict[str, str] = {
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".mov": "video/quicktime",
    ".avi": "video/x-msvideo",
    ".mkv": "video/x-matroska",
    ".wmv": "video/x-ms-wmv",
    ".flv": "video/x-flv",
}


def content_type_for(path: Path) -> str:
    return CONTENT_TYPES.get(path.suffix.lower(), DEFAULT_MEDIA_TYPE)


@dataclass(frozen=True)
class StreamPlan:
    """Everything needed to answer a byte request for one file."""

    path: Path
    status_code: int
    media_type: str
    start: int
    end: int
    file_size: int
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def content_length(self) -> int:
        return max(self.end - self.start + 1, 0)

    @property
    def is_partial(self) -> bool:
        return self.status_code == 206


def _should_inline(media_type: str) -> bool:
    return media_type.startswith(("video/", "audio/", "image/")) or media_type == "text/vtt"


def _content_disposition(path: Path, media_type: str) -> str:
    # Latin-1 header encoding fails on accented filenames; send an ASCII
    # fallback and advertise the UTF-8 name via RFC 5987.
    original_name = path.name
    safe_ascii = re.sub(r"[^0-9A-Za-z._-]", "_", original_name) or "download"
    quoted_utf8 = urllib.parse.quote(original_name)
    disposition = "inline" if _should_inline(media_type) else "attachment"
    return f"{disposition}; filename=\"{safe_ascii}\"; filename*=UTF-8''{quoted_utf8}"


def prepare_stream(
    resolved_path: Path,
    range_header: Optional[str] = None,
    *,
    media_type: Optional[str] = None,
) -> StreamPlan:
    """Stat ``resolved_path`` and decide status, headers and byte window.

    The caller is responsible for sandbox checks. Raises :class:`NotFound` when
    the file is missing, :class:`NotAFile` for directories and other non-regular
    files, and :class:`RangeNotSatisfiable` for ranges beyond the end of file.
    """

    try:
        stat_result = resolved_path.stat()
    except (FileNotFoundError, NotADirectoryError) as exc:
        raise NotFound("File not found") from exc
    except OSError as exc:
        raise MediaIOError(f"Unable to stat file: {exc.strerror or exc}") from exc

    if not stat.S_ISREG(stat_result.st_mode):
        raise NotAFile("Path is not a file")

    file_size = int(stat_result.st_size)
    resolved_type = media_type or content_type_for(resolved_path)
    window = parse_byte_range(range_header, file_size)

    if range_header and window is None:
        logger.debug(
            "Ignoring unsupported Range header; serving full file",
            extra={"event": "stream.range.ignored", "path": str(resolved_path), "range": range_header},
        )

    headers = {"Accept-Ranges": "bytes"}
    if window is not None:
        start, end = window
        status_code = 206
        headers["Content-Range"] = f"bytes {start}-{end}/{file_size}"
    else:
        start, end = 0, file_size - 1
        status_code = 200

    headers["Content-Length"] = str(max(end - start + 1, 0))
    headers["Content-Disposition"] = _content_disposition(resolved_path, resolved_type)
    return StreamPlan(
        path=resolved_path,
        status_code=status_code,
        media_type=resolved_type,
        start=start,
        end=end,
        file_size=file_size,
        headers=headers,
    )


async def aiter_file_chunks(
    path: Path, start: int, end: int, *, chunk_size: int = CHUNK_SIZE
) -> AsyncIterator[bytes]:
    """Yield bytes ``start..end`` (inclusive) of ``path``, reading in the thread pool.

    The file is opened on first iteration and closed in ``finally``, which also
    runs when the consuming response is cancelled by a client disconnect.
    """

    total = max(end - start + 1, 0)
    if total <= 0:
        return

    stream = await run_in_threadpool(path.open, "rb")
    try:
        await run_in_threadpool(stream.seek, start)
        remaining = total
        while remaining > 0:
            chunk = await run_in_threadpool(stream.read, min(chunk_size, remaining))
            if not chunk:
                break
            remaining -= len(chunk)
            yield chunk
    finally:
        stream.close()


__all__ = [
    "CONTENT_TYPES",
    "DEFAULT_MEDIA_TYPE",
    "StreamPlan",
    "aiter_file_chunks",
    "content_type_for",
    "prepare_stream",
]
