"""Read-only view of subtitle artifacts that were already extracted."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List

from mediavault import logging_manager as log_mgr

from .cache_layout import SubtitleCacheLayout
from .models import UNKNOWN_LANGUAGE, SubtitleTrack

logger = log_mgr.get_logger().getChild("subtitles.cache_index")


class SubtitleCacheIndex:
    """List cached tracks for a container without invoking any external tool."""

    def __init__(self, layout: SubtitleCacheLayout) -> None:
        self._layout = layout

    def list_cached(self, container: Path) -> List[SubtitleTrack]:
        cache_dir = self._layout.cache_dir_for(container)
        try:
            names = sorted(os.listdir(cache_dir))
        except (FileNotFoundError, NotADirectoryError):
            return []
        except OSError as exc:
            logger.warning(
                "Unable to read subtitle cache directory",
                extra={"event": "subtitles.cache.unreadable", "path": str(cache_dir), "error": str(exc)},
            )
            return []

        tracks: List[SubtitleTrack] = []
        position = 0
        for name in names:
            # Hidden names are in-flight temporary files from the extractor.
            if name.startswith(".") or not self._layout.belongs_to(container, name):
                continue
            parsed = self._layout.parse_artifact_name(container, name)
            if parsed is None:
                logger.debug(
                    "Unexpected subtitle artifact name",
                    extra={"event": "subtitles.cache.unparsed", "path": str(cache_dir / name)},
                )
                stream_index, language_tag = position, UNKNOWN_LANGUAGE
            else:
                stream_index, language_tag = parsed.stream_index, parsed.language_tag
            tracks.append(
                SubtitleTrack(
                    stream_index=stream_index,
                    language_tag=language_tag,
                    title=f"Subtitle {stream_index} ({language_tag})",
                    cache_file_name=name,
                    url=self._layout.artifact_url(container, name),
                )
            )
            position += 1

        tracks.sort(key=lambda track: (track.stream_index, track.cache_file_name))
        return tracks


__all__ = ["SubtitleCacheIndex"]
