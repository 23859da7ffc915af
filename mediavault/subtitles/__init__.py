"""Subtitle extraction pipeline and cache index."""

from .cache_index import SubtitleCacheIndex
from .cache_layout import SubtitleCacheLayout, sanitize_language_tag
from .extraction import NO_TRACKS_MESSAGE, SubtitleExtractor
from .inspector import (
    FFmpegInspector,
    MediaInspector,
    parse_probe_output,
    subtitle_codec_is_image_based,
    summarize_ffmpeg_error,
)
from .models import (
    UNKNOWN_LANGUAGE,
    ExtractionReport,
    StreamOutcome,
    SubtitleStream,
    SubtitleTrack,
)

__all__ = [
    "ExtractionReport",
    "FFmpegInspector",
    "MediaInspector",
    "NO_TRACKS_MESSAGE",
    "StreamOutcome",
    "SubtitleCacheIndex",
    "SubtitleCacheLayout",
    "SubtitleExtractor",
    "SubtitleStream",
    "SubtitleTrack",
    "UNKNOWN_LANGUAGE",
    "parse_probe_output",
    "sanitize_language_tag",
    "subtitle_codec_is_image_based",
    "summarize_ffmpeg_error",
]
