"""Byte-range streaming of permitted files."""

from .engine import (
    CONTENT_TYPES,
    DEFAULT_MEDIA_TYPE,
    StreamPlan,
    aiter_file_chunks,
    content_type_for,
    prepare_stream,
)
from .ranges import parse_byte_range

__all__ = [
    "CONTENT_TYPES",
    "DEFAULT_MEDIA_TYPE",
    "StreamPlan",
    "aiter_file_chunks",
    "content_type_for",
    "parse_byte_range",
    "prepare_stream",
]
