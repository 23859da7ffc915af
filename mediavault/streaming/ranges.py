"""HTTP ``Range`` header parsing."""

from __future__ import annotations

from typing import Optional, Tuple

from mediavault.errors import RangeNotSatisfiable


class _RangeParseError(Exception):
    """Raised when the supplied Range header is syntactically malformed."""


def _parse_single_range(range_value: str, file_size: int) -> Tuple[int, int]:
    header = range_value.strip()
    if not header.lower().startswith("bytes="):
        raise _RangeParseError

    raw_spec = header[len("bytes=") :].strip()
    if "-" not in raw_spec:
        raise _RangeParseError

    start_token, end_token = (token.strip() for token in raw_spec.split("-", 1))

    if not start_token:
        # suffix-byte-range-spec: bytes=-N
        if not end_token.isdigit():
            raise _RangeParseError
        length = int(end_token)
        if length <= 0 or file_size <= 0:
            raise RangeNotSatisfiable("Requested range not satisfiable", file_size=file_size)
        return max(file_size - length, 0), file_size - 1

    if not start_token.isdigit():
        raise _RangeParseError
    start = int(start_token)

    if end_token:
        if not end_token.isdigit():
            raise _RangeParseError
        end = int(end_token)
        if end < start:
            raise _RangeParseError
    else:
        end = file_size - 1

    if start >= file_size:
        raise RangeNotSatisfiable("Requested range not satisfiable", file_size=file_size)
    return start, min(end, file_size - 1)


def parse_byte_range(range_value: Optional[str], file_size: int) -> Optional[Tuple[int, int]]:
    """Return the inclusive byte window requested by ``range_value``.

    ``None`` means "serve the whole file": no header, a multi-range request, or
    a header that does not follow ``bytes=start-end`` syntax. A well-formed
    range that starts beyond the end of the file raises
    :class:`RangeNotSatisfiable`. Ends past the last byte are clamped.
    """

    if not range_value or not range_value.strip():
        return None
    if "," in range_value:
        # Some clients (notably iOS) request multiple ranges. Only a single
        # contiguous range is supported, so fall back to the full payload.
        return None
    try:
        return _parse_single_range(range_value, file_size)
    except _RangeParseError:
        return None


__all__ = ["parse_byte_range"]
