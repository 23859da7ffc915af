"""Exception hierarchy shared by the sandbox, streaming and subtitle layers."""

from __future__ import annotations

from typing import Sequence


class MediaVaultError(RuntimeError):
    """Base exception carrying the HTTP status and error code it maps to."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidPath(MediaVaultError):
    """Raised when a caller-supplied path cannot be decoded or interpreted."""

    status_code = 400
    error_code = "invalid_path"


class AccessDenied(MediaVaultError):
    """Raised when a path falls outside the allow-list or the depth limit."""

    status_code = 403
    error_code = "access_denied"


class NotFound(MediaVaultError):
    """Raised when a path is missing or has the wrong type for the operation."""

    status_code = 404
    error_code = "not_found"


class NotAFile(NotFound):
    """Raised when a byte stream is requested for something that is not a file."""

    status_code = 400
    error_code = "not_a_file"


class UnsupportedContainer(MediaVaultError):
    """Raised at the HTTP boundary for files that never carry extractable subtitles."""

    status_code = 400
    error_code = "unsupported_container"


class RangeNotSatisfiable(MediaVaultError):
    """Raised when a well-formed Range header does not overlap the file."""

    status_code = 416
    error_code = "range_not_satisfiable"

    def __init__(self, message: str, *, file_size: int) -> None:
        super().__init__(message)
        self.file_size = file_size


class ToolchainUnavailable(MediaVaultError):
    """Raised when ffmpeg/ffprobe are missing or not runnable."""

    error_code = "toolchain_unavailable"


class ProbeFailed(MediaVaultError):
    """Raised when the prober fails or returns output that cannot be parsed."""

    error_code = "probe_failed"


class ExtractionFailed(MediaVaultError):
    """Raised when a single subtitle stream could not be extracted."""

    error_code = "extraction_failed"

    def __init__(
        self,
        message: str,
        *,
        stream_index: int | None = None,
        command: Sequence[str] | None = None,
        returncode: int | None = None,
    ) -> None:
        super().__init__(message)
        self.stream_index = stream_index
        self.command = tuple(command or ())
        self.returncode = returncode


class MediaIOError(MediaVaultError):
    """Raised for unexpected stat/read failures."""

    error_code = "io_error"


__all__ = [
    "AccessDenied",
    "ExtractionFailed",
    "InvalidPath",
    "MediaIOError",
    "MediaVaultError",
    "NotAFile",
    "NotFound",
    "ProbeFailed",
    "RangeNotSatisfiable",
    "ToolchainUnavailable",
    "UnsupportedContainer",
]
