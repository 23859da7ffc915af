"""Path resolution and allow-list enforcement."""

from .resolver import AllowedBase, PathSandbox, clean_request_path, relative_posix

__all__ = ["AllowedBase", "PathSandbox", "clean_request_path", "relative_posix"]
