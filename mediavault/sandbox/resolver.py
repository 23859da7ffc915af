"""Resolve caller-supplied paths and enforce the allow-list sandbox."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import List, Optional, Tuple

from mediavault import logging_manager as log_mgr
from mediavault.config_manager import PathConfig
from mediavault.errors import AccessDenied, InvalidPath

logger = log_mgr.get_logger().getChild("sandbox")

_ROOT_MARKERS = frozenset({"", ".", "/"})
_UNDECODABLE = "\ufffd"


@dataclass(frozen=True)
class AllowedBase:
    """An allow-listed root and the label shown for it."""

    path: Path
    display_name: str


def _normalize(path_value: str) -> Path:
    normalized = os.path.normpath(path_value)
    # POSIX keeps a leading "//" intact; collapse it so comparisons stay lexical.
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return Path(normalized)


def _segment_count(path: Path) -> int:
    parts = path.parts
    if parts and parts[0] == path.anchor:
        return len(parts) - 1
    return len(parts)


def _is_contained(target: Path, base: Path) -> bool:
    relative = os.path.relpath(str(target), str(base))
    if os.path.isabs(relative):
        return False
    return relative != os.pardir and not relative.startswith(os.pardir + os.sep)


def clean_request_path(value: str) -> str:
    """Validate an already percent-decoded request path and unify separators.

    Starlette decodes query values and path segments exactly once, replacing
    escapes that are not valid UTF-8 with U+FFFD. Such values and values with
    a NUL byte raise :class:`InvalidPath`. A literal ``%`` is an ordinary
    filename character at this point and is never decoded again.
    """

    if _UNDECODABLE in value:
        raise InvalidPath("Path is not valid UTF-8 after decoding")
    if "\x00" in value:
        raise InvalidPath("Path contains a NUL byte")
    return value.replace("\\", "/")


class PathSandbox:
    """Turn raw request paths into normalized absolute paths and vet them.

    All checks are lexical: the resolver never follows symlinks, so the answer
    depends only on the configuration and the request string.
    """

    def __init__(self, config: PathConfig, *, working_root: Optional[Path] = None) -> None:
        self._config = config
        self._bases: Tuple[Path, ...] = tuple(
            _normalize(str(base)) for base in config.allowed_base_paths
        )
        self._working_root = _normalize(str(working_root or Path.cwd()))

    @property
    def config(self) -> PathConfig:
        return self._config

    @property
    def enforced(self) -> bool:
        return self._config.enforce_allowed_paths

    @staticmethod
    def is_root_marker(raw: Optional[str]) -> bool:
        """Return True when ``raw`` means "no path selected"."""

        return raw is None or raw.strip() in _ROOT_MARKERS

    def _relative_base(self) -> Path:
        if self._config.enforce_allowed_paths and self._bases:
            return self._bases[0]
        return self._working_root

    def resolve(self, raw: Optional[str]) -> Optional[Path]:
        """Return the normalized absolute path for ``raw``.

        ``None`` is returned for the root markers (empty string, ``.`` or ``/``)
        so callers can render the landing view instead of a real directory.
        ``raw`` is the value as decoded once by the HTTP layer; ``..`` segments
        it contains are collapsed before any allow-list comparison.
        """

        if self.is_root_marker(raw):
            return None
        cleaned = clean_request_path(raw)
        if cleaned.strip() in _ROOT_MARKERS:
            return None
        if os.path.isabs(cleaned):
            return _normalize(cleaned)
        return _normalize(os.path.join(str(self._relative_base()), cleaned))

    def is_allowed(self, resolved: Path) -> bool:
        if not self._config.enforce_allowed_paths:
            return True
        target = _normalize(str(resolved))
        return any(_is_contained(target, base) for base in self._bases)

    def is_within_depth(self, resolved: Path) -> bool:
        """Compare ``resolved`` against the deepest base plus ``max_depth`` segments."""

        if self._bases:
            deepest = max(_segment_count(base) for base in self._bases)
        else:
            deepest = _segment_count(_normalize(str(self._config.default_path)))
        return _segment_count(_normalize(str(resolved))) <= deepest + self._config.max_depth

    def matching_base(self, resolved: Path) -> Optional[Path]:
        """Return the most specific allowed base containing ``resolved``."""

        target = _normalize(str(resolved))
        candidates = [base for base in self._bases if _is_contained(target, base)]
        if not candidates:
            return None
        return max(candidates, key=_segment_count)

    def list_allowed_bases(self) -> List[AllowedBase]:
        return [
            AllowedBase(path=base, display_name=base.name or str(base))
            for base in self._bases
        ]

    def ensure_permitted(self, resolved: Path) -> Path:
        """Raise :class:`AccessDenied` unless ``resolved`` passes both sandbox checks."""

        if not self.is_allowed(resolved):
            logger.warning(
                "Rejected path outside allowed base paths",
                extra={"event": "sandbox.denied.allow_list", "path": str(resolved)},
            )
            raise AccessDenied("Access denied: Path not in allowed base paths")
        if not self.is_within_depth(resolved):
            logger.warning(
                "Rejected path beyond maximum depth",
                extra={"event": "sandbox.denied.depth", "path": str(resolved)},
            )
            raise AccessDenied("Access denied: Path exceeds maximum allowed depth")
        return resolved

    def resolve_permitted(self, raw: Optional[str]) -> Path:
        """Resolve ``raw`` and apply the sandbox checks; root markers are invalid here."""

        resolved = self.resolve(raw)
        if resolved is None:
            raise InvalidPath("A path is required")
        return self.ensure_permitted(resolved)


def relative_posix(path: Path, base: Path) -> PurePosixPath:
    """Return ``path`` relative to ``base`` as a POSIX path."""

    return PurePosixPath(os.path.relpath(str(path), str(base)).replace(os.sep, "/"))


__all__ = [
    "AllowedBase",
    "PathSandbox",
    "clean_request_path",
    "relative_posix",
]
