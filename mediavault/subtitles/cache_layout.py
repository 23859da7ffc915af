"""Deterministic on-disk layout for extracted subtitle artifacts."""

from __future__ import annotations

import hashlib
import os
import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Optional
from urllib.parse import quote

from mediavault.sandbox import PathSandbox, relative_posix

from .models import UNKNOWN_LANGUAGE

ARTIFACT_SUFFIX = ".vtt"
UNMATCHED_SOURCE_KEY = "filesystem"
DEFAULT_URL_PREFIX = "/api/subtitles/file"

_ALLOWED_FRAGMENT_CHARS = re.compile(r"[^A-Za-z0-9_]")


def sanitize_language_tag(language: Optional[str]) -> str:
    """Return a tag safe for the ``-``-separated artifact name."""

    if not language:
        return UNKNOWN_LANGUAGE
    sanitized = _ALLOWED_FRAGMENT_CHARS.sub("_", language.strip()).strip("_")
    return sanitized or UNKNOWN_LANGUAGE


def _sanitize_source_name(value: str) -> str:
    sanitized = re.sub(r"[^A-Za-z0-9_-]", "_", value).strip("._-")
    return sanitized or "root"


@dataclass(frozen=True)
class ParsedArtifactName:
    stream_index: int
    language_tag: str


class SubtitleCacheLayout:
    """Map containers to ``cache_root/<source key>/<directory>/<base>-<lang>-<index>.vtt``.

    The source key identifies the allowed base the container lives under, so
    equally named directories under different bases never collide. Containers
    outside every base (enforcement disabled) use ``filesystem`` and their full
    parent path.
    """

    def __init__(
        self,
        cache_root: Path,
        sandbox: PathSandbox,
        *,
        url_prefix: str = DEFAULT_URL_PREFIX,
    ) -> None:
        self._cache_root = Path(os.path.normpath(str(cache_root)))
        self._sandbox = sandbox
        self._url_prefix = url_prefix.rstrip("/")

    @property
    def cache_root(self) -> Path:
        return self._cache_root

    def source_key(self, container: Path) -> str:
        base = self._sandbox.matching_base(container)
        if base is None:
            return UNMATCHED_SOURCE_KEY
        digest = hashlib.sha1(str(base).encode("utf-8")).hexdigest()[:8]
        return f"{_sanitize_source_name(base.name)}-{digest}"

    def container_directory(self, container: Path) -> PurePosixPath:
        """Return the container's parent directory relative to its source key."""

        base = self._sandbox.matching_base(container)
        if base is None:
            return PurePosixPath(container.parent.as_posix().lstrip("/"))
        relative = relative_posix(container.parent, base)
        if str(relative) == ".":
            return PurePosixPath()
        return relative

    def relative_cache_dir(self, container: Path) -> PurePosixPath:
        return PurePosixPath(self.source_key(container)) / self.container_directory(container)

    def cache_dir_for(self, container: Path) -> Path:
        return self._cache_root.joinpath(*self.relative_cache_dir(container).parts)

    @staticmethod
    def base_name(container: Path) -> str:
        return container.stem

    def artifact_name(self, container: Path, language: Optional[str], stream_index: int) -> str:
        return f"{self.base_name(container)}-{sanitize_language_tag(language)}-{stream_index}{ARTIFACT_SUFFIX}"

    def artifact_path(self, container: Path, language: Optional[str], stream_index: int) -> Path:
        return self.cache_dir_for(container) / self.artifact_name(container, language, stream_index)

    def belongs_to(self, container: Path, file_name: str) -> bool:
        """Return True when ``file_name`` is an artifact of ``container``.

        Language tags never contain ``-``, so stripping the last two fields must
        leave exactly the container's base name. ``pilot-2-eng-3.vtt`` therefore
        belongs to ``pilot-2.mkv`` and not to ``pilot.mkv``.
        """

        if not file_name.endswith(ARTIFACT_SUFFIX):
            return False
        fields = file_name[: -len(ARTIFACT_SUFFIX)].rsplit("-", 2)
        return len(fields) == 3 and fields[0] == self.base_name(container)

    def parse_artifact_name(self, container: Path, file_name: str) -> Optional[ParsedArtifactName]:
        """Recover ``(stream_index, language_tag)`` from an artifact name."""

        pattern = re.compile(
            rf"^{re.escape(self.base_name(container))}-(?P<lang>[A-Za-z0-9_]+)-(?P<index>\d+)"
            rf"{re.escape(ARTIFACT_SUFFIX)}$"
        )
        match = pattern.match(file_name)
        if match is None:
            return None
        return ParsedArtifactName(stream_index=int(match.group("index")), language_tag=match.group("lang"))

    def artifact_url(self, container: Path, file_name: str) -> str:
        parts = (*self.relative_cache_dir(container).parts, file_name)
        return f"{self._url_prefix}/" + "/".join(quote(part) for part in parts)

    def resolve_cached_file(self, relative: str) -> Path:
        """Return the absolute path of a cached artifact, rejecting escapes.

        Raises :class:`ValueError` when ``relative`` is absolute or points outside
        the cache root.
        """

        normalized = relative.replace("\\", "/").strip()
        if not normalized:
            raise ValueError("Empty path")
        candidate = PurePosixPath(normalized)
        if candidate.is_absolute() or any(part == ".." for part in candidate.parts):
            raise ValueError("Path escapes cache root")
        resolved = Path(os.path.normpath(str(self._cache_root.joinpath(*candidate.parts))))
        try:
            resolved.relative_to(self._cache_root)
        except ValueError as exc:
            raise ValueError("Path escapes cache root") from exc
        return resolved


__all__ = [
    "ARTIFACT_SUFFIX",
    "DEFAULT_URL_PREFIX",
    "ParsedArtifactName",
    "SubtitleCacheLayout",
    "UNMATCHED_SOURCE_KEY",
    "sanitize_language_tag",
]
