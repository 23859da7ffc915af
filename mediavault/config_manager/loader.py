"""Configuration loading utilities."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from mediavault import logging_manager

from .constants import SCRIPT_DIR
from .settings import (
    MediaVaultSettings,
    PathConfig,
    SubtitleConfig,
    apply_settings_updates,
    load_environment_overrides,
)

logger = logging_manager.get_logger()

_ACTIVE_SETTINGS: Optional[MediaVaultSettings] = None


def _absolute(path_value: str, *, relative_to: Optional[Path] = None) -> Path:
    expanded = Path(os.path.expanduser(path_value))
    if not expanded.is_absolute():
        expanded = (relative_to or Path.cwd()) / expanded
    return Path(os.path.normpath(str(expanded)))


def get_settings() -> MediaVaultSettings:
    """Return the currently loaded :class:`MediaVaultSettings` instance."""

    global _ACTIVE_SETTINGS
    if _ACTIVE_SETTINGS is None:
        settings = apply_settings_updates(MediaVaultSettings(), load_environment_overrides())
        _ACTIVE_SETTINGS = settings
        logger.debug(
            "Loaded configuration",
            extra={
                "event": "config.loaded",
                "allowed_paths": settings.allowed_filesystem_paths,
                "enforce_paths": settings.filesystem_enforce_paths,
            },
        )
    return _ACTIVE_SETTINGS


def reset_settings() -> None:
    """Forget the cached settings so the next lookup re-reads the environment."""

    global _ACTIVE_SETTINGS
    _ACTIVE_SETTINGS = None


def build_path_config(settings: Optional[MediaVaultSettings] = None) -> PathConfig:
    """Freeze the sandbox-related settings into a :class:`PathConfig`."""

    settings = settings or get_settings()
    return PathConfig(
        allowed_base_paths=tuple(_absolute(value) for value in settings.allowed_filesystem_paths),
        max_depth=settings.filesystem_max_depth,
        enforce_allowed_paths=settings.filesystem_enforce_paths,
        default_path=_absolute(settings.filesystem_default_path),
    )


def build_subtitle_config(settings: Optional[MediaVaultSettings] = None) -> SubtitleConfig:
    """Freeze the subtitle pipeline settings into a :class:`SubtitleConfig`."""

    settings = settings or get_settings()
    ffmpeg_path = settings.ffmpeg_path
    ffprobe_path = settings.ffprobe_path or _derive_ffprobe_path(ffmpeg_path)
    return SubtitleConfig(
        cache_root=_absolute(settings.subtitle_cache_dir, relative_to=SCRIPT_DIR.parent),
        ffmpeg_path=ffmpeg_path,
        ffprobe_path=ffprobe_path,
        tool_timeout_seconds=settings.tool_timeout_seconds,
        container_extensions=frozenset(settings.container_extensions),
    )


def _derive_ffprobe_path(ffmpeg_path: str) -> str:
    binary = Path(ffmpeg_path)
    if "ffmpeg" not in binary.name:
        return "ffprobe"
    return str(binary.with_name(binary.name.replace("ffmpeg", "ffprobe")))


__all__ = [
    "build_path_config",
    "build_subtitle_config",
    "get_settings",
    "reset_settings",
]
