"""High-level configuration management for mediavault."""
from __future__ import annotations

from .constants import (
    DEFAULT_ALLOWED_BASE_PATHS,
    DEFAULT_CONTAINER_EXTENSIONS,
    DEFAULT_FFMPEG_PATH,
    DEFAULT_LISTED_EXTENSIONS,
    DEFAULT_MAX_DEPTH,
    DEFAULT_SUBTITLE_CACHE_RELATIVE,
    SCRIPT_DIR,
)
from .loader import build_path_config, build_subtitle_config, get_settings, reset_settings
from .settings import (
    EnvironmentOverrides,
    MediaVaultSettings,
    PathConfig,
    SubtitleConfig,
    apply_settings_updates,
    load_environment_overrides,
)

__all__ = [
    "DEFAULT_ALLOWED_BASE_PATHS",
    "DEFAULT_CONTAINER_EXTENSIONS",
    "DEFAULT_FFMPEG_PATH",
    "DEFAULT_LISTED_EXTENSIONS",
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_SUBTITLE_CACHE_RELATIVE",
    "EnvironmentOverrides",
    "MediaVaultSettings",
    "PathConfig",
    "SCRIPT_DIR",
    "SubtitleConfig",
    "apply_settings_updates",
    "build_path_config",
    "build_subtitle_config",
    "get_settings",
    "load_environment_overrides",
    "reset_settings",
]
