"""Pydantic models and helper utilities for configuration values."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from mediavault import logging_manager

from .constants import (
    DEFAULT_ALLOWED_BASE_PATHS,
    DEFAULT_CONTAINER_EXTENSIONS,
    DEFAULT_DEFAULT_PATH,
    DEFAULT_FFMPEG_PATH,
    DEFAULT_LISTED_EXTENSIONS,
    DEFAULT_MAX_DEPTH,
    DEFAULT_SUBTITLE_CACHE_RELATIVE,
    DEFAULT_TOOL_TIMEOUT_SECONDS,
)

logger = logging_manager.get_logger()


def _split_csv(value: Any) -> Any:
    if isinstance(value, str):
        return [token.strip() for token in value.split(",") if token.strip()]
    return value


class MediaVaultSettings(BaseModel):
    """Typed representation of the application configuration."""

    model_config = ConfigDict(extra="ignore")

    allowed_filesystem_paths: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_BASE_PATHS)
    )
    filesystem_max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=0)
    filesystem_enforce_paths: bool = False
    filesystem_default_path: str = DEFAULT_DEFAULT_PATH
    subtitle_cache_dir: str = str(DEFAULT_SUBTITLE_CACHE_RELATIVE)
    ffmpeg_path: str = DEFAULT_FFMPEG_PATH
    ffprobe_path: Optional[str] = None
    tool_timeout_seconds: float = Field(default=DEFAULT_TOOL_TIMEOUT_SECONDS, gt=0)
    container_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CONTAINER_EXTENSIONS)
    )
    listed_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_LISTED_EXTENSIONS)
    )
    cors_origins: Optional[str] = None

    @field_validator(
        "allowed_filesystem_paths",
        "container_extensions",
        "listed_extensions",
        mode="before",
    )
    @classmethod
    def _coerce_comma_separated(cls, value: Any) -> Any:
        return _split_csv(value)

    @field_validator("container_extensions", "listed_extensions")
    @classmethod
    def _normalize_extensions(cls, value: list[str]) -> list[str]:
        return [item.strip().lower().lstrip(".") for item in value if item.strip()]


class EnvironmentOverrides(BaseSettings):
    """Configuration overrides sourced from environment variables."""

    model_config = SettingsConfigDict(env_prefix="", extra="ignore")

    allowed_filesystem_paths: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("ALLOWED_FILESYSTEM_PATHS", "MEDIAVAULT_ALLOWED_PATHS"),
    )
    filesystem_max_depth: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("FILESYSTEM_MAX_DEPTH")
    )
    filesystem_enforce_paths: Optional[bool] = Field(
        default=None, validation_alias=AliasChoices("FILESYSTEM_ENFORCE_PATHS")
    )
    filesystem_default_path: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("FILESYSTEM_DEFAULT_PATH")
    )
    subtitle_cache_dir: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SUBTITLE_CACHE_DIR", "MEDIAVAULT_SUBTITLE_CACHE_DIR"),
    )
    ffmpeg_path: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("FFMPEG_PATH", "FFMPEG_BIN")
    )
    ffprobe_path: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("FFPROBE_PATH", "FFPROBE_BIN")
    )
    tool_timeout_seconds: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("MEDIAVAULT_TOOL_TIMEOUT")
    )
    container_extensions: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("MEDIAVAULT_CONTAINER_EXTENSIONS")
    )
    listed_extensions: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("MEDIAVAULT_ALLOWED_EXTENSIONS")
    )
    cors_origins: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("MEDIAVAULT_CORS_ORIGINS")
    )


class PathConfig(BaseModel):
    """Immutable sandbox configuration shared by every request handler."""

    model_config = ConfigDict(frozen=True)

    allowed_base_paths: Tuple[Path, ...] = ()
    max_depth: int = DEFAULT_MAX_DEPTH
    enforce_allowed_paths: bool = False
    default_path: Path = Path(DEFAULT_DEFAULT_PATH)


class SubtitleConfig(BaseModel):
    """Immutable settings for the subtitle extraction pipeline."""

    model_config = ConfigDict(frozen=True)

    cache_root: Path
    ffmpeg_path: str = DEFAULT_FFMPEG_PATH
    ffprobe_path: str = "ffprobe"
    tool_timeout_seconds: float = DEFAULT_TOOL_TIMEOUT_SECONDS
    container_extensions: frozenset[str] = frozenset(DEFAULT_CONTAINER_EXTENSIONS)


def load_environment_overrides() -> Dict[str, Any]:
    """Return configuration overrides sourced from environment variables."""

    try:
        overrides = EnvironmentOverrides()
    except ValidationError as exc:
        logger.warning(
            "Invalid environment configuration detected; using defaults.",
            extra={"event": "config.env.validation_error", "error": str(exc)},
        )
        return {}
    # An empty MEDIAVAULT_ALLOWED_EXTENSIONS survives as "" and splits to an
    # empty allow-list, which shows every extension.
    return overrides.model_dump(exclude_none=True)


def apply_settings_updates(
    settings: MediaVaultSettings, updates: Dict[str, Any]
) -> MediaVaultSettings:
    """Return a validated copy of ``settings`` updated with ``updates``."""

    if not updates:
        return settings
    merged = settings.model_dump()
    merged.update(updates)
    try:
        return MediaVaultSettings.model_validate(merged)
    except ValidationError as exc:
        logger.warning(
            "Rejected configuration overrides; keeping previous values.",
            extra={"event": "config.overrides.invalid", "error": str(exc)},
        )
        return settings


__all__ = [
    "EnvironmentOverrides",
    "MediaVaultSettings",
    "PathConfig",
    "SubtitleConfig",
    "apply_settings_updates",
    "load_environment_overrides",
]
