"""Dependency wiring for the FastAPI application."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from .. import config_manager as cfg
from ..browser import DirectoryLister, FileFilter
from ..sandbox import PathSandbox
from ..subtitles import (
    FFmpegInspector,
    MediaInspector,
    SubtitleCacheIndex,
    SubtitleCacheLayout,
    SubtitleExtractor,
)


@lru_cache
def get_path_config() -> cfg.PathConfig:
    """Return the process-wide, immutable :class:`PathConfig`."""

    return cfg.build_path_config()


@lru_cache
def get_subtitle_config() -> cfg.SubtitleConfig:
    """Return the process-wide :class:`SubtitleConfig`."""

    return cfg.build_subtitle_config()


@lru_cache
def get_file_filter() -> FileFilter:
    return FileFilter.with_extensions(cfg.get_settings().listed_extensions)


@lru_cache
def get_media_inspector() -> MediaInspector:
    """Return the ffmpeg-backed :class:`MediaInspector`."""

    return FFmpegInspector(get_subtitle_config())


# The providers below are cheap wrappers built per request from the cached
# configuration, so overriding a single provider in tests is enough.


def get_sandbox(config: cfg.PathConfig = Depends(get_path_config)) -> PathSandbox:
    return PathSandbox(config)


def get_directory_lister(
    sandbox: PathSandbox = Depends(get_sandbox),
    file_filter: FileFilter = Depends(get_file_filter),
) -> DirectoryLister:
    return DirectoryLister(sandbox, file_filter)


def get_subtitle_layout(
    config: cfg.SubtitleConfig = Depends(get_subtitle_config),
    sandbox: PathSandbox = Depends(get_sandbox),
) -> SubtitleCacheLayout:
    return SubtitleCacheLayout(config.cache_root, sandbox)


def get_subtitle_extractor(
    config: cfg.SubtitleConfig = Depends(get_subtitle_config),
    layout: SubtitleCacheLayout = Depends(get_subtitle_layout),
    inspector: MediaInspector = Depends(get_media_inspector),
) -> SubtitleExtractor:
    return SubtitleExtractor(config, layout, inspector)


def get_subtitle_cache_index(
    layout: SubtitleCacheLayout = Depends(get_subtitle_layout),
) -> SubtitleCacheIndex:
    return SubtitleCacheIndex(layout)


def reset_dependency_caches() -> None:
    """Drop cached configuration so the next request rebuilds it."""

    for provider in (get_path_config, get_subtitle_config, get_file_filter, get_media_inspector):
        provider.cache_clear()
    cfg.reset_settings()


__all__ = [
    "get_directory_lister",
    "get_file_filter",
    "get_media_inspector",
    "get_path_config",
    "get_sandbox",
    "get_subtitle_cache_index",
    "get_subtitle_config",
    "get_subtitle_extractor",
    "get_subtitle_layout",
    "reset_dependency_caches",
]
