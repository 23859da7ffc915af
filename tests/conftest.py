from __future__ import annotations

import os
import tempfile
from pathlib import Path

import pytest

# Keep the rotating log file out of the working tree during test runs.
os.environ.setdefault("MEDIAVAULT_LOG_DIR", tempfile.mkdtemp(prefix="mediavault-test-logs-"))

from mediavault.browser import DEFAULT_FILE_FILTER  # noqa: E402
from mediavault.config_manager import PathConfig, SubtitleConfig  # noqa: E402
from mediavault.sandbox import PathSandbox  # noqa: E402
from mediavault.subtitles import SubtitleCacheLayout  # noqa: E402
from tests.helpers.media_fakes import FakeMediaInspector, default_streams  # noqa: E402


@pytest.fixture
def media_root(tmp_path: Path) -> Path:
    root = tmp_path / "media"
    root.mkdir()
    return root


@pytest.fixture
def archive_root(tmp_path: Path) -> Path:
    root = tmp_path / "archive"
    root.mkdir()
    return root


@pytest.fixture
def cache_root(tmp_path: Path) -> Path:
    return tmp_path / "cache" / "subtitles"


@pytest.fixture
def path_config(media_root: Path, archive_root: Path) -> PathConfig:
    return PathConfig(
        allowed_base_paths=(media_root, archive_root),
        max_depth=3,
        enforce_allowed_paths=True,
        default_path=media_root,
    )


@pytest.fixture
def sandbox(path_config: PathConfig) -> PathSandbox:
    return PathSandbox(path_config)


@pytest.fixture
def subtitle_config(cache_root: Path) -> SubtitleConfig:
    return SubtitleConfig(
        cache_root=cache_root,
        ffmpeg_path="ffmpeg",
        ffprobe_path="ffprobe",
        tool_timeout_seconds=5.0,
        container_extensions=frozenset({"mkv"}),
    )


@pytest.fixture
def cache_layout(cache_root: Path, sandbox: PathSandbox) -> SubtitleCacheLayout:
    return SubtitleCacheLayout(cache_root, sandbox)


@pytest.fixture
def fake_inspector() -> FakeMediaInspector:
    return FakeMediaInspector(default_streams())


@pytest.fixture
def api_app(path_config, subtitle_config, fake_inspector):
    from mediavault.webapi.application import create_app
    from mediavault.webapi.dependencies import (
        get_file_filter,
        get_media_inspector,
        get_path_config,
        get_subtitle_config,
    )

    app = create_app()
    app.dependency_overrides[get_path_config] = lambda: path_config
    app.dependency_overrides[get_subtitle_config] = lambda: subtitle_config
    app.dependency_overrides[get_media_inspector] = lambda: fake_inspector
    app.dependency_overrides[get_file_filter] = lambda: DEFAULT_FILE_FILTER
    yield app
    app.dependency_overrides.clear()
