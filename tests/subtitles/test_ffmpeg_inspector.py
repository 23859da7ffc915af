from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import List

import pytest

from mediavault.config_manager import SubtitleConfig
from mediavault.errors import ExtractionFailed, ProbeFailed, ToolchainUnavailable
from mediavault.subtitles import (
    FFmpegInspector,
    SubtitleCacheLayout,
    SubtitleExtractor,
    parse_probe_output,
    subtitle_codec_is_image_based,
    summarize_ffmpeg_error,
)
from mediavault.subtitles import inspector as inspector_module

pytestmark = pytest.mark.subtitles


class _Result:
    def __init__(self, returncode: int = 0, stdout: bytes = b"", stderr: bytes = b"") -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


def _probe_payload() -> bytes:
    return json.dumps(
        {
            "streams": [
                {"index": 2, "codec_type": "subtitle", "codec_name": "subrip", "tags": {"language": "eng", "title": "Full"}},
                {"index": 3, "codec_type": "subtitle", "codec_name": "hdmv_pgs_subtitle", "tags": {"LANGUAGE": "ger"}},
                {"index": 4, "codec_type": "subtitle", "codec_name": "ass"},
                {"index": 0, "codec_type": "video", "codec_name": "h264"},
                {"codec_type": "subtitle", "codec_name": "subrip"},
            ]
        }
    ).encode()


def test_parse_probe_output_extracts_metadata() -> None:
    streams = parse_probe_output(_probe_payload())

    assert [(s.index, s.language, s.title, s.codec) for s in streams] == [
        (2, "eng", "Full", "subrip"),
        (3, "ger", None, "hdmv_pgs_subtitle"),
        (4, "unknown", None, "ass"),
    ]
    assert streams[2].display_title == "Subtitle 4"


@pytest.mark.parametrize(
    "payload",
    [b"not json", b"[]", b'{"streams": {}}', b'{"streams": ""}', b'{"streams": 0}', b'{"streams": null}'],
)
def test_parse_probe_output_rejects_unexpected_payloads(payload: bytes) -> None:
    with pytest.raises(ProbeFailed):
        parse_probe_output(payload)


def test_parse_probe_output_accepts_empty_stream_list() -> None:
    assert parse_probe_output(b'{"streams": []}') == []
    assert parse_probe_output(b"{}") == []


def test_image_codec_detection() -> None:
    assert subtitle_codec_is_image_based("HDMV_PGS_SUBTITLE")
    assert subtitle_codec_is_image_based("dvd_subtitle")
    assert not subtitle_codec_is_image_based("subrip")
    assert not subtitle_codec_is_image_based(None)


def test_summarize_ffmpeg_error_skips_banner() -> None:
    stderr = "ffmpeg version 6.0\n  built with gcc\n[matroska] Invalid data found when processing input\n"

    assert summarize_ffmpeg_error(stderr) == "[matroska] Invalid data found when processing input"
    assert summarize_ffmpeg_error("") == "ffmpeg failed"


@pytest.fixture
def inspector(subtitle_config: SubtitleConfig) -> FFmpegInspector:
    return FFmpegInspector(subtitle_config)


def test_probe_invokes_ffprobe_with_json_output(
    monkeypatch: pytest.MonkeyPatch, inspector: FFmpegInspector, tmp_path: Path
) -> None:
    calls: List[List[str]] = []

    def _fake_run(command, **kwargs):
        calls.append(command)
        assert kwargs["timeout"] == 5.0
        return _Result(stdout=_probe_payload())

    monkeypatch.setattr(inspector_module.subprocess, "run", _fake_run)

    streams = inspector.probe_subtitle_streams(tmp_path / "film.mkv")

    assert len(streams) == 3
    command = calls[0]
    assert command[0] == "ffprobe"
    assert command[command.index("-select_streams") + 1] == "s"
    assert command[command.index("-of") + 1] == "json"
    assert command[-1] == str(tmp_path / "film.mkv")


def test_probe_failure_raises_probe_failed(
    monkeypatch: pytest.MonkeyPatch, inspector: FFmpegInspector, tmp_path: Path
) -> None:
    monkeypatch.setattr(
        inspector_module.subprocess,
        "run",
        lambda command, **kwargs: _Result(returncode=1, stderr=b"film.mkv: Invalid data found"),
    )

    with pytest.raises(ProbeFailed, match="Invalid data found"):
        inspector.probe_subtitle_streams(tmp_path / "film.mkv")


def test_probe_timeout_raises_probe_failed(
    monkeypatch: pytest.MonkeyPatch, inspector: FFmpegInspector, tmp_path: Path
) -> None:
    def _timeout(command, **kwargs):
        raise subprocess.TimeoutExpired(command, kwargs["timeout"])

    monkeypatch.setattr(inspector_module.subprocess, "run", _timeout)

    with pytest.raises(ProbeFailed, match="timed out"):
        inspector.probe_subtitle_streams(tmp_path / "film.mkv")


def test_malformed_stream_list_fails_the_extraction(
    monkeypatch: pytest.MonkeyPatch,
    subtitle_config: SubtitleConfig,
    cache_layout: SubtitleCacheLayout,
    media_root: Path,
) -> None:
    container = media_root / "film.mkv"
    container.write_bytes(b"mkv")
    monkeypatch.setattr(
        inspector_module.subprocess,
        "run",
        lambda command, **kwargs: _Result(stdout=b'{"streams": {}}'),
    )
    extractor = SubtitleExtractor(subtitle_config, cache_layout, FFmpegInspector(subtitle_config))

    with pytest.raises(ProbeFailed):
        extractor.ensure_extracted(container)


def test_missing_binaries_are_reported(monkeypatch: pytest.MonkeyPatch, inspector: FFmpegInspector) -> None:
    def _missing(command, **kwargs):
        raise FileNotFoundError(command[0])

    monkeypatch.setattr(inspector_module.subprocess, "run", _missing)

    with pytest.raises(ToolchainUnavailable):
        inspector.ensure_available()


def test_nonzero_version_check_is_unavailable(monkeypatch: pytest.MonkeyPatch, inspector: FFmpegInspector) -> None:
    monkeypatch.setattr(
        inspector_module.subprocess, "run", lambda command, **kwargs: _Result(returncode=127)
    )

    with pytest.raises(ToolchainUnavailable):
        inspector.ensure_available()


def test_extract_writes_through_temporary_file(
    monkeypatch: pytest.MonkeyPatch, inspector: FFmpegInspector, tmp_path: Path
) -> None:
    destination = tmp_path / "out" / "film-eng-2.vtt"
    destination.parent.mkdir()
    seen: List[List[str]] = []

    def _fake_run(command, **kwargs):
        seen.append(command)
        Path(command[-1]).write_text("WEBVTT\n")
        return _Result()

    monkeypatch.setattr(inspector_module.subprocess, "run", _fake_run)

    inspector.extract_stream(tmp_path / "film.mkv", 2, destination)

    command = seen[0]
    assert command[0] == "ffmpeg"
    assert command[command.index("-map") + 1] == "0:2"
    assert command[command.index("-c:s") + 1] == "webvtt"
    assert Path(command[-1]).name.startswith(".partial-")
    assert destination.read_text() == "WEBVTT\n"
    assert sorted(p.name for p in destination.parent.iterdir()) == ["film-eng-2.vtt"]


def test_extract_failure_leaves_no_artifact(
    monkeypatch: pytest.MonkeyPatch, inspector: FFmpegInspector, tmp_path: Path
) -> None:
    destination = tmp_path / "film-eng-2.vtt"
    monkeypatch.setattr(
        inspector_module.subprocess,
        "run",
        lambda command, **kwargs: _Result(returncode=1, stderr=b"Subtitle codec 94213 is not supported"),
    )

    with pytest.raises(ExtractionFailed) as excinfo:
        inspector.extract_stream(tmp_path / "film.mkv", 2, destination)

    assert excinfo.value.stream_index == 2
    assert excinfo.value.returncode == 1
    assert "not supported" in excinfo.value.message
    assert list(tmp_path.iterdir()) == []
