from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from mediavault.errors import ProbeFailed
from mediavault.webapi.dependencies import get_media_inspector
from tests.helpers.media_fakes import FakeMediaInspector

pytestmark = pytest.mark.webapi


@pytest.fixture
def container(media_root: Path) -> Path:
    path = media_root / "shows" / "pilot.mkv"
    path.parent.mkdir(parents=True)
    path.write_bytes(b"mkv")
    return path


def test_extract_then_list_and_fetch(api_app, fake_inspector: FakeMediaInspector, container: Path) -> None:
    with TestClient(api_app) as client:
        extracted = client.post("/api/subtitles/extract", params={"path": str(container)})
        listed = client.get("/api/subtitles", params={"path": str(container)})
        subtitles = listed.json()["subtitles"]
        artifact = client.get(subtitles[0]["url"])

    assert extracted.status_code == 200
    payload = extracted.json()
    assert payload["success"] is True
    assert payload["message"] == "Processed 2 subtitle tracks (2 successful)"
    assert [result["status"] for result in payload["results"]] == ["extracted", "extracted"]
    assert payload["results"][0]["url"] == subtitles[0]["url"]

    assert listed.status_code == 200
    assert [(s["streamIndex"], s["languageTag"]) for s in subtitles] == [(2, "eng"), (3, "fre")]
    assert subtitles[0]["cacheFileName"] == "pilot-eng-2.vtt"

    assert artifact.status_code == 200
    assert artifact.headers["content-type"].startswith("text/vtt")
    assert artifact.headers["Cache-Control"] == "public, max-age=3600"
    assert artifact.text.startswith("WEBVTT")


def test_repeated_extraction_is_idempotent(api_app, fake_inspector: FakeMediaInspector, container: Path) -> None:
    with TestClient(api_app) as client:
        client.post("/api/subtitles/extract", params={"path": str(container)})
        second = client.get("/api/subtitles/extract", params={"path": str(container)})

    assert [result["status"] for result in second.json()["results"]] == ["cached", "cached"]
    assert len(fake_inspector.extract_calls) == 2


def test_listing_before_extraction_is_empty(api_app, container: Path) -> None:
    with TestClient(api_app) as client:
        response = client.get("/api/subtitles", params={"path": str(container)})

    assert response.status_code == 200
    assert response.json() == {"subtitles": []}


def test_container_without_streams(api_app, container: Path) -> None:
    api_app.dependency_overrides[get_media_inspector] = lambda: FakeMediaInspector([])

    with TestClient(api_app) as client:
        response = client.post("/api/subtitles/extract", params={"path": str(container)})

    assert response.status_code == 200
    assert response.json()["success"] is False
    assert response.json()["message"].startswith("No subtitle tracks found")


def test_unsupported_and_missing_containers(api_app, media_root: Path) -> None:
    clip = media_root / "clip.mp4"
    clip.write_bytes(b"mp4")

    with TestClient(api_app) as client:
        unsupported = client.post("/api/subtitles/extract", params={"path": str(clip)})
        missing = client.post("/api/subtitles/extract", params={"path": str(media_root / "gone.mkv")})

    assert unsupported.status_code == 400
    assert unsupported.json()["error"] == "unsupported_container"
    assert missing.status_code == 404


def test_toolchain_and_probe_failures_are_server_errors(api_app, container: Path) -> None:
    with TestClient(api_app) as client:
        api_app.dependency_overrides[get_media_inspector] = lambda: FakeMediaInspector(available=False)
        unavailable = client.post("/api/subtitles/extract", params={"path": str(container)})
        api_app.dependency_overrides[get_media_inspector] = lambda: FakeMediaInspector(
            probe_error=ProbeFailed("Failed to parse ffprobe output")
        )
        probe_failed = client.post("/api/subtitles/extract", params={"path": str(container)})

    assert unavailable.status_code == 500
    assert unavailable.json()["error"] == "toolchain_unavailable"
    assert probe_failed.status_code == 500
    assert probe_failed.json()["message"] == "Failed to parse ffprobe output"


def test_extraction_outside_sandbox_is_forbidden(api_app, tmp_path: Path) -> None:
    outside = tmp_path / "outside.mkv"
    outside.write_bytes(b"mkv")

    with TestClient(api_app) as client:
        response = client.post("/api/subtitles/extract", params={"path": str(outside)})

    assert response.status_code == 403


def test_stream_inspection_reports_cache_state(api_app, container: Path) -> None:
    with TestClient(api_app) as client:
        before = client.get("/api/subtitles/streams", params={"path": str(container)})
        client.post("/api/subtitles/extract", params={"path": str(container)})
        after = client.get("/api/subtitles/streams", params={"path": str(container)})

    assert [stream["cached"] for stream in before.json()["streams"]] == [False, False]
    assert [stream["cached"] for stream in after.json()["streams"]] == [True, True]
    assert after.json()["streams"][0]["imageBased"] is False


def test_subtitle_file_rejects_escapes(api_app, cache_root: Path) -> None:
    cache_root.mkdir(parents=True)
    (cache_root.parent / "secret.vtt").write_text("WEBVTT\n")

    with TestClient(api_app) as client:
        escaped = client.get("/api/subtitles/file/..%2Fsecret.vtt")
        missing = client.get("/api/subtitles/file/key/none.vtt")

    assert escaped.status_code == 404
    assert missing.status_code == 404
