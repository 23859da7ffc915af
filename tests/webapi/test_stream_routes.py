from __future__ import annotations

from pathlib import Path
from urllib.parse import quote

import pytest
from fastapi.testclient import TestClient

pytestmark = pytest.mark.webapi

PAYLOAD = bytes(range(250)) * 4


@pytest.fixture
def movie(media_root: Path) -> Path:
    path = media_root / "movie.mp4"
    path.write_bytes(PAYLOAD)
    return path


def test_partial_range_request(api_app, movie: Path) -> None:
    with TestClient(api_app) as client:
        response = client.get("/api/stream", params={"path": str(movie)}, headers={"Range": "bytes=0-99"})

    assert response.status_code == 206
    assert response.headers["Content-Range"] == "bytes 0-99/1000"
    assert response.headers["Content-Length"] == "100"
    assert response.headers["Accept-Ranges"] == "bytes"
    assert response.headers["content-type"] == "video/mp4"
    assert response.content == PAYLOAD[:100]


def test_full_file_without_range(api_app, movie: Path) -> None:
    with TestClient(api_app) as client:
        response = client.get("/api/stream", params={"path": str(movie)})

    assert response.status_code == 200
    assert response.headers["Content-Length"] == "1000"
    assert response.content == PAYLOAD


def test_open_ended_and_malformed_ranges(api_app, movie: Path) -> None:
    with TestClient(api_app) as client:
        tail = client.get("/api/stream", params={"path": str(movie)}, headers={"Range": "bytes=990-"})
        malformed = client.get("/api/stream", params={"path": str(movie)}, headers={"Range": "bytes=x-y"})
        multi = client.get(
            "/api/stream", params={"path": str(movie)}, headers={"Range": "bytes=0-1,5-6"}
        )

    assert tail.status_code == 206
    assert tail.headers["Content-Range"] == "bytes 990-999/1000"
    assert tail.content == PAYLOAD[990:]
    assert malformed.status_code == 200
    assert malformed.content == PAYLOAD
    assert multi.status_code == 200


def test_range_past_end_is_unsatisfiable(api_app, movie: Path) -> None:
    with TestClient(api_app) as client:
        response = client.get(
            "/api/stream", params={"path": str(movie)}, headers={"Range": "bytes=5000-"}
        )

    assert response.status_code == 416
    assert response.headers["Content-Range"] == "bytes */1000"
    assert response.json()["error"] == "range_not_satisfiable"


def test_path_segments_variant(api_app, movie: Path) -> None:
    with TestClient(api_app) as client:
        response = client.get(f"/api/stream{movie.as_posix()}", headers={"Range": "bytes=10-19"})

    assert response.status_code == 206
    assert response.content == PAYLOAD[10:20]


def test_stream_errors_are_json(api_app, media_root: Path, tmp_path: Path) -> None:
    outside = tmp_path / "outside.mp4"
    outside.write_bytes(b"nope")

    with TestClient(api_app) as client:
        denied = client.get("/api/stream", params={"path": str(outside)})
        missing = client.get("/api/stream", params={"path": str(media_root / "missing.mp4")})
        folder = client.get("/api/stream", params={"path": str(media_root)})

    assert denied.status_code == 403
    assert denied.json()["error"] == "access_denied"
    assert missing.status_code == 404
    assert missing.json()["message"] == "File not found"
    assert folder.status_code == 400
    assert folder.json()["error"] == "not_a_file"


def test_percent_signs_in_names_are_not_decoded_again(api_app, media_root: Path) -> None:
    (media_root / "a%41.mp4").write_bytes(b"literal")
    (media_root / "aA.mp4").write_bytes(b"OTHER FILE")
    (media_root / "50% off.mp4").write_bytes(b"discount")

    with TestClient(api_app) as client:
        listing = client.get("/api/filesystem", params={"path": str(media_root), "depth": 0})
        paths = {item["name"]: item["path"] for item in listing.json()["items"]}
        literal = client.get("/api/stream", params={"path": paths["a%41.mp4"]})
        discount = client.get("/api/stream", params={"path": paths["50% off.mp4"]})
        by_segments = client.get("/api/stream" + quote(paths["a%41.mp4"]))

    assert literal.status_code == 200
    assert literal.content == b"literal"
    assert discount.status_code == 200
    assert discount.content == b"discount"
    assert by_segments.content == b"literal"
