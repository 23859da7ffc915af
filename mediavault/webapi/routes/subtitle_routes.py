"""Subtitle extraction, lookup and artifact serving endpoints."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse

from ...errors import NotFound, UnsupportedContainer
from ...sandbox import PathSandbox
from ...subtitles import (
    MediaInspector,
    SubtitleCacheIndex,
    SubtitleCacheLayout,
    SubtitleExtractor,
    subtitle_codec_is_image_based,
)
from ..dependencies import (
    get_media_inspector,
    get_sandbox,
    get_subtitle_cache_index,
    get_subtitle_extractor,
    get_subtitle_layout,
)
from ..schemas import (
    ErrorResponse,
    ExtractionResponse,
    StreamOutcomePayload,
    SubtitleListResponse,
    SubtitleStreamPayload,
    SubtitleStreamsResponse,
    SubtitleTrackPayload,
)

router = APIRouter(prefix="/api/subtitles", tags=["subtitles"])

SandboxDep = Annotated[PathSandbox, Depends(get_sandbox)]
ExtractorDep = Annotated[SubtitleExtractor, Depends(get_subtitle_extractor)]
CacheIndexDep = Annotated[SubtitleCacheIndex, Depends(get_subtitle_cache_index)]
LayoutDep = Annotated[SubtitleCacheLayout, Depends(get_subtitle_layout)]
InspectorDep = Annotated[MediaInspector, Depends(get_media_inspector)]

SUBTITLE_MEDIA_TYPE = "text/vtt"
SUBTITLE_CACHE_HEADERS = {"Cache-Control": "public, max-age=3600"}

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _unsupported(extractor: SubtitleExtractor, container: Path) -> UnsupportedContainer:
    supported = ", ".join(sorted("." + ext for ext in extractor.container_extensions))
    return UnsupportedContainer(
        f"Only {supported} files "
        f"are supported for subtitle extraction (got '{container.suffix or container.name}')"
    )


def _extract(sandbox: PathSandbox, extractor: SubtitleExtractor, path: str) -> ExtractionResponse:
    container = sandbox.resolve_permitted(path)
    report = extractor.ensure_extracted(container)
    if not report.supported:
        raise _unsupported(extractor, container)
    results = [
        StreamOutcomePayload.from_outcome(
            outcome,
            url=(
                extractor.layout.artifact_url(container, outcome.cache_file_name)
                if outcome.cache_file_name
                else None
            ),
        )
        for outcome in report.results
    ]
    return ExtractionResponse.from_report(report, results)


@router.post("/extract", response_model=ExtractionResponse, responses=_ERROR_RESPONSES)
def extract_subtitles(
    sandbox: SandboxDep,
    extractor: ExtractorDep,
    path: str = Query(...),
) -> ExtractionResponse:
    """Extract every text subtitle stream of a container into the cache."""

    return _extract(sandbox, extractor, path)


@router.get(
    "/extract",
    response_model=ExtractionResponse,
    responses=_ERROR_RESPONSES,
    include_in_schema=False,
)
def extract_subtitles_get(
    sandbox: SandboxDep,
    extractor: ExtractorDep,
    path: str = Query(...),
) -> ExtractionResponse:
    return _extract(sandbox, extractor, path)


@router.get("", response_model=SubtitleListResponse, responses=_ERROR_RESPONSES)
def list_subtitles(
    sandbox: SandboxDep,
    cache_index: CacheIndexDep,
    path: str = Query(...),
) -> SubtitleListResponse:
    """Return the subtitle tracks already cached for a container."""

    container = sandbox.resolve_permitted(path)
    tracks = cache_index.list_cached(container)
    return SubtitleListResponse(subtitles=[SubtitleTrackPayload.from_track(track) for track in tracks])


@router.get("/streams", response_model=SubtitleStreamsResponse, responses=_ERROR_RESPONSES)
def inspect_subtitle_streams(
    sandbox: SandboxDep,
    extractor: ExtractorDep,
    inspector: InspectorDep,
    path: str = Query(...),
) -> SubtitleStreamsResponse:
    """Probe a container's subtitle streams without extracting them."""

    container = sandbox.resolve_permitted(path)
    if not container.is_file():
        raise NotFound("Container file not found")
    if not extractor.is_supported_container(container):
        raise _unsupported(extractor, container)
    inspector.ensure_available()
    layout = extractor.layout
    streams = inspector.probe_subtitle_streams(container)
    return SubtitleStreamsResponse(
        streams=[
            SubtitleStreamPayload.from_stream(
                stream,
                image_based=subtitle_codec_is_image_based(stream.codec),
                cached=layout.artifact_path(container, stream.language, stream.index).is_file(),
            )
            for stream in streams
        ]
    )


@router.get("/file/{cache_path:path}", responses={404: {"model": ErrorResponse}})
def serve_subtitle_file(cache_path: str, layout: LayoutDep) -> FileResponse:
    """Serve an extracted WebVTT artifact from the subtitle cache."""

    try:
        candidate = layout.resolve_cached_file(cache_path)
    except ValueError as exc:
        raise NotFound("Subtitle file not found") from exc
    if candidate.suffix.lower() != ".vtt" or not candidate.is_file():
        raise NotFound("Subtitle file not found")
    return FileResponse(
        path=candidate,
        media_type=SUBTITLE_MEDIA_TYPE,
        headers=dict(SUBTITLE_CACHE_HEADERS),
    )


__all__ = ["router"]
