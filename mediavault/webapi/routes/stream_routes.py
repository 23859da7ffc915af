"""Range-aware byte streaming endpoints."""

from __future__ import annotations

import time
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Header, Query
from fastapi.responses import StreamingResponse

from ... import logging_manager as log_mgr
from ...sandbox import PathSandbox
from ...streaming import aiter_file_chunks, prepare_stream
from ..dependencies import get_sandbox
from ..schemas import ErrorResponse

router = APIRouter(prefix="/api/stream", tags=["stream"])
logger = log_mgr.get_logger().getChild("webapi.stream")

SandboxDep = Annotated[PathSandbox, Depends(get_sandbox)]
RangeHeader = Annotated[Optional[str], Header(alias="Range")]

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    416: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _stream_response(sandbox: PathSandbox, raw_path: str, range_header: Optional[str]) -> StreamingResponse:
    started = time.perf_counter()
    resolved = sandbox.resolve_permitted(raw_path)
    plan = prepare_stream(resolved, range_header)
    logger.info(
        "Streaming file",
        extra={
            "event": "stream.started",
            "path": str(plan.path),
            "status": plan.status_code,
            "range": range_header,
            "bytes": plan.content_length,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        },
    )
    return StreamingResponse(
        aiter_file_chunks(plan.path, plan.start, plan.end),
        status_code=plan.status_code,
        media_type=plan.media_type,
        headers=plan.headers,
    )


@router.get("", responses=_ERROR_RESPONSES)
def stream_file(
    sandbox: SandboxDep,
    path: str = Query(...),
    range_header: RangeHeader = None,
) -> StreamingResponse:
    """Stream ``path``, honouring a single ``Range`` request."""

    return _stream_response(sandbox, path, range_header)


@router.get("/{file_path:path}", responses=_ERROR_RESPONSES)
def stream_file_by_segments(
    file_path: str,
    sandbox: SandboxDep,
    range_header: RangeHeader = None,
) -> StreamingResponse:
    """Stream an absolute path given as URL segments."""

    return _stream_response(sandbox, "/" + file_path.lstrip("/"), range_header)


__all__ = ["router"]
