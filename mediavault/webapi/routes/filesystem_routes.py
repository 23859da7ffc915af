"""Directory listing endpoints."""

from __future__ import annotations

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query

from ... import logging_manager as log_mgr
from ...browser import DirectoryLister, FileSystemEntry, flatten_entries
from ...errors import MediaVaultError
from ...sandbox import PathSandbox
from ..dependencies import get_directory_lister, get_sandbox
from ..errors import http_error_from
from ..schemas import (
    AllowedPathPayload,
    AllowedRootsResponse,
    ErrorResponse,
    FileSystemItem,
    FileSystemResponse,
)

router = APIRouter(prefix="/api/filesystem", tags=["filesystem"])
logger = log_mgr.get_logger().getChild("webapi.filesystem")

SandboxDep = Annotated[PathSandbox, Depends(get_sandbox)]
ListerDep = Annotated[DirectoryLister, Depends(get_directory_lister)]


def _allowed_paths(sandbox: PathSandbox) -> List[AllowedPathPayload]:
    return [AllowedPathPayload.from_base(base) for base in sandbox.list_allowed_bases()]


def _serialize(entries: List[FileSystemEntry]) -> List[FileSystemItem]:
    return [FileSystemItem.from_entry(entry) for entry in entries]


@router.get(
    "",
    response_model=FileSystemResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def list_directory(
    sandbox: SandboxDep,
    lister: ListerDep,
    path: Optional[str] = Query(default=None),
    depth: int = Query(default=1, ge=0),
    flatten: bool = Query(default=False),
) -> FileSystemResponse:
    """List a permitted directory, or the allowed bases when no path is given."""

    try:
        resolved = sandbox.resolve(path)
        if resolved is None:
            if sandbox.enforced:
                return FileSystemResponse(
                    items=[], is_home_page=True, allowed_paths=_allowed_paths(sandbox)
                )
            resolved = sandbox.config.default_path
        sandbox.ensure_permitted(resolved)
        entries = lister.list(resolved, 0, depth)
    except MediaVaultError as exc:
        # Listing errors keep the response shape so the browser can still
        # offer the allowed bases.
        raise http_error_from(
            exc,
            items=[],
            allowedPaths=[item.model_dump() for item in _allowed_paths(sandbox)],
        ) from exc

    if flatten:
        entries = flatten_entries(entries)
    logger.debug(
        "Listed directory",
        extra={"event": "listing.completed", "path": str(resolved), "count": len(entries)},
    )
    return FileSystemResponse(items=_serialize(entries))


@router.get("/roots", response_model=AllowedRootsResponse)
def list_roots(sandbox: SandboxDep) -> AllowedRootsResponse:
    return AllowedRootsResponse(
        enforced=sandbox.enforced,
        max_depth=sandbox.config.max_depth,
        roots=_allowed_paths(sandbox),
    )


__all__ = ["router"]
