"""Translate domain errors into structured JSON responses."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from .. import logging_manager as log_mgr
from ..errors import MediaVaultError, RangeNotSatisfiable
from .schemas import ErrorResponse

logger = log_mgr.get_logger().getChild("webapi.errors")


class MediaVaultHTTPException(HTTPException):
    """HTTP error whose ``detail`` is already a structured error payload."""


def format_error(error: str, message: str, **extras: Any) -> Dict[str, Any]:
    payload = ErrorResponse(error=error, message=message).model_dump(exclude_none=True)
    payload.update(extras)
    return payload


def _headers_for(exc: MediaVaultError) -> Optional[Dict[str, str]]:
    if isinstance(exc, RangeNotSatisfiable):
        return {"Content-Range": f"bytes */{exc.file_size}", "Accept-Ranges": "bytes"}
    return None


def http_error_from(exc: MediaVaultError, **extras: Any) -> MediaVaultHTTPException:
    """Wrap ``exc`` so endpoint-specific fields travel with the error body."""

    return MediaVaultHTTPException(
        status_code=exc.status_code,
        detail=format_error(exc.error_code, exc.message, **extras),
        headers=_headers_for(exc),
    )


def _log_error(request: Request, status_code: int, error: str, message: str) -> None:
    log = logger.error if status_code >= 500 else logger.info
    log(
        "Request failed",
        extra={
            "event": "http.error",
            "path": request.url.path,
            "status": status_code,
            "error": error,
            "detail": message,
        },
    )


async def _handle_mediavault_http_exception(
    request: Request, exc: MediaVaultHTTPException
) -> JSONResponse:
    if isinstance(exc.detail, dict) and {"error", "message"} <= set(exc.detail):
        _log_error(request, exc.status_code, exc.detail["error"], exc.detail["message"])
        return JSONResponse(status_code=exc.status_code, content=exc.detail, headers=exc.headers)
    return JSONResponse(
        status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers
    )


async def _handle_mediavault_error(request: Request, exc: MediaVaultError) -> JSONResponse:
    _log_error(request, exc.status_code, exc.error_code, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=format_error(exc.error_code, exc.message),
        headers=_headers_for(exc),
    )


async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error while serving request",
        extra={"event": "http.unhandled", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=format_error("internal_error", "Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register the JSON error handlers used by every router."""

    app.add_exception_handler(MediaVaultHTTPException, _handle_mediavault_http_exception)
    app.add_exception_handler(MediaVaultError, _handle_mediavault_error)
    app.add_exception_handler(Exception, _handle_unexpected_error)


__all__ = [
    "MediaVaultHTTPException",
    "format_error",
    "http_error_from",
    "register_exception_handlers",
]
