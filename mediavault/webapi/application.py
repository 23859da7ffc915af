"""FastAPI application factory for the mediavault web API."""

from __future__ import annotations

import re
import time
from typing import Awaitable, Callable
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from .. import config_manager as cfg
from .. import logging_manager as log_mgr
from .errors import register_exception_handlers
from .routes import filesystem_router, stream_router, subtitle_router

LOGGER = log_mgr.get_logger().getChild("webapi")

DEFAULT_DEVSERVER_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)

# Additional headers that should be explicitly allowed/exposed for media
# streaming support.
RANGE_REQUEST_HEADERS = ("Range",)
RANGE_RESPONSE_HEADERS = ("Accept-Ranges", "Content-Length", "Content-Range")
CORRELATION_HEADER = "X-Request-ID"


def _parse_cors_origins(raw_value: str | None) -> tuple[list[str], bool]:
    """Return the allowed origins and whether credentials are supported."""

    if raw_value is None:
        return list(DEFAULT_DEVSERVER_ORIGINS), True

    tokens = [token.strip() for token in re.split(r"[\s,]+", raw_value) if token.strip()]
    if not tokens:
        return [], False
    if "*" in tokens:
        return ["*"], False
    return tokens, True


def _configure_cors(app: FastAPI) -> None:
    allowed_origins, allow_credentials = _parse_cors_origins(cfg.get_settings().cors_origins)
    if not allowed_origins:
        LOGGER.info("CORS middleware disabled; no allowed origins configured.")
        return

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"] + list(RANGE_REQUEST_HEADERS),
        expose_headers=list(RANGE_RESPONSE_HEADERS) + [CORRELATION_HEADER],
    )


def _configure_request_context(app: FastAPI) -> None:
    @app.middleware("http")
    async def _bind_correlation_id(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        correlation_id = (
            request.headers.get("x-request-id")
            or request.headers.get("x-correlation-id")
            or uuid4().hex
        )
        started = time.perf_counter()
        with log_mgr.log_context(correlation_id=correlation_id):
            response = await call_next(request)
            LOGGER.debug(
                "Request handled",
                extra={
                    "event": "http.request",
                    "path": request.url.path,
                    "status": response.status_code,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


def create_app() -> FastAPI:
    """Instantiate and configure the FastAPI application."""

    log_mgr.setup_logging()
    app = FastAPI(title="mediavault API", version="0.1.0")

    register_exception_handlers(app)
    _configure_request_context(app)
    _configure_cors(app)

    @app.get("/_health", tags=["health"])
    def healthcheck() -> dict[str, str]:
        """Simple healthcheck endpoint for smoke-testing the server."""

        return {"status": "ok"}

    app.include_router(filesystem_router)
    app.include_router(stream_router)
    app.include_router(subtitle_router)
    return app


__all__ = ["create_app"]
