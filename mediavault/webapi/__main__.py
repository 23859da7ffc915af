"""Command line entrypoint for running the FastAPI application with uvicorn."""

from __future__ import annotations

import argparse
from typing import Sequence

import uvicorn


def build_parser() -> argparse.ArgumentParser:
    """Construct the CLI argument parser for the web API runner."""

    parser = argparse.ArgumentParser(
        description="Serve sandboxed media browsing, streaming and subtitles with uvicorn",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Hostname or IP address for the uvicorn server (default: %(default)s)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="TCP port for the uvicorn server (default: %(default)s)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload; useful during local development.",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["critical", "error", "warning", "info", "debug", "trace"],
        help="Log level passed to uvicorn (default: %(default)s)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Parse CLI arguments and launch the uvicorn server."""

    parser = build_parser()
    args = parser.parse_args(argv)

    uvicorn.run(
        "mediavault.webapi.application:create_app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
        factory=True,
    )


if __name__ == "__main__":  # pragma: no cover - CLI integration
    main()
