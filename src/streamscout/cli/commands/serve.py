"""CLI command for running the metadata proxy API server."""

from __future__ import annotations

from typing import Optional

import typer

from streamscout.config.settings import settings


def serve_command(
    host: Optional[str] = typer.Option(
        None, "--host", help="Interface to bind (default: from settings)"
    ),
    port: Optional[int] = typer.Option(
        None, "--port", "-p", help="Port to run the server on (default: from settings)"
    ),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
) -> None:
    """
    Start the metadata proxy API server.

    Examples:
        streamscout serve
        streamscout serve --port 3001
        streamscout serve --host 0.0.0.0 --reload
    """
    import uvicorn

    uvicorn.run(
        "streamscout.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )
