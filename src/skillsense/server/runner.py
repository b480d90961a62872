"""Uvicorn launcher for the HTTP API."""

from __future__ import annotations

from pathlib import Path

from skillsense.config import DEFAULT_HOST, get_port


def run_server(project_root: Path | None = None, port: int | None = None) -> None:
    """Start the HTTP API server with uvicorn."""
    import uvicorn

    from skillsense.server.app import create_app

    app = create_app(project_root or Path.cwd())
    uvicorn.run(app, host=DEFAULT_HOST, port=port or get_port())
