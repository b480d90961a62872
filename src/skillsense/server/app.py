"""Starlette app factory exposing the gateway over HTTP."""

from __future__ import annotations

from pathlib import Path

from starlette.applications import Starlette

from skillsense.gateway import EventGateway
from skillsense.server.routes_events import routes as event_routes
from skillsense.server.routes_rules import routes as rule_routes
from skillsense.server.routes_session import routes as session_routes
from skillsense.server.routes_system import routes as system_routes


def create_app(
    project_root: Path | None = None,
    *,
    data_dir: Path | None = None,
    gateway: EventGateway | None = None,
) -> Starlette:
    """Create a Starlette app serving one project's ruleset and sessions."""
    if gateway is None:
        gateway = EventGateway.from_project(project_root or Path.cwd(), data_dir=data_dir)

    app = Starlette(routes=system_routes + event_routes + rule_routes + session_routes)
    app.state.gateway = gateway
    return app
