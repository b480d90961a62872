"""Session routes: list sessions, inspect one session's edits and structure."""

from __future__ import annotations

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route


async def list_sessions(request: Request) -> JSONResponse:
    tracker = request.app.state.gateway.tracker
    sessions = await run_in_threadpool(tracker.cache.list_sessions)
    return JSONResponse({"sessions": sessions, "count": len(sessions)})


async def get_session(request: Request) -> JSONResponse:
    """GET /api/sessions/{session_id}: recent paths, structure, acknowledged skills."""
    session_id = request.path_params["session_id"]
    gateway = request.app.state.gateway
    try:
        limit = int(request.query_params.get("limit", str(gateway.config.lookback)))
    except ValueError:
        return JSONResponse({"error": "limit must be an integer"}, status_code=422)

    state = await run_in_threadpool(gateway.tracker.state_of, session_id)
    return JSONResponse(
        {
            "session_id": session_id,
            "event_count": len(state.events),
            "recent_paths": state.recent_paths(limit),
            "project_structure": state.project_structure,
            "acknowledged": state.acknowledged,
        }
    )


routes = [
    Route("/api/sessions", list_sessions),
    Route("/api/sessions/{session_id}", get_session),
]
