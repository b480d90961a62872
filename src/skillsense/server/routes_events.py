"""Event route: the gateway's request/response contract over HTTP."""

from __future__ import annotations

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from skillsense.errors import GatewayError


async def post_event(request: Request) -> JSONResponse:
    """POST /api/events: dispatch one host event."""
    try:
        body = await request.json()
    except Exception:
        return JSONResponse({"error": "Request body must be JSON"}, status_code=400)

    gateway = request.app.state.gateway
    try:
        response = await run_in_threadpool(gateway.handle, body)
    except GatewayError as e:
        return JSONResponse({"error": str(e)}, status_code=422)
    return JSONResponse(response)


routes = [
    Route("/api/events", post_event, methods=["POST"]),
]
