"""System routes: health, version."""

from __future__ import annotations

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from skillsense import __version__ as VERSION


async def health(request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok"})


async def version(request: Request) -> JSONResponse:
    return JSONResponse({"version": VERSION})


routes = [
    Route("/health", health),
    Route("/api/version", version),
]
