"""Rule routes: list the active ruleset and reload it from disk."""

from __future__ import annotations

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from skillsense.errors import ConfigError
from skillsense.rule_engine.models import Ruleset, RuleSummary


def _ruleset_body(ruleset: Ruleset) -> dict[str, object]:
    return {
        "rules": [RuleSummary.from_rule(r).model_dump(mode="json") for r in ruleset.rules],
        "count": len(ruleset.rules),
        "warnings": [w.model_dump() for w in ruleset.warnings],
        "source": ruleset.source,
        "content_hash": ruleset.content_hash,
    }


async def list_rules(request: Request) -> JSONResponse:
    """GET /api/rules: the ruleset currently in use."""
    store = request.app.state.gateway.store
    return JSONResponse(_ruleset_body(store.current))


async def reload_rules(request: Request) -> JSONResponse:
    """POST /api/rules/reload: re-read the ruleset source; keep the old one on failure."""
    store = request.app.state.gateway.store
    try:
        ruleset = await run_in_threadpool(store.reload)
    except ConfigError as e:
        body = _ruleset_body(store.current)
        body["error"] = str(e)
        return JSONResponse(body, status_code=422)
    return JSONResponse(_ruleset_body(ruleset))


routes = [
    Route("/api/rules", list_rules),
    Route("/api/rules/reload", reload_rules, methods=["POST"]),
]
