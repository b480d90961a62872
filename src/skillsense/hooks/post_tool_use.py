"""PostToolUse hook: record edited files and acknowledged skills for the session."""

from __future__ import annotations

import logging
import sys
from typing import Any

logger = logging.getLogger(__name__)

SKILL_TOOL = "Skill"


def build_request(hook_input: dict[str, Any], tracked_tools: list[str]) -> dict[str, Any] | None:
    """Translate a PostToolUse payload into a gateway request, or None to ignore it."""
    from skillsense.hooks._common import get_project_root, relativize
    from skillsense.session.state import resolve_session_id

    tool_name = hook_input.get("tool_name", "")
    tool_input = hook_input.get("tool_input") or {}
    if not isinstance(tool_input, dict):
        return None
    session_id = resolve_session_id(hook_input.get("session_id"))

    if tool_name == SKILL_TOOL:
        skill_id = tool_input.get("skill") or tool_input.get("command") or ""
        if not isinstance(skill_id, str) or not skill_id:
            return None
        return {"eventKind": "SkillAcknowledged", "sessionId": session_id, "skillId": skill_id}

    if tool_name not in tracked_tools:
        return None
    file_path = tool_input.get("file_path") or tool_input.get("notebook_path") or ""
    if not isinstance(file_path, str) or not file_path:
        return None
    path = relativize(file_path, get_project_root(hook_input))
    return {
        "eventKind": "ToolCompleted",
        "sessionId": session_id,
        "toolEvent": {"path": path, "tool": tool_name},
    }


def main() -> None:
    """Entry point for PostToolUse hook. Never blocks the tool."""
    from skillsense.hooks._common import build_gateway, get_project_root, read_hook_input

    try:
        hook_input = read_hook_input()
        gateway = build_gateway(get_project_root(hook_input))
        request = build_request(hook_input, gateway.config.tracked_tools)
        if request is not None:
            gateway.handle(request)
    except Exception:
        logger.exception("Failed to record tool event")
    sys.exit(0)


if __name__ == "__main__":
    main()
