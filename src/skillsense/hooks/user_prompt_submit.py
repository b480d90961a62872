"""UserPromptSubmit hook: suggest or require skills relevant to the prompt.

Suggestions are printed to stdout, which the host injects as context. A
block verdict exits with code 2 and explains on stderr which skills must be
acknowledged first.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

logger = logging.getLogger(__name__)


def render_block(response: dict[str, Any], session_id: str) -> str:
    """Build the stderr message shown to the user for a block verdict."""
    blocking = [
        s["id"]
        for s in response.get("activatedSkills", [])
        if s.get("enforcement") == "block" and not s.get("acknowledged")
    ]
    lines = [response.get("blockReason") or "Blocking skills must be used first.", ""]
    for skill_id in blocking:
        lines.append(f"  skillsense ack {session_id} {skill_id}")
    if blocking:
        lines.insert(1, "Use the skill, or acknowledge it with:")
    return "\n".join(lines).rstrip()


def evaluate(hook_input: dict[str, Any]) -> tuple[int, str, str]:
    """Run the prompt through the gateway. Returns (exit_code, stdout, stderr)."""
    from skillsense.hooks._common import build_gateway, get_project_root
    from skillsense.session.state import resolve_session_id

    prompt = hook_input.get("prompt", "")
    if not isinstance(prompt, str) or not prompt.strip():
        return 0, "", ""

    session_id = resolve_session_id(hook_input.get("session_id"))
    gateway = build_gateway(get_project_root(hook_input))
    response = gateway.handle(
        {
            "eventKind": "PromptSubmitted",
            "sessionId": session_id,
            "promptText": prompt,
            "touchedPaths": [],
        }
    )
    if response["verdict"] == "block":
        return 2, response.get("message", ""), render_block(response, session_id)
    return 0, response.get("message", ""), ""


def main() -> None:
    """Entry point for UserPromptSubmit hook."""
    from skillsense.hooks._common import read_hook_input

    try:
        exit_code, out, err = evaluate(read_hook_input())
    except Exception:
        logger.exception("Skill activation failed")
        sys.exit(0)  # Never block the prompt on internal errors

    if out:
        print(out)
    if err:
        print(err, file=sys.stderr)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
