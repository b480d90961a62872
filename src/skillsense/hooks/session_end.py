"""SessionEnd hook: drop the session's edit log and acknowledgements."""

from __future__ import annotations

import logging
import sys

logger = logging.getLogger(__name__)


def main() -> None:
    """Entry point for SessionEnd hook."""
    from skillsense.hooks._common import build_gateway, get_project_root, read_hook_input
    from skillsense.session.state import resolve_session_id

    try:
        hook_input = read_hook_input()
        session_id = resolve_session_id(hook_input.get("session_id"))
        gateway = build_gateway(get_project_root(hook_input))
        gateway.handle({"eventKind": "SessionEnded", "sessionId": session_id})
    except Exception:
        logger.exception("Failed to clean up session state")
    sys.exit(0)


if __name__ == "__main__":
    main()
