"""Session storage locations and constants."""

from __future__ import annotations

import os
import re
from pathlib import Path

STATE_FILE_NAME = "skill-session.json"
LOCK_FILE_NAME = "skill-session.lock"

# Lock polling while another invocation holds the session
LOCK_POLL_INTERVAL_SEC = 0.005
LOCK_DEFAULT_TIMEOUT_SEC = 2.0

_UNSAFE_ID_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def get_data_dir() -> Path:
    env = os.environ.get("SKILLSENSE_DATA_DIR")
    if env:
        return Path(env)
    return Path.home() / ".skillsense" / "data"


def safe_session_id(session_id: str) -> str:
    """Map a host session id onto a single safe directory name."""
    cleaned = _UNSAFE_ID_CHARS.sub("_", session_id.strip())
    if not cleaned or set(cleaned) <= {"."}:
        return "default"
    return cleaned


def get_session_dir(session_id: str, data_dir: Path | None = None) -> Path:
    return (data_dir or get_data_dir()) / "sessions" / safe_session_id(session_id)
