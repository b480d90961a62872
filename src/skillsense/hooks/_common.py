"""Shared utilities for hook scripts."""

from __future__ import annotations

import json
import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import Any

from skillsense.gateway import EventGateway

logger = logging.getLogger(__name__)


def read_hook_input() -> dict[str, Any]:
    """Read JSON input from stdin. Returns empty dict on failure."""
    try:
        raw = sys.stdin.read()
        if not raw.strip():
            return {}
        data = json.loads(raw)
    except (json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def get_git_root(cwd: Path | None = None) -> Path | None:
    """Find git repo root via `git rev-parse`. Returns None if not in a git repo."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            capture_output=True,
            text=True,
            timeout=1,
            cwd=cwd,
        )
        if result.returncode == 0:
            return Path(result.stdout.strip())
        return None
    except (FileNotFoundError, NotADirectoryError, subprocess.TimeoutExpired):
        return None


def get_project_root(hook_input: dict[str, Any]) -> Path:
    """Get the project root for the current event.

    Resolution order:
    1. SKILLSENSE_PROJECT_ROOT env var (explicit override)
    2. CLAUDE_PROJECT_DIR env var set by the host
    3. ``cwd`` from the hook payload
    4. Git root of the current directory
    5. Current working directory
    """
    for env_name in ("SKILLSENSE_PROJECT_ROOT", "CLAUDE_PROJECT_DIR"):
        env_root = os.environ.get(env_name)
        if env_root and Path(env_root).is_dir():
            return Path(env_root)

    cwd = hook_input.get("cwd")
    if isinstance(cwd, str) and cwd and Path(cwd).is_dir():
        return Path(cwd)

    return get_git_root() or Path.cwd()


def relativize(file_path: str, project_root: Path) -> str:
    """Express *file_path* relative to the project root, using ``/`` separators.

    Paths outside the root are returned unchanged.
    """
    path = Path(file_path)
    if path.is_absolute():
        try:
            path = path.relative_to(project_root)
        except ValueError:
            try:
                path = path.resolve().relative_to(project_root.resolve())
            except (ValueError, OSError):
                return file_path
    return path.as_posix()


def build_gateway(project_root: Path) -> EventGateway:
    return EventGateway.from_project(project_root)
