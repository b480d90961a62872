"""Session state JSON read/write, file locking, and session ID resolution."""

from __future__ import annotations

import fcntl
import json
import os
import tempfile
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from skillsense.deadline import Deadline
from skillsense.errors import PersistenceError
from skillsense.session.config import LOCK_DEFAULT_TIMEOUT_SEC, LOCK_POLL_INTERVAL_SEC


def resolve_session_id(payload_id: object = None) -> str:
    """Resolve session ID from the hook payload, then env vars, then ``default``."""
    if isinstance(payload_id, str) and payload_id.strip():
        return payload_id
    return os.environ.get("CLAUDE_SESSION_ID") or os.environ.get(
        "CLAUDE_CODE_TASK_LIST_ID", "default"
    )


def write_state(path: Path, data: dict[str, object]) -> None:
    """Write state dict to JSON file atomically, creating parent dirs as needed."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(data, indent=2)
        fd, tmp = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    except (OSError, TypeError, ValueError) as e:
        raise PersistenceError(f"Cannot write {path}: {e}") from e
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content.encode())
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except OSError as e:
        Path(tmp).unlink(missing_ok=True)
        raise PersistenceError(f"Cannot write {path}: {e}") from e


def read_state(path: Path) -> dict[str, object]:
    """Read state dict from JSON file.

    A missing file reads as an empty dict. Unreadable or corrupt files raise
    PersistenceError.
    """
    try:
        result = json.loads(path.read_text())
    except FileNotFoundError:
        return {}
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
        raise PersistenceError(f"Cannot read {path}: {e}") from e
    if not isinstance(result, dict):
        raise PersistenceError(f"State file {path} does not hold a JSON object")
    return result


@contextmanager
def locked(lock_path: Path, deadline: Deadline | None = None) -> Iterator[None]:
    """Hold an exclusive flock on *lock_path* for the duration of the block.

    Polls until the lock is free. Gives up with PersistenceError when the
    deadline expires (or after a default timeout when no deadline is given).
    """
    deadline = deadline or Deadline(LOCK_DEFAULT_TIMEOUT_SEC * 1000)
    try:
        lock_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(lock_path, os.O_RDWR | os.O_CREAT, 0o644)
    except OSError as e:
        raise PersistenceError(f"Cannot open lock {lock_path}: {e}") from e
    try:
        while True:
            try:
                fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
                break
            except BlockingIOError:
                if deadline.expired():
                    raise PersistenceError(f"Timed out waiting for lock {lock_path}") from None
                time.sleep(min(LOCK_POLL_INTERVAL_SEC, deadline.remaining()))
            except OSError as e:
                raise PersistenceError(f"Cannot lock {lock_path}: {e}") from e
        try:
            yield
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
    finally:
        os.close(fd)
