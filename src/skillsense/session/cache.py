"""SessionCache: persisted SessionState per session id with atomic updates."""

from __future__ import annotations

import shutil
import time
from collections.abc import Callable
from pathlib import Path

from pydantic import ValidationError

from skillsense.deadline import Deadline
from skillsense.errors import PersistenceError
from skillsense.session.config import (
    LOCK_FILE_NAME,
    STATE_FILE_NAME,
    get_data_dir,
    get_session_dir,
)
from skillsense.session.models import SessionState
from skillsense.session.state import locked, read_state, write_state


class SessionCache:
    """File-backed store of SessionState, one directory per session.

    ``update`` is a read-modify-write performed under an exclusive lock on
    the session's lock file; the state file itself is replaced atomically,
    so unlocked readers always see a complete snapshot.
    """

    def __init__(self, data_dir: Path | None = None) -> None:
        self._data_dir = data_dir or get_data_dir()

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def session_dir(self, session_id: str) -> Path:
        return get_session_dir(session_id, self._data_dir)

    def state_path(self, session_id: str) -> Path:
        return self.session_dir(session_id) / STATE_FILE_NAME

    def load(self, session_id: str) -> SessionState:
        """Return the persisted state, or a fresh empty state if none exists."""
        data = read_state(self.state_path(session_id))
        if not data:
            return SessionState(session_id=session_id)
        try:
            return SessionState.model_validate(data)
        except ValidationError as e:
            raise PersistenceError(f"Corrupt session state for '{session_id}': {e}") from e

    def update(
        self,
        session_id: str,
        mutate: Callable[[SessionState], None],
        *,
        deadline: Deadline | None = None,
    ) -> SessionState:
        """Apply *mutate* to the session state and persist it before returning."""
        lock_path = self.session_dir(session_id) / LOCK_FILE_NAME
        with locked(lock_path, deadline):
            try:
                state = self.load(session_id)
            except PersistenceError:
                # Corrupt state is replaced with an empty one
                state = SessionState(session_id=session_id)
            now = time.time()
            if not state.created_at:
                state.created_at = now
            mutate(state)
            state.updated_at = now
            write_state(self.state_path(session_id), state.model_dump(mode="json"))
        return state

    def drop(self, session_id: str) -> bool:
        """Delete everything stored for the session. Returns True if anything existed."""
        session_dir = self.session_dir(session_id)
        if not session_dir.exists():
            return False
        try:
            shutil.rmtree(session_dir)
        except OSError as e:
            raise PersistenceError(f"Cannot remove session '{session_id}': {e}") from e
        return True

    def list_sessions(self) -> list[str]:
        sessions_root = self._data_dir / "sessions"
        if not sessions_root.is_dir():
            return []
        return sorted(
            p.name for p in sessions_root.iterdir() if (p / STATE_FILE_NAME).exists()
        )
