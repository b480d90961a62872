"""FileChangeTracker: session edit log and incremental project-structure inference."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable

from skillsense.config import DEFAULT_RESERVED_COMPONENTS, DEFAULT_STRUCTURE_THRESHOLD
from skillsense.deadline import Deadline
from skillsense.errors import PersistenceError
from skillsense.matching.paths import normalize_path
from skillsense.session.cache import SessionCache
from skillsense.session.models import FileEvent, SessionState

logger = logging.getLogger(__name__)

_MIN_TICK = 1e-6


def top_level_segment(path: str) -> str | None:
    """Return the first directory component of a relative path, if any."""
    parts = normalize_path(path).split("/")
    if len(parts) < 2:
        return None
    segment = parts[0]
    if segment in ("", ".", ".."):
        return None
    return segment


class FileChangeTracker:
    """Records file edits per session and derives a coarse project layout.

    A top-level directory becomes a component once it has been seen in
    ``threshold`` events, or on first sight if it is a reserved name.
    """

    def __init__(
        self,
        cache: SessionCache,
        *,
        threshold: int = DEFAULT_STRUCTURE_THRESHOLD,
        reserved: Iterable[str] = DEFAULT_RESERVED_COMPONENTS,
    ) -> None:
        self._cache = cache
        self._threshold = max(1, threshold)
        self._reserved = frozenset(reserved)

    @property
    def cache(self) -> SessionCache:
        return self._cache

    def record(
        self,
        session_id: str,
        event: FileEvent,
        *,
        deadline: Deadline | None = None,
    ) -> bool:
        """Append *event* to the session log.

        Returns True only once the updated state is on disk. Persistence
        failures are logged and reported as False; the event is dropped.
        """
        path = normalize_path(event.path)
        if not path:
            return False

        def _append(state: SessionState) -> None:
            timestamp = max(event.timestamp or time.time(), state.last_timestamp + _MIN_TICK)
            state.events.append(event.model_copy(update={"path": path, "timestamp": timestamp}))
            self._observe(state, path)

        try:
            self._cache.update(session_id, _append, deadline=deadline)
        except PersistenceError as e:
            logger.warning(f"Dropped file event for session '{session_id}': {e}")
            return False
        return True

    def acknowledge(
        self,
        session_id: str,
        skill_id: str,
        *,
        deadline: Deadline | None = None,
    ) -> bool:
        """Mark a skill as acknowledged for the rest of the session."""

        def _ack(state: SessionState) -> None:
            if skill_id not in state.acknowledged:
                state.acknowledged.append(skill_id)

        try:
            self._cache.update(session_id, _ack, deadline=deadline)
        except PersistenceError as e:
            logger.warning(f"Dropped acknowledgement of '{skill_id}' for '{session_id}': {e}")
            return False
        return True

    def end_session(self, session_id: str) -> bool:
        try:
            return self._cache.drop(session_id)
        except PersistenceError as e:
            logger.warning(str(e))
            return False

    def state_of(self, session_id: str) -> SessionState:
        """Current state; unreadable state reads as an empty session."""
        try:
            return self._cache.load(session_id)
        except PersistenceError as e:
            logger.warning(f"Treating session '{session_id}' as empty: {e}")
            return SessionState(session_id=session_id)

    def recent_paths(self, session_id: str, limit: int) -> list[str]:
        """Paths of the last *limit* events, most recent first, repeats kept."""
        if limit <= 0:
            return []
        return self.state_of(session_id).recent_paths(limit)

    def structure_of(self, session_id: str) -> dict[str, str]:
        return dict(self.state_of(session_id).project_structure)

    def acknowledged(self, session_id: str) -> frozenset[str]:
        return frozenset(self.state_of(session_id).acknowledged)

    def _observe(self, state: SessionState, path: str) -> None:
        segment = top_level_segment(path)
        if segment is None:
            return
        count = state.segment_counts.get(segment, 0) + 1
        state.segment_counts[segment] = count
        if segment in state.project_structure:
            return
        if count >= self._threshold or segment in self._reserved:
            state.project_structure[segment] = f"{segment}/"
            logger.debug(f"Session '{state.session_id}': recognised component '{segment}'")
