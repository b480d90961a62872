"""Session-scoped file-change tracking and its persisted state."""

from skillsense.session.cache import SessionCache
from skillsense.session.models import FileEvent, SessionState
from skillsense.session.tracker import FileChangeTracker

__all__ = [
    "FileChangeTracker",
    "FileEvent",
    "SessionCache",
    "SessionState",
]
