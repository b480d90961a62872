"""Pydantic models for per-session file-change state."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class FileEvent(BaseModel):
    """One completed edit. Never mutated once recorded."""

    model_config = ConfigDict(frozen=True)

    path: str
    tool: str = "Edit"
    timestamp: float = 0.0


class SessionState(BaseModel):
    session_id: str
    events: list[FileEvent] = Field(default_factory=list)
    segment_counts: dict[str, int] = Field(default_factory=dict)
    project_structure: dict[str, str] = Field(default_factory=dict)
    acknowledged: list[str] = Field(default_factory=list)
    created_at: float = 0.0
    updated_at: float = 0.0

    @property
    def last_timestamp(self) -> float:
        return self.events[-1].timestamp if self.events else 0.0

    def recent_paths(self, limit: int) -> list[str]:
        """Paths of the last *limit* events, most recent first, repeats kept."""
        if limit <= 0:
            return []
        return [e.path for e in reversed(self.events[-limit:])]
