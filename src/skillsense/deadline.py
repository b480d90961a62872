"""Cooperative per-invocation time budget."""

from __future__ import annotations

import time
from collections.abc import Callable


class Deadline:
    """Tracks a time budget measured on a monotonic clock.

    Work checks ``expired()`` at safe points and gives up when it returns True.
    """

    def __init__(
        self,
        budget_ms: float | None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._clock = clock
        self._budget_ms = budget_ms
        self._expires_at = None if budget_ms is None else clock() + budget_ms / 1000.0

    @classmethod
    def never(cls) -> Deadline:
        return cls(None)

    @property
    def budget_ms(self) -> float | None:
        return self._budget_ms

    def remaining(self) -> float:
        """Seconds left, or ``inf`` for an unbounded deadline."""
        if self._expires_at is None:
            return float("inf")
        return max(0.0, self._expires_at - self._clock())

    def expired(self) -> bool:
        return self._expires_at is not None and self._clock() >= self._expires_at
