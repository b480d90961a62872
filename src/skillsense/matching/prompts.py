"""Keyword and regex matching for prompt triggers.

Regexes run on the ``regex`` engine so a search can be bounded by the
invocation deadline; a search that runs out of time raises TimeoutError.
"""

from __future__ import annotations

import logging
import math

import regex

from skillsense.deadline import Deadline

logger = logging.getLogger(__name__)

REGEX_PREFIX = "re:"


def is_regex(pattern: str) -> bool:
    return pattern.startswith(REGEX_PREFIX)


def as_regex(expression: str) -> str:
    """Mark a raw regular expression as a regex prompt pattern."""
    return f"{REGEX_PREFIX}{expression}"


def validate_prompt_pattern(pattern: object) -> None:
    """Raise ValueError if *pattern* is empty, not a string, or a bad regex."""
    if not isinstance(pattern, str):
        raise ValueError(f"Prompt pattern must be a string, got {type(pattern).__name__}")
    if is_regex(pattern):
        expression = pattern[len(REGEX_PREFIX) :]
        if not expression:
            raise ValueError("Regex prompt pattern is empty")
        try:
            regex.compile(expression, regex.IGNORECASE)
        except regex.error as e:
            raise ValueError(f"Invalid regex {expression!r}: {e}") from e
    elif not pattern.strip():
        raise ValueError("Prompt keyword is empty")


class PromptMatcher:
    """Matches prompt text against keyword and ``re:`` regex patterns.

    Regexes are compiled on first use and kept for the lifetime of the
    matcher. Patterns that fail to compile are remembered as bad, reported
    once, and never match.
    """

    def __init__(self) -> None:
        self._compiled: dict[str, regex.Pattern[str] | None] = {}

    def matches(self, pattern: str, text: str, *, deadline: Deadline | None = None) -> bool:
        """Return True if *text* satisfies *pattern*.

        Raises TimeoutError when a regex search cannot finish before *deadline*.
        """
        if not text or not pattern:
            return False
        if not is_regex(pattern):
            return pattern.lower() in text.lower()
        compiled = self._compile(pattern)
        if compiled is None:
            return False
        timeout = deadline.remaining() if deadline is not None else math.inf
        if timeout <= 0:
            raise TimeoutError(f"No time left to search {pattern!r}")
        if math.isinf(timeout):
            return compiled.search(text) is not None
        return compiled.search(text, timeout=timeout) is not None

    def is_cached(self, pattern: str) -> bool:
        return pattern in self._compiled

    def _compile(self, pattern: str) -> regex.Pattern[str] | None:
        if pattern in self._compiled:
            return self._compiled[pattern]
        expression = pattern[len(REGEX_PREFIX) :]
        try:
            compiled: regex.Pattern[str] | None = regex.compile(expression, regex.IGNORECASE)
        except regex.error as e:
            logger.warning(f"Ignoring malformed prompt regex {expression!r}: {e}")
            compiled = None
        self._compiled[pattern] = compiled
        return compiled


_default_matcher = PromptMatcher()


def matches(pattern: str, text: str, *, deadline: Deadline | None = None) -> bool:
    """Match using the process-wide matcher and its regex cache."""
    return _default_matcher.matches(pattern, text, deadline=deadline)


def default_matcher() -> PromptMatcher:
    return _default_matcher
