"""Exception types shared across the engine."""

from __future__ import annotations


class SkillsenseError(Exception):
    """Base class for engine errors."""


class ConfigError(SkillsenseError):
    """Ruleset source is unreadable or not a mapping at the top level."""


class PersistenceError(SkillsenseError):
    """Session state could not be read or written."""


class MatchEvaluationError(SkillsenseError):
    """A rule's pattern raised while being evaluated."""

    def __init__(self, rule_id: str, pattern: str | None, cause: BaseException) -> None:
        self.rule_id = rule_id
        self.pattern = pattern
        self.cause = cause
        super().__init__(f"Rule '{rule_id}' failed on pattern {pattern!r}: {cause}")


class GatewayError(SkillsenseError):
    """An event envelope could not be understood."""
