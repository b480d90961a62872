"""Pydantic models and enums for skill rules."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class SkillKind(StrEnum):
    DOMAIN = "domain"  # general guidance
    GUARDRAIL = "guardrail"  # must-follow constraint


class Enforcement(StrEnum):
    SUGGEST = "suggest"
    BLOCK = "block"


class Priority(StrEnum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Lower rank sorts first."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK: dict[Priority, int] = {
    Priority.CRITICAL: 0,
    Priority.HIGH: 1,
    Priority.MEDIUM: 2,
    Priority.LOW: 3,
}


class SkillRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    kind: SkillKind = SkillKind.DOMAIN
    enforcement: Enforcement = Enforcement.SUGGEST
    priority: Priority = Priority.MEDIUM
    order: int = 0
    description: str = ""
    block_message: str = ""
    path_patterns: tuple[str, ...] = ()
    path_exclusions: tuple[str, ...] = ()
    prompt_patterns: tuple[str, ...] = ()
    skip_env: str | None = None

    @property
    def enabled(self) -> bool:
        return bool(self.path_patterns or self.prompt_patterns)


class RuleValidationWarning(BaseModel):
    rule_id: str
    message: str


class Ruleset(BaseModel):
    model_config = ConfigDict(frozen=True)

    rules: tuple[SkillRule, ...] = ()
    warnings: tuple[RuleValidationWarning, ...] = ()
    source: str = ""
    content_hash: str = ""

    def get(self, rule_id: str) -> SkillRule | None:
        for rule in self.rules:
            if rule.id == rule_id:
                return rule
        return None

    @property
    def ids(self) -> list[str]:
        return [r.id for r in self.rules]


EMPTY_RULESET = Ruleset()


class RuleSummary(BaseModel):
    """Wire form of a rule for listings."""

    id: str
    kind: SkillKind
    enforcement: Enforcement
    priority: Priority
    description: str = ""
    path_patterns: list[str] = Field(default_factory=list)
    prompt_patterns: list[str] = Field(default_factory=list)

    @classmethod
    def from_rule(cls, rule: SkillRule) -> RuleSummary:
        return cls(
            id=rule.id,
            kind=rule.kind,
            enforcement=rule.enforcement,
            priority=rule.priority,
            description=rule.description,
            path_patterns=list(rule.path_patterns),
            prompt_patterns=list(rule.prompt_patterns),
        )
