"""Rule engine: skill-rule models and the RuleStore that loads them."""

from skillsense.rule_engine.models import (
    EMPTY_RULESET,
    Enforcement,
    Priority,
    RuleSummary,
    RuleValidationWarning,
    Ruleset,
    SkillKind,
    SkillRule,
)
from skillsense.rule_engine.store import RuleStore, parse_ruleset

__all__ = [
    "EMPTY_RULESET",
    "Enforcement",
    "Priority",
    "RuleStore",
    "RuleSummary",
    "RuleValidationWarning",
    "Ruleset",
    "SkillKind",
    "SkillRule",
    "parse_ruleset",
]
