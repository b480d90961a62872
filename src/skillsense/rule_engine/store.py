"""RuleStore: load, validate, and cache the skill-rule configuration."""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from skillsense.errors import ConfigError
from skillsense.matching.paths import validate_glob
from skillsense.matching.prompts import as_regex, validate_prompt_pattern
from skillsense.rule_engine.models import (
    EMPTY_RULESET,
    Enforcement,
    Priority,
    RuleValidationWarning,
    Ruleset,
    SkillKind,
    SkillRule,
)

logger = logging.getLogger(__name__)

RuleSource = Path | Mapping[str, Any]


class _Pairs(list):  # type: ignore[type-arg]
    """A JSON object kept as ordered (key, value) pairs so duplicate keys survive."""


def _plain(value: Any) -> Any:
    if isinstance(value, _Pairs):
        return {k: _plain(v) for k, v in value}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


class RuleStore:
    """Owns the current Ruleset; swaps it whole on every successful load."""

    def __init__(self) -> None:
        self._ruleset: Ruleset = EMPTY_RULESET
        self._source: RuleSource | None = None
        self._lock = threading.Lock()

    @property
    def current(self) -> Ruleset:
        return self._ruleset

    def load(self, source: RuleSource) -> Ruleset:
        """Parse *source* and make it the current ruleset.

        Raises ConfigError when the source cannot be read or is not a mapping.
        The previous ruleset stays current in that case.
        """
        ruleset = parse_ruleset(source)
        with self._lock:
            self._ruleset = ruleset
            self._source = source
        return ruleset

    def reload(self) -> Ruleset:
        if self._source is None:
            raise ConfigError("No ruleset source has been loaded")
        return self.load(self._source)


def parse_ruleset(source: RuleSource) -> Ruleset:
    """Build a Ruleset from a JSON file path or an already-parsed mapping."""
    if isinstance(source, Path):
        try:
            text = source.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read ruleset {source}: {e}") from e
        try:
            data = json.loads(text, object_pairs_hook=_Pairs)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Ruleset {source} is not valid JSON: {e}") from e
        if not isinstance(data, _Pairs):
            raise ConfigError(f"Ruleset {source} must be a JSON object at the top level")
        label = str(source)
        content_hash = _hash(text)
        top = data
    elif isinstance(source, Mapping):
        label = "<mapping>"
        try:
            content_hash = _hash(json.dumps(source, default=str))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Ruleset mapping is not serializable: {e}") from e
        top = _Pairs(source.items())
    else:
        raise ConfigError(f"Unsupported ruleset source type: {type(source).__name__}")

    skills: Any = top
    for key, value in top:
        if key == "skills":
            skills = value
            break
    if isinstance(skills, Mapping):
        skills = _Pairs(skills.items())
    if not isinstance(skills, _Pairs):
        raise ConfigError(f"Ruleset {label}: 'skills' must be an object")

    rules: list[SkillRule] = []
    warnings: list[RuleValidationWarning] = []
    seen: set[str] = set()
    for order, (skill_id, raw) in enumerate(skills):
        if skill_id in seen:
            warnings.append(
                RuleValidationWarning(
                    rule_id=str(skill_id),
                    message="Duplicate skill id; keeping the first declaration",
                )
            )
            continue
        try:
            rule = _parse_rule(skill_id, _plain(raw), order)
        except ValueError as e:
            warnings.append(RuleValidationWarning(rule_id=str(skill_id), message=str(e)))
            continue
        seen.add(rule.id)
        rules.append(rule)

    for w in warnings:
        logger.warning(f"Dropped skill rule '{w.rule_id}' from {label}: {w.message}")

    return Ruleset(
        rules=tuple(rules),
        warnings=tuple(warnings),
        source=label,
        content_hash=content_hash,
    )


def _parse_rule(skill_id: object, raw: object, order: int) -> SkillRule:
    if not isinstance(skill_id, str) or not skill_id.strip():
        raise ValueError("Skill id must be a non-empty string")
    if not isinstance(raw, dict):
        raise ValueError("Skill definition must be an object")

    kind = _enum(SkillKind, raw.get("type", SkillKind.DOMAIN), "type")
    enforcement = _enum(Enforcement, raw.get("enforcement", Enforcement.SUGGEST), "enforcement")
    priority = _enum(Priority, raw.get("priority", Priority.MEDIUM), "priority")

    file_triggers = raw.get("fileTriggers") or {}
    if not isinstance(file_triggers, dict):
        raise ValueError("fileTriggers must be an object")
    path_patterns = _string_list(file_triggers.get("pathPatterns"), "pathPatterns")
    path_exclusions = _string_list(file_triggers.get("pathExclusions"), "pathExclusions")
    for pattern in (*path_patterns, *path_exclusions):
        validate_glob(pattern)

    prompt_patterns = _prompt_patterns(raw.get("promptTriggers"))
    for pattern in prompt_patterns:
        validate_prompt_pattern(pattern)

    skip = raw.get("skipConditions") or {}
    if not isinstance(skip, dict):
        raise ValueError("skipConditions must be an object")
    skip_env = skip.get("envOverride")
    if skip_env is not None and not isinstance(skip_env, str):
        raise ValueError("skipConditions.envOverride must be a string")

    return SkillRule(
        id=skill_id,
        kind=kind,
        enforcement=enforcement,
        priority=priority,
        order=order,
        description=_text(raw.get("description")),
        block_message=_text(raw.get("blockMessage")),
        path_patterns=tuple(path_patterns),
        path_exclusions=tuple(path_exclusions),
        prompt_patterns=tuple(prompt_patterns),
        skip_env=skip_env or None,
    )


def _enum(enum_cls: Any, value: object, field_name: str) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValueError(f"Unknown {field_name} {value!r} (expected one of: {allowed})") from None


def _string_list(value: object, field_name: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{field_name} must be a list")
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"{field_name} entries must be strings, got {item!r}")
    return list(value)


def _prompt_patterns(value: object) -> list[str]:
    """Normalize promptTriggers into a flat list of keyword / ``re:`` strings."""
    if value is None:
        return []
    if isinstance(value, list):
        return _string_list(value, "promptTriggers")
    if isinstance(value, dict):
        keywords = _string_list(value.get("keywords"), "promptTriggers.keywords")
        intents = _string_list(value.get("intentPatterns"), "promptTriggers.intentPatterns")
        return keywords + [as_regex(p) for p in intents]
    raise ValueError("promptTriggers must be a list or an object")


def _text(value: object) -> str:
    return value if isinstance(value, str) else ""


def _hash(content: str) -> str:
    return hashlib.sha256(content.encode()).hexdigest()
