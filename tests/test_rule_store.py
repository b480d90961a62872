"""Tests for rule_engine/store.py: RuleStore loading, validation, and reload."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from skillsense.errors import ConfigError
from skillsense.rule_engine.models import EMPTY_RULESET, Enforcement, Priority, Ruleset, SkillKind
from skillsense.rule_engine.store import RuleStore, parse_ruleset


class TestLoadFile:
    def test_loads_rules_in_declaration_order(self, rules_path):
        ruleset = RuleStore().load(rules_path)
        assert ruleset.ids == [
            "backend-dev-guidelines",
            "frontend-dev-guidelines",
            "error-tracking",
        ]
        assert [r.order for r in ruleset.rules] == [0, 1, 2]

    def test_parses_enumerants(self, rules_path):
        ruleset = RuleStore().load(rules_path)
        rule = ruleset.get("frontend-dev-guidelines")
        assert rule is not None
        assert rule.kind == SkillKind.GUARDRAIL
        assert rule.enforcement == Enforcement.BLOCK
        assert rule.priority == Priority.HIGH

    def test_keyword_and_intent_triggers_flattened(self, rules_path):
        rule = RuleStore().load(rules_path).get("backend-dev-guidelines")
        assert rule is not None
        assert rule.prompt_patterns == ("controller", "express", "re:(create|add).*?route")

    def test_list_prompt_triggers_kept_verbatim(self, rules_path):
        rule = RuleStore().load(rules_path).get("frontend-dev-guidelines")
        assert rule is not None
        assert rule.prompt_patterns == ("drag and drop", "re:\\bmui\\b")

    def test_file_triggers(self, rules_path):
        rule = RuleStore().load(rules_path).get("backend-dev-guidelines")
        assert rule is not None
        assert rule.path_patterns == ("backend/**/*.ts",)
        assert rule.path_exclusions == ("**/*.test.ts",)

    def test_block_message_and_skip_env(self, rules_path):
        rule = RuleStore().load(rules_path).get("frontend-dev-guidelines")
        assert rule is not None
        assert rule.block_message.startswith("Read the frontend guidelines")
        assert rule.skip_env == "SKIP_FRONTEND_GUIDELINES"

    def test_records_source_and_hash(self, rules_path):
        ruleset = RuleStore().load(rules_path)
        assert ruleset.source == str(rules_path)
        assert len(ruleset.content_hash) == 64
        assert ruleset.warnings == ()


class TestDefaults:
    def test_missing_fields_default(self):
        ruleset = parse_ruleset({"skills": {"docs": {"promptTriggers": ["readme"]}}})
        rule = ruleset.rules[0]
        assert rule.kind == SkillKind.DOMAIN
        assert rule.enforcement == Enforcement.SUGGEST
        assert rule.priority == Priority.MEDIUM
        assert rule.skip_env is None

    def test_rule_without_triggers_loads_disabled(self):
        ruleset = parse_ruleset({"skills": {"idle": {"type": "domain"}}})
        assert ruleset.ids == ["idle"]
        assert ruleset.rules[0].enabled is False
        assert ruleset.warnings == ()

    def test_bare_mapping_without_skills_key(self):
        ruleset = parse_ruleset({"docs": {"promptTriggers": ["readme"]}})
        assert ruleset.ids == ["docs"]

    def test_critical_priority_accepted(self):
        ruleset = parse_ruleset(
            {"skills": {"sec": {"priority": "critical", "promptTriggers": ["secret"]}}}
        )
        assert ruleset.rules[0].priority == Priority.CRITICAL


class TestInvalidRulesDropped:
    def _load(self, skills: dict) -> Ruleset:
        return parse_ruleset({"skills": {"good": {"promptTriggers": ["ok"]}, **skills}})

    def test_unknown_enforcement(self):
        ruleset = self._load({"bad": {"enforcement": "warn", "promptTriggers": ["x"]}})
        assert ruleset.ids == ["good"]
        assert ruleset.warnings[0].rule_id == "bad"
        assert "enforcement" in ruleset.warnings[0].message

    def test_unknown_priority(self):
        ruleset = self._load({"bad": {"priority": "urgent", "promptTriggers": ["x"]}})
        assert ruleset.ids == ["good"]

    def test_unknown_type(self):
        ruleset = self._load({"bad": {"type": "style", "promptTriggers": ["x"]}})
        assert ruleset.ids == ["good"]

    def test_bad_intent_regex(self):
        ruleset = self._load({"bad": {"promptTriggers": {"intentPatterns": ["(unclosed"]}}})
        assert ruleset.ids == ["good"]
        assert "Invalid regex" in ruleset.warnings[0].message

    def test_bad_glob(self):
        ruleset = self._load({"bad": {"fileTriggers": {"pathPatterns": ["src/[abc"]}}})
        assert ruleset.ids == ["good"]

    def test_bad_exclusion_glob(self):
        ruleset = self._load(
            {"bad": {"fileTriggers": {"pathPatterns": ["a/*"], "pathExclusions": [""]}}}
        )
        assert ruleset.ids == ["good"]

    def test_non_string_pattern(self):
        ruleset = self._load({"bad": {"promptTriggers": ["ok", 3]}})
        assert ruleset.ids == ["good"]

    def test_rule_not_an_object(self):
        ruleset = self._load({"bad": ["promptTriggers"]})
        assert ruleset.ids == ["good"]

    def test_patterns_not_a_list(self):
        ruleset = self._load({"bad": {"fileTriggers": {"pathPatterns": "src/**"}}})
        assert ruleset.ids == ["good"]

    def test_dropped_rule_is_logged(self, caplog: pytest.LogCaptureFixture):
        with caplog.at_level(logging.WARNING, logger="skillsense.rule_engine.store"):
            self._load({"bad": {"enforcement": "warn", "promptTriggers": ["x"]}})
        assert any("bad" in r.getMessage() for r in caplog.records)

    def test_duplicate_ids_keep_first(self, tmp_path: Path):
        path = tmp_path / "dup.json"
        path.write_text(
            '{"skills": {'
            '"same": {"priority": "high", "promptTriggers": ["one"]},'
            '"same": {"priority": "low", "promptTriggers": ["two"]}'
            "}}"
        )
        ruleset = parse_ruleset(path)
        assert ruleset.ids == ["same"]
        assert ruleset.rules[0].priority == Priority.HIGH
        assert "Duplicate" in ruleset.warnings[0].message


class TestConfigErrors:
    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="Cannot read"):
            RuleStore().load(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError, match="not valid JSON"):
            RuleStore().load(path)

    def test_top_level_list(self, tmp_path: Path):
        path = tmp_path / "list.json"
        path.write_text("[]")
        with pytest.raises(ConfigError, match="top level"):
            RuleStore().load(path)

    def test_skills_not_an_object(self, tmp_path: Path):
        path = tmp_path / "skills.json"
        path.write_text(json.dumps({"skills": ["a", "b"]}))
        with pytest.raises(ConfigError, match="'skills' must be an object"):
            RuleStore().load(path)

    def test_failed_load_keeps_last_good(self, rules_path, tmp_path: Path):
        store = RuleStore()
        good = store.load(rules_path)
        bad = tmp_path / "bad.json"
        bad.write_text("[")
        with pytest.raises(ConfigError):
            store.load(bad)
        assert store.current is good

    def test_initial_ruleset_is_empty(self):
        assert RuleStore().current is EMPTY_RULESET


class TestReload:
    def test_reload_picks_up_changes(self, rules_path, make_rules):
        store = RuleStore()
        store.load(rules_path)
        make_rules(rules_path, {"skills": {"only": {"promptTriggers": ["x"]}}})
        assert store.reload().ids == ["only"]
        assert store.current.ids == ["only"]

    def test_reload_without_source(self):
        with pytest.raises(ConfigError, match="No ruleset source"):
            RuleStore().reload()

    def test_reload_failure_keeps_previous(self, rules_path):
        store = RuleStore()
        store.load(rules_path)
        rules_path.write_text("garbage")
        with pytest.raises(ConfigError):
            store.reload()
        assert len(store.current.rules) == 3


class TestIdempotentLoad:
    def test_same_source_same_ruleset(self, rules_path):
        first = RuleStore().load(rules_path)
        second = RuleStore().load(rules_path)
        assert first == second

    def test_mapping_and_file_sources_agree(self, rules_path, sample_rules):
        from_file = parse_ruleset(rules_path)
        from_mapping = parse_ruleset(sample_rules)
        assert from_file.rules == from_mapping.rules
