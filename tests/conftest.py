"""Shared fixtures for skillsense tests."""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

import pytest

from skillsense.session.cache import SessionCache
from skillsense.session.tracker import FileChangeTracker

SAMPLE_RULES: dict[str, Any] = {
    "version": "1.0",
    "skills": {
        "backend-dev-guidelines": {
            "type": "domain",
            "enforcement": "suggest",
            "priority": "high",
            "description": "Express controllers, services, repositories",
            "promptTriggers": {
                "keywords": ["controller", "express"],
                "intentPatterns": ["(create|add).*?route"],
            },
            "fileTriggers": {
                "pathPatterns": ["backend/**/*.ts"],
                "pathExclusions": ["**/*.test.ts"],
            },
        },
        "frontend-dev-guidelines": {
            "type": "guardrail",
            "enforcement": "block",
            "priority": "high",
            "description": "React component patterns",
            "promptTriggers": ["drag and drop", "re:\\bmui\\b"],
            "fileTriggers": {"pathPatterns": ["frontend/src/**/*.tsx"]},
            "blockMessage": "Read the frontend guidelines before touching components.",
            "skipConditions": {"envOverride": "SKIP_FRONTEND_GUIDELINES"},
        },
        "error-tracking": {
            "type": "domain",
            "enforcement": "suggest",
            "priority": "low",
            "promptTriggers": {"keywords": ["sentry"]},
        },
    },
}


def write_rules(path: Path, data: dict[str, Any] | None = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(SAMPLE_RULES if data is None else data, indent=2))
    return path


@pytest.fixture
def rules_path(tmp_path: Path) -> Path:
    return write_rules(tmp_path / "skill-rules.json")


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """A project with the sample ruleset at the default location."""
    root = tmp_path / "project"
    write_rules(root / ".claude" / "skills" / "skill-rules.json")
    return root


@pytest.fixture
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "data"
    monkeypatch.setenv("SKILLSENSE_DATA_DIR", str(path))
    return path


@pytest.fixture
def tracker(data_dir: Path) -> FileChangeTracker:
    return FileChangeTracker(SessionCache(data_dir))


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "SKILLSENSE_DATA_DIR",
        "SKILLSENSE_LOG_LEVEL",
        "SKILLSENSE_PROJECT_ROOT",
        "CLAUDE_PROJECT_DIR",
        "CLAUDE_SESSION_ID",
        "CLAUDE_CODE_TASK_LIST_ID",
        "SKILLSENSE_RULES_PATH",
        "SKILLSENSE_LOOKBACK",
        "SKILLSENSE_DEADLINE_MS",
        "SKILLSENSE_STRUCTURE_THRESHOLD",
        "SKILLSENSE_PORT",
        "SKIP_FRONTEND_GUIDELINES",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sample_rules() -> dict[str, Any]:
    return copy.deepcopy(SAMPLE_RULES)


@pytest.fixture
def make_rules():
    """Write a ruleset (the sample one by default) to a path."""
    return write_rules
