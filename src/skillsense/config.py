"""EngineConfig dataclass and loader for .skillsense.json with env overrides."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".skillsense.json"
DEFAULT_RULES_PATH = ".claude/skills/skill-rules.json"
DEFAULT_LOOKBACK = 20
DEFAULT_DEADLINE_MS = 300
DEFAULT_STRUCTURE_THRESHOLD = 2

# HTTP API
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 41790

# Top-level directories recognised as components on first sight
DEFAULT_RESERVED_COMPONENTS: tuple[str, ...] = (
    "frontend",
    "backend",
    "shared",
    "client",
    "server",
    "api",
    "web",
    "app",
    "apps",
    "packages",
    "services",
    "libs",
    "common",
)

# Host tools whose completion means a file was edited
DEFAULT_TRACKED_TOOLS: tuple[str, ...] = ("Edit", "Write", "MultiEdit", "NotebookEdit")


@dataclass
class EngineConfig:
    rules_path: str = DEFAULT_RULES_PATH
    lookback: int = DEFAULT_LOOKBACK
    deadline_ms: int = DEFAULT_DEADLINE_MS
    structure_threshold: int = DEFAULT_STRUCTURE_THRESHOLD
    reserved_components: list[str] = field(
        default_factory=lambda: list(DEFAULT_RESERVED_COMPONENTS)
    )
    tracked_tools: list[str] = field(default_factory=lambda: list(DEFAULT_TRACKED_TOOLS))

    def resolve_rules_path(self, project_root: Path) -> Path:
        path = Path(self.rules_path).expanduser()
        if path.is_absolute():
            return path
        return project_root / path


def load_engine_config(path: Path | None = None) -> EngineConfig:
    """Load engine config from the ``engine`` section of .skillsense.json."""
    config = EngineConfig()
    if path and path.exists():
        try:
            text = path.read_text()
            if text.strip():
                data = json.loads(text)
                section = data.get("engine", {}) if isinstance(data, dict) else {}
                if isinstance(section, dict):
                    _apply(config, section)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Ignoring unreadable config {path}: {e}")

    if env_val := os.environ.get("SKILLSENSE_RULES_PATH"):
        config.rules_path = env_val
    _apply_int_env(config, "lookback", "SKILLSENSE_LOOKBACK")
    _apply_int_env(config, "deadline_ms", "SKILLSENSE_DEADLINE_MS")
    _apply_int_env(config, "structure_threshold", "SKILLSENSE_STRUCTURE_THRESHOLD")
    return config


def _apply(cfg: EngineConfig, data: dict[str, object]) -> None:
    if isinstance(data.get("rules_path"), str):
        cfg.rules_path = data["rules_path"]  # type: ignore[assignment]
    for key in ("lookback", "deadline_ms", "structure_threshold"):
        value = data.get(key)
        if isinstance(value, int) and not isinstance(value, bool) and value > 0:
            setattr(cfg, key, value)
    for key in ("reserved_components", "tracked_tools"):
        value = data.get(key)
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            setattr(cfg, key, list(value))


def _apply_int_env(cfg: EngineConfig, attr: str, env_name: str) -> None:
    raw = os.environ.get(env_name)
    if not raw:
        return
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {env_name}={raw!r}")
        return
    if value > 0:
        setattr(cfg, attr, value)


def get_port() -> int:
    raw = os.environ.get("SKILLSENSE_PORT")
    if raw:
        try:
            return int(raw)
        except ValueError:
            logger.warning(f"Ignoring non-integer SKILLSENSE_PORT={raw!r}")
    return DEFAULT_PORT
