"""EventGateway: host-agnostic request/response boundary for the engine.

Requests are JSON objects of the form::

    {"eventKind": "PromptSubmitted", "sessionId": "...", "promptText": "...",
     "touchedPaths": ["backend/src/app.ts"]}
    {"eventKind": "ToolCompleted", "sessionId": "...",
     "toolEvent": {"path": "backend/src/app.ts", "tool": "Edit"}}
    {"eventKind": "SkillAcknowledged", "sessionId": "...", "skillId": "..."}
    {"eventKind": "SessionEnded", "sessionId": "..."}

``event`` is accepted as a synonym for ``toolEvent``. Only PromptSubmitted can produce a block verdict; every other event is
acknowledged and never blocks.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from enum import StrEnum
from pathlib import Path
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    model_validator,
)

from skillsense.activation.formatter import block_reason, format_banner
from skillsense.activation.models import ActivationResult, MatchedBy, Verdict
from skillsense.activation.resolver import ActivationResolver
from skillsense.config import CONFIG_FILE_NAME, EngineConfig, load_engine_config
from skillsense.deadline import Deadline
from skillsense.errors import ConfigError, GatewayError
from skillsense.rule_engine.models import Enforcement, Priority, Ruleset
from skillsense.rule_engine.store import RuleStore
from skillsense.session.cache import SessionCache
from skillsense.session.models import FileEvent
from skillsense.session.tracker import FileChangeTracker

logger = logging.getLogger(__name__)

_TRUTHY = ("true", "1", "yes", "on")


class EventKind(StrEnum):
    PROMPT_SUBMITTED = "PromptSubmitted"
    TOOL_COMPLETED = "ToolCompleted"
    SKILL_ACKNOWLEDGED = "SkillAcknowledged"
    SESSION_ENDED = "SessionEnded"


class ToolEvent(BaseModel):
    path: str
    tool: str = "Edit"
    timestamp: float = 0.0


class GatewayRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event_kind: EventKind = Field(alias="eventKind")
    session_id: str = Field(alias="sessionId", min_length=1)
    prompt_text: str = Field(default="", alias="promptText")
    touched_paths: list[str] = Field(default_factory=list, alias="touchedPaths")
    tool_event: ToolEvent | None = Field(
        default=None, validation_alias=AliasChoices("toolEvent", "event", "tool_event")
    )
    skill_id: str | None = Field(default=None, alias="skillId")

    @model_validator(mode="after")
    def _check_payload(self) -> GatewayRequest:
        if self.event_kind == EventKind.TOOL_COMPLETED and self.tool_event is None:
            raise ValueError("ToolCompleted requires toolEvent")
        if self.event_kind == EventKind.SKILL_ACKNOWLEDGED and not self.skill_id:
            raise ValueError("SkillAcknowledged requires skillId")
        return self


class ActivatedSkill(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    enforcement: Enforcement
    priority: Priority
    matched_by: MatchedBy = Field(alias="matchedBy")
    acknowledged: bool = False


class PromptResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    verdict: Verdict = Verdict.NONE
    activated_skills: list[ActivatedSkill] = Field(default_factory=list, alias="activatedSkills")
    message: str = ""
    block_reason: str = Field(default="", alias="blockReason")

    @classmethod
    def from_result(cls, result: ActivationResult, ruleset: Ruleset) -> PromptResponse:
        return cls(
            verdict=result.verdict,
            activated_skills=[
                ActivatedSkill(
                    id=d.rule_id,
                    enforcement=d.enforcement,
                    priority=d.priority,
                    matched_by=d.matched_by,
                    acknowledged=d.acknowledged,
                )
                for d in result.decisions
            ],
            message=format_banner(result, ruleset),
            block_reason=block_reason(result, ruleset),
        )


class AckResponse(BaseModel):
    acknowledged: bool = True
    recorded: bool = False


def parse_request(payload: object) -> GatewayRequest:
    if not isinstance(payload, Mapping):
        raise GatewayError("Request must be a JSON object")
    try:
        return GatewayRequest.model_validate(payload)
    except ValidationError as e:
        raise GatewayError(f"Invalid request: {e}") from e


class EventGateway:
    def __init__(
        self,
        store: RuleStore,
        tracker: FileChangeTracker,
        config: EngineConfig | None = None,
        *,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._store = store
        self._tracker = tracker
        self._config = config or EngineConfig()
        self._environ = environ if environ is not None else os.environ

    @classmethod
    def from_project(
        cls,
        project_root: Path,
        *,
        config: EngineConfig | None = None,
        data_dir: Path | None = None,
    ) -> EventGateway:
        """Wire a gateway from the project's config file and ruleset."""
        if config is None:
            config = load_engine_config(project_root / CONFIG_FILE_NAME)
        store = RuleStore()
        rules_path = config.resolve_rules_path(project_root)
        try:
            store.load(rules_path)
        except ConfigError as e:
            logger.warning(f"No usable ruleset, continuing without skills: {e}")
        tracker = FileChangeTracker(
            SessionCache(data_dir),
            threshold=config.structure_threshold,
            reserved=config.reserved_components,
        )
        return cls(store, tracker, config)

    @property
    def store(self) -> RuleStore:
        return self._store

    @property
    def tracker(self) -> FileChangeTracker:
        return self._tracker

    @property
    def config(self) -> EngineConfig:
        return self._config

    def handle(self, payload: object) -> dict[str, Any]:
        """Dispatch one event and return the JSON-ready response.

        Raises GatewayError for malformed requests; everything else fails open.
        """
        request = parse_request(payload)
        deadline = Deadline(self._config.deadline_ms)
        if request.event_kind == EventKind.PROMPT_SUBMITTED:
            response: BaseModel = self.submit_prompt(request, deadline)
        elif request.event_kind == EventKind.TOOL_COMPLETED:
            response = self.complete_tool(request, deadline)
        elif request.event_kind == EventKind.SKILL_ACKNOWLEDGED:
            response = AckResponse(
                recorded=self._tracker.acknowledge(
                    request.session_id, request.skill_id or "", deadline=deadline
                )
            )
        else:
            response = AckResponse(recorded=self._tracker.end_session(request.session_id))
        return response.model_dump(mode="json", by_alias=True)

    def submit_prompt(self, request: GatewayRequest, deadline: Deadline) -> PromptResponse:
        ruleset = self._store.current
        resolver = ActivationResolver(ruleset, self._tracker, lookback=self._config.lookback)
        try:
            result = resolver.resolve(
                request.session_id,
                request.prompt_text,
                request.touched_paths,
                disabled=self.disabled_rules(ruleset),
                deadline=deadline,
            )
        except Exception:
            logger.exception("Activation failed; continuing without skills")
            result = ActivationResult.empty()
        return PromptResponse.from_result(result, ruleset)

    def complete_tool(self, request: GatewayRequest, deadline: Deadline) -> AckResponse:
        tool_event = request.tool_event
        if tool_event is None:
            return AckResponse(recorded=False)
        event = FileEvent(
            path=tool_event.path, tool=tool_event.tool, timestamp=tool_event.timestamp
        )
        recorded = self._tracker.record(request.session_id, event, deadline=deadline)
        return AckResponse(recorded=recorded)

    def disabled_rules(self, ruleset: Ruleset) -> frozenset[str]:
        """Rules switched off for this invocation by their skip environment variable."""
        return frozenset(
            rule.id
            for rule in ruleset.rules
            if rule.skip_env and self._environ.get(rule.skip_env, "").lower() in _TRUTHY
        )
