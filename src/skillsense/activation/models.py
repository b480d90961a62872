"""Pydantic models for activation decisions."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from skillsense.rule_engine.models import Enforcement, Priority


class MatchedBy(StrEnum):
    PATH = "path"
    PROMPT = "prompt"
    BOTH = "both"

    @classmethod
    def from_flags(cls, by_path: bool, by_prompt: bool) -> MatchedBy | None:
        if by_path and by_prompt:
            return cls.BOTH
        if by_path:
            return cls.PATH
        if by_prompt:
            return cls.PROMPT
        return None


class Verdict(StrEnum):
    NONE = "none"
    SUGGEST = "suggest"
    BLOCK = "block"


class Decision(BaseModel):
    model_config = ConfigDict(frozen=True)

    rule_id: str
    enforcement: Enforcement
    priority: Priority
    matched_by: MatchedBy
    acknowledged: bool = False

    @property
    def blocks(self) -> bool:
        return self.enforcement == Enforcement.BLOCK and not self.acknowledged


class ActivationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    decisions: tuple[Decision, ...] = Field(default_factory=tuple)
    verdict: Verdict = Verdict.NONE

    @classmethod
    def from_decisions(cls, decisions: list[Decision]) -> ActivationResult:
        """Build a result; a single unacknowledged blocking decision blocks the whole result."""
        if any(d.blocks for d in decisions):
            verdict = Verdict.BLOCK
        elif decisions:
            verdict = Verdict.SUGGEST
        else:
            verdict = Verdict.NONE
        return cls(decisions=tuple(decisions), verdict=verdict)

    @classmethod
    def empty(cls) -> ActivationResult:
        return cls()

    @property
    def blocking(self) -> list[Decision]:
        return [d for d in self.decisions if d.blocks]

    @property
    def rule_ids(self) -> list[str]:
        return [d.rule_id for d in self.decisions]
