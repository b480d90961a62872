"""ActivationResolver: match rules against prompt text and recent paths."""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable

from skillsense.activation.models import ActivationResult, Decision, MatchedBy
from skillsense.config import DEFAULT_LOOKBACK
from skillsense.deadline import Deadline
from skillsense.errors import MatchEvaluationError
from skillsense.matching import paths
from skillsense.matching.prompts import PromptMatcher, default_matcher
from skillsense.rule_engine.models import Ruleset, SkillRule
from skillsense.session.tracker import FileChangeTracker

logger = logging.getLogger(__name__)

# (rule id, pattern) pairs already reported, so a bad pattern logs once per process
_reported_failures: set[tuple[str, str | None]] = set()


class ActivationResolver:
    def __init__(
        self,
        ruleset: Ruleset,
        tracker: FileChangeTracker | None = None,
        *,
        lookback: int = DEFAULT_LOOKBACK,
        prompt_matcher: PromptMatcher | None = None,
    ) -> None:
        self._ruleset = ruleset
        self._tracker = tracker
        self._lookback = lookback
        self._prompts = prompt_matcher or default_matcher()

    @property
    def ruleset(self) -> Ruleset:
        return self._ruleset

    def resolve(
        self,
        session_id: str,
        prompt_text: str,
        touched_paths: Iterable[str] = (),
        *,
        disabled: Collection[str] = (),
        deadline: Deadline | None = None,
    ) -> ActivationResult:
        """Decide which rules activate for this prompt.

        Candidate paths are the touched paths plus the session's most recent
        edits. Rules that raise during evaluation are skipped. If the deadline
        runs out the result is empty, never a partial block.
        """
        state = self._tracker.state_of(session_id) if self._tracker is not None else None
        recent = state.recent_paths(self._lookback) if state is not None else []
        acknowledged = frozenset(state.acknowledged) if state is not None else frozenset()
        candidates = _candidate_paths((*touched_paths, *recent))

        activated: list[tuple[SkillRule, MatchedBy]] = []
        for rule in self._ruleset.rules:
            if _out_of_time(deadline):
                return ActivationResult.empty()
            if not rule.enabled or rule.id in disabled:
                continue
            try:
                matched_by = self._evaluate(rule, prompt_text, candidates, deadline)
            except MatchEvaluationError as e:
                _report(e)
                continue
            if matched_by is not None:
                activated.append((rule, matched_by))
        if _out_of_time(deadline):
            return ActivationResult.empty()

        activated.sort(key=lambda pair: (pair[0].priority.rank, pair[0].order))
        return ActivationResult.from_decisions(
            [
                Decision(
                    rule_id=rule.id,
                    enforcement=rule.enforcement,
                    priority=rule.priority,
                    matched_by=matched_by,
                    acknowledged=rule.id in acknowledged,
                )
                for rule, matched_by in activated
            ]
        )

    def _evaluate(
        self,
        rule: SkillRule,
        prompt_text: str,
        candidates: list[str],
        deadline: Deadline | None,
    ) -> MatchedBy | None:
        by_path = any(self._path_counts(rule, path) for path in candidates)
        by_prompt = False
        for pattern in rule.prompt_patterns:
            try:
                hit = self._prompts.matches(pattern, prompt_text, deadline=deadline)
            except Exception as e:
                raise MatchEvaluationError(rule.id, pattern, e) from e
            if hit:
                by_prompt = True
                break
        return MatchedBy.from_flags(by_path, by_prompt)

    def _path_counts(self, rule: SkillRule, path: str) -> bool:
        pattern: str | None = None
        try:
            for pattern in rule.path_exclusions:
                if paths.matches(pattern, path):
                    return False
            for pattern in rule.path_patterns:
                if paths.matches(pattern, path):
                    return True
        except Exception as e:
            raise MatchEvaluationError(rule.id, pattern, e) from e
        return False


def _report(error: MatchEvaluationError) -> None:
    key = (error.rule_id, error.pattern)
    if key in _reported_failures:
        return
    _reported_failures.add(key)
    logger.warning(f"Skipping rule: {error}")


def _candidate_paths(raw_paths: Iterable[object]) -> list[str]:
    """Normalized, de-duplicated paths in first-seen order."""
    candidates: list[str] = []
    seen: set[str] = set()
    for path in raw_paths:
        if not isinstance(path, str):
            continue
        path = paths.normalize_path(path)
        if path and path not in seen:
            seen.add(path)
            candidates.append(path)
    return candidates


def _out_of_time(deadline: Deadline | None) -> bool:
    if deadline is None or not deadline.expired():
        return False
    logger.warning(f"Activation deadline of {deadline.budget_ms}ms exceeded; returning no skills")
    return True
