"""Render activation results as text for the host agent's context."""

from __future__ import annotations

from skillsense.activation.models import ActivationResult, Decision, Verdict
from skillsense.rule_engine.models import Priority, Ruleset

_RULE = "━" * 40

_LABELS: dict[Priority, str] = {
    Priority.CRITICAL: "CRITICAL SKILLS (REQUIRED):",
    Priority.HIGH: "RECOMMENDED SKILLS:",
    Priority.MEDIUM: "SUGGESTED SKILLS:",
    Priority.LOW: "OPTIONAL SKILLS:",
}


def format_banner(result: ActivationResult, ruleset: Ruleset) -> str:
    """Group activated skills by priority into a banner. Empty for no activations."""
    if result.verdict == Verdict.NONE:
        return ""

    lines: list[str] = ["", _RULE, "SKILL ACTIVATION CHECK", _RULE, ""]
    for priority in Priority:
        group = [d for d in result.decisions if d.priority == priority]
        if not group:
            continue
        lines.append(f"  {_LABELS[priority]}")
        for decision in group:
            lines.append(f"    -> {_describe(decision, ruleset)}")
        lines.append("")

    if result.verdict == Verdict.BLOCK:
        lines.append("  ACTION: Invoke the blocking skills above before continuing")
    else:
        lines.append("  ACTION: Use Skill tool to invoke matched skills")
    lines.append(_RULE)
    lines.append("")
    return "\n".join(lines)


def block_reason(result: ActivationResult, ruleset: Ruleset) -> str:
    """Explain why the result blocks, using each rule's block message when set."""
    parts: list[str] = []
    for decision in result.blocking:
        rule = ruleset.get(decision.rule_id)
        message = rule.block_message if rule is not None else ""
        parts.append(message or f"Skill '{decision.rule_id}' must be used before continuing.")
    return "\n\n".join(parts)


def _describe(decision: Decision, ruleset: Ruleset) -> str:
    text = decision.rule_id
    rule = ruleset.get(decision.rule_id)
    if rule is not None and rule.description:
        text = f"{text}: {rule.description}"
    if decision.blocks:
        text = f"{text} [BLOCKING]"
    return text
