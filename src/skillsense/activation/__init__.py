"""Activation: resolve which skills apply to a prompt and how strongly."""

from skillsense.activation.models import ActivationResult, Decision, MatchedBy, Verdict
from skillsense.activation.resolver import ActivationResolver

__all__ = [
    "ActivationResolver",
    "ActivationResult",
    "Decision",
    "MatchedBy",
    "Verdict",
]
