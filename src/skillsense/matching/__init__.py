"""Pattern matching for file and prompt triggers."""

from skillsense.matching.paths import validate_glob
from skillsense.matching.prompts import PromptMatcher, is_regex, validate_prompt_pattern

__all__ = [
    "PromptMatcher",
    "is_regex",
    "validate_glob",
    "validate_prompt_pattern",
]
