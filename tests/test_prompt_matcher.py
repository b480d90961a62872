"""Tests for matching/prompts.py: keyword and regex prompt triggers."""

from __future__ import annotations

import logging
import time

import pytest

from skillsense.deadline import Deadline
from skillsense.matching.prompts import (
    PromptMatcher,
    as_regex,
    is_regex,
    matches,
    validate_prompt_pattern,
)


class TestKeywords:
    def test_case_insensitive_substring(self):
        assert matches("Drag and Drop", "add drag and drop reordering") is True

    def test_keyword_absent(self):
        assert matches("drag and drop", "what time is it") is False

    def test_keyword_inside_word(self):
        assert matches("route", "add some routes") is True

    def test_empty_text(self):
        assert matches("route", "") is False


class TestRegex:
    def test_is_regex(self):
        assert is_regex("re:foo") is True
        assert is_regex("foo") is False

    def test_as_regex_marks_pattern(self):
        assert as_regex("(a|b)") == "re:(a|b)"

    def test_regex_search_ignores_case(self):
        assert matches("re:(create|add).*?route", "Please ADD a new Route") is True

    def test_regex_no_match(self):
        assert matches("re:^deploy", "please deploy") is False

    def test_word_boundary(self):
        assert matches(r"re:\bmui\b", "switch to MUI v7") is True
        assert matches(r"re:\bmui\b", "ermuine") is False


class TestCompileCache:
    def test_regex_compiled_once(self):
        matcher = PromptMatcher()
        assert matcher.matches("re:foo+", "fooo") is True
        first = matcher._compiled["re:foo+"]
        assert matcher.matches("re:foo+", "bar") is False
        assert matcher._compiled["re:foo+"] is first

    def test_keywords_not_cached(self):
        matcher = PromptMatcher()
        matcher.matches("foo", "foo")
        assert matcher.is_cached("foo") is False


class TestMalformedRegex:
    def test_malformed_regex_is_non_match(self):
        matcher = PromptMatcher()
        assert matcher.matches("re:([", "anything ([") is False

    def test_malformed_regex_logged_once(self, caplog: pytest.LogCaptureFixture):
        matcher = PromptMatcher()
        with caplog.at_level(logging.WARNING, logger="skillsense.matching.prompts"):
            matcher.matches("re:(unclosed", "text")
            matcher.matches("re:(unclosed", "more text")
            matcher.matches("re:(unclosed", "even more")
        records = [r for r in caplog.records if "(unclosed" in r.getMessage()]
        assert len(records) == 1


class TestValidatePromptPattern:
    def test_accepts_keyword(self):
        validate_prompt_pattern("drag and drop")

    def test_accepts_regex(self):
        validate_prompt_pattern("re:(create|add).*?route")

    def test_rejects_bad_regex(self):
        with pytest.raises(ValueError, match="Invalid regex"):
            validate_prompt_pattern("re:(")

    def test_rejects_empty_regex(self):
        with pytest.raises(ValueError):
            validate_prompt_pattern("re:")

    def test_rejects_blank_keyword(self):
        with pytest.raises(ValueError):
            validate_prompt_pattern("  ")

    def test_rejects_non_string(self):
        with pytest.raises(ValueError):
            validate_prompt_pattern(["list"])


class TestDeadline:
    def test_expired_deadline_stops_regex(self):
        with pytest.raises(TimeoutError):
            PromptMatcher().matches("re:a+", "aaa", deadline=Deadline(0))

    def test_keywords_ignore_deadline(self):
        assert PromptMatcher().matches("aaa", "aaa", deadline=Deadline(0)) is True

    def test_unbounded_deadline(self):
        assert PromptMatcher().matches("re:a+", "aaa", deadline=Deadline.never()) is True

    def test_catastrophic_regex_is_bounded(self):
        matcher = PromptMatcher()
        start = time.monotonic()
        try:
            hit = matcher.matches("re:^(a+)+$", "a" * 30 + "!", deadline=Deadline(200))
        except TimeoutError:
            hit = False
        assert hit is False
        assert time.monotonic() - start < 2.0
