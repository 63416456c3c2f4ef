"""Regex-backed rules used by the default harvester configuration.

Each rule wraps one compiled pattern plus the message reported when it
matches. Rule sets are plain ordered lists of these objects.
"""

from __future__ import annotations

import re
from typing import Optional, Pattern, Tuple, Union

from .base_rule import CleanRule, IgnoreRule


def _compile(pattern: Union[str, Pattern[str]]) -> Pattern[str]:
    if isinstance(pattern, str):
        return re.compile(pattern)
    return pattern


class PatternIgnoreRule(IgnoreRule):
    """Ignore any URL the pattern matches (searched anywhere in the URL)."""

    def __init__(self, pattern: Union[str, Pattern[str]], reason: Optional[str] = None):
        self.pattern = _compile(pattern)
        self.reason = reason or f"Matched Ignore Rule `{self.pattern.pattern}`"

    def evaluate(self, url: str) -> Tuple[bool, str]:
        if self.pattern.search(url or ""):
            return True, self.reason
        return False, ""

    def __repr__(self) -> str:
        return f"PatternIgnoreRule({self.pattern.pattern!r})"


class PatternCleanRule(CleanRule):
    """Remove every query parameter whose name the pattern matches.

    `url_pattern`, when given, restricts the rule to URLs it matches; without
    it the rule applies to all URLs.
    """

    def __init__(
        self,
        pattern: Union[str, Pattern[str]],
        reason: Optional[str] = None,
        url_pattern: Union[str, Pattern[str], None] = None,
    ):
        self.pattern = _compile(pattern)
        self.reason = reason or f"Matched cleaner rule `{self.pattern.pattern}`"
        self.url_pattern = _compile(url_pattern) if url_pattern is not None else None

    def should_clean(self, url: str) -> bool:
        if self.url_pattern is None:
            return True
        return self.url_pattern.search(url or "") is not None

    def should_remove_param(self, param_name: str) -> Tuple[bool, str]:
        if self.pattern.search(param_name or ""):
            return True, self.reason
        return False, ""

    def __repr__(self) -> str:
        return f"PatternCleanRule({self.pattern.pattern!r})"
