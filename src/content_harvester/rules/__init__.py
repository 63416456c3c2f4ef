"""Rule registry: default ignore/clean rule sets and builders from config.

The defaults skip link-shortener landing pages and social status pages
(shortened links are judged by their destination) and strip `utm_*`
tracking parameters.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from .base_rule import CleanRule, IgnoreRule
from .pattern_rules import PatternCleanRule, PatternIgnoreRule

DEFAULT_IGNORE_PATTERNS: Tuple[str, ...] = (
    r"^https://twitter.com/(.*?)/status/(.*)$",
    r"^https://(www\.)?x\.com/(.*?)/status/(.*)$",
    r"https://t.co",
)

DEFAULT_CLEAN_PARAM_PATTERNS: Tuple[str, ...] = (r"^utm_",)


def build_ignore_rules(patterns: Iterable[str] | None = None) -> List[IgnoreRule]:
    source = DEFAULT_IGNORE_PATTERNS if patterns is None else patterns
    return [PatternIgnoreRule(p) for p in source]


def build_clean_rules(patterns: Iterable[str] | None = None) -> List[CleanRule]:
    source = DEFAULT_CLEAN_PARAM_PATTERNS if patterns is None else patterns
    return [PatternCleanRule(p) for p in source]


def first_ignore_match(rules: Sequence[IgnoreRule], url: str) -> Tuple[bool, str]:
    """Evaluate rules in order; the first match decides."""
    for rule in rules:
        ignore, reason = rule.evaluate(url)
        if ignore:
            return True, reason
    return False, ""


__all__ = [
    "IgnoreRule",
    "CleanRule",
    "PatternIgnoreRule",
    "PatternCleanRule",
    "DEFAULT_IGNORE_PATTERNS",
    "DEFAULT_CLEAN_PARAM_PATTERNS",
    "build_ignore_rules",
    "build_clean_rules",
    "first_ignore_match",
]
