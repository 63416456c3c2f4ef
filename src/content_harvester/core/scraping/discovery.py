"""URL discovery: find candidate links inside free-form text.

The default pattern is relaxed: it accepts anything that carries a scheme
(``https://t`` included, so it can later be reported as malformed) and bare
domain names such as ``t.co/abc`` or ``example.org``. Trailing sentence
punctuation is left out of the match.
"""

from __future__ import annotations

import re
from typing import Iterator, Optional, Pattern, Union

# last character of a match may not be sentence punctuation, a closing bracket
# or typographic punctuation (truncated posts end links with an ellipsis)
_TAIL = r"[^\s<>\"'`]*[^\s<>\"'`.,;:!?)\]}\u2026\u201c\u201d\u2018\u2019\u00ab\u00bb\u203a]"

_SCHEME_URL = r"[a-zA-Z][a-zA-Z0-9+.\-]*://" + _TAIL

_BARE_DOMAIN_URL = (
    r"(?<![\w@.\-])"
    r"(?:[a-zA-Z0-9](?:[a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?\.)+"
    r"[a-zA-Z]{2,24}"
    r"(?::\d{1,5})?"
    r"(?:[/?#](?:" + _TAIL + r")?)?"
    r"(?![\w@\-])"
)

RELAXED_URL_PATTERN: Pattern[str] = re.compile(
    r"(?:" + _SCHEME_URL + r")|(?:" + _BARE_DOMAIN_URL + r")"
)


def compile_pattern(pattern: Union[str, Pattern[str], None]) -> Pattern[str]:
    if pattern is None:
        return RELAXED_URL_PATTERN
    if isinstance(pattern, str):
        return re.compile(pattern)
    return pattern


def discover_urls(
    text: str, pattern: Union[str, Pattern[str], None] = None
) -> Iterator[str]:
    """Yield every URL-like substring of `text`, left to right.

    Matches never overlap. Each call returns a fresh iterator so the scan
    can be restarted at will.
    """
    rx = compile_pattern(pattern)
    for m in rx.finditer(text or ""):
        yield m.group(0)


def has_scheme(url_text: str) -> bool:
    return re.match(r"^[a-zA-Z][a-zA-Z0-9+.\-]*://", url_text or "") is not None


def with_default_scheme(url_text: str, default_scheme: Optional[str]) -> str:
    """Return `url_text` prefixed with `default_scheme` when it has none."""
    if not default_scheme or has_scheme(url_text):
        return url_text
    return f"{default_scheme}://{url_text}"
