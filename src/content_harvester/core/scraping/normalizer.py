"""URL normalizer utilities.

Functions to clean URLs by removing query parameters selected by clean rules
(tracking params such as `utm_*`).
"""

from __future__ import annotations

from typing import List, Sequence, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from content_harvester.core.models import CleanedParam
from content_harvester.rules.base_rule import CleanRule


def clean_url(url: str, rules: Sequence[CleanRule]) -> Tuple[List[CleanedParam], str]:
    """Strip matching query params from `url`.

    Returns `(cleaned_params, url)`. Every rule that matches a parameter is
    recorded, but the parameter itself is removed once. When nothing matched
    the original `url` is returned untouched.

    The remaining params are re-encoded sorted by name (values of one name keep
    their order), so the output is deterministic but the original param order
    and percent-encoding style are not preserved.
    """
    active = [r for r in rules if r.should_clean(url)]
    if not active:
        return [], url

    p = urlsplit(url)
    pairs = parse_qsl(p.query, keep_blank_values=True)

    cleaned: List[CleanedParam] = []
    removed: set[str] = set()
    seen: set[str] = set()
    for name, _ in pairs:
        if name in seen:
            continue
        seen.add(name)
        for rule in active:
            remove, reason = rule.should_remove_param(name)
            if remove:
                cleaned.append(CleanedParam(name, reason))
                removed.add(name)

    if not cleaned:
        return [], url

    kept = [(k, v) for k, v in pairs if k not in removed]
    kept.sort(key=lambda kv: kv[0])
    query = urlencode(kept, doseq=True)
    return cleaned, urlunsplit((p.scheme, p.netloc, p.path, query, p.fragment))
