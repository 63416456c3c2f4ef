"""Unique keys for harvested resources.

Keys allow a harvested URL to be identified in a database, key value store,
etc.: a collision-free numeric id plus a human readable slug taken from the
page title.

The id is drawn from a linear congruential sequence (the constants come from
Numerical Recipes) seeded with the wall clock and the process id. The caller
decides what "collision" means through an existence callback, usually backed
by the storage that will receive the resource.
"""

from __future__ import annotations

import os
import re
import threading
import time
import unicodedata
from typing import Optional

from content_harvester.core.interfaces import KeyExists, PageInfoLookup
from content_harvester.core.models import HarvestedResource, PageInfo
from content_harvester.core.scraping.page_info import HtmlPageInfoLookup, PageInfoError

DEFAULT_MAX_ATTEMPTS = 10_000
DEFAULT_RESEED_AFTER = 10

ID_BASE = 1_000_000_000
ID_SPAN = 1_000_000_000

SLUG_UNAVAILABLE = "error-getting-page-info"


class RandomSource:
    """Lock protected pseudo-random state shared by key generators."""

    def __init__(self, seed: Optional[int] = None):
        self._lock = threading.Lock()
        self._state = (seed & 0xFFFFFFFF) if seed is not None else 0

    @staticmethod
    def _time_seed() -> int:
        return (time.time_ns() + os.getpid()) & 0xFFFFFFFF

    def reseed(self, seed: Optional[int] = None) -> None:
        with self._lock:
            self._state = (seed if seed is not None else self._time_seed()) & 0xFFFFFFFF

    def next_value(self) -> int:
        """Advance the sequence; always in `[ID_BASE, ID_BASE + ID_SPAN)`."""
        with self._lock:
            r = self._state
            if r == 0:
                r = self._time_seed()
            r = (r * 1664525 + 1013904223) & 0xFFFFFFFF
            self._state = r
        return ID_BASE + r % ID_SPAN


# process-wide source used when a generator is not given its own
DEFAULT_RANDOM_SOURCE = RandomSource()


def slugify(text: str) -> str:
    """Lowercase, ASCII-only, non-alphanumeric runs collapsed to '-'."""
    normalized = unicodedata.normalize("NFKD", text or "")
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii")
    return re.sub(r"[^a-z0-9]+", "-", ascii_text.lower()).strip("-")


class ResourceKeys:
    """Keys for a single harvested resource."""

    def __init__(
        self,
        resource: HarvestedResource,
        unique_id: int,
        page_info: Optional[PageInfo] = None,
        page_info_error: Optional[str] = None,
    ):
        self.resource = resource
        self.unique_id = unique_id
        self.page_info = page_info
        self.page_info_error = page_info_error

    def unique_id_text(self, fmt: str = "{}") -> str:
        return fmt.format(self.unique_id)

    def is_valid(self) -> bool:
        return self.page_info_error is None

    def slug(self) -> str:
        if self.page_info_error is None and self.page_info is not None:
            return slugify(self.page_info.title)
        return SLUG_UNAVAILABLE

    def __repr__(self) -> str:
        return f"ResourceKeys(unique_id={self.unique_id}, valid={self.is_valid()})"


class KeyGenerator:
    """Generate collision-free ids and slugs for harvested resources."""

    def __init__(
        self,
        random_source: RandomSource | None = None,
        page_info_lookup: PageInfoLookup | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        reseed_after: int = DEFAULT_RESEED_AFTER,
    ):
        self.random_source = random_source or DEFAULT_RANDOM_SOURCE
        self.page_info_lookup = page_info_lookup or HtmlPageInfoLookup()
        self.max_attempts = max_attempts
        self.reseed_after = reseed_after

    def generate_unique_id(self, exists: KeyExists) -> int:
        """Return the first candidate `exists(candidate, attempt)` rejects.

        After more than `reseed_after` collisions in a row the sequence is
        reseeded. When every attempt collides one more candidate is returned
        anyway: best effort, the caller's storage is the final judge.
        """
        conflicts = 0
        for attempt in range(self.max_attempts):
            candidate = self.random_source.next_value()
            if not exists(candidate, attempt):
                return candidate

            conflicts += 1
            if conflicts > self.reseed_after:
                self.random_source.reseed()
                conflicts = 0

        return self.random_source.next_value()

    def lookup_page_info(self, resource: HarvestedResource):
        """Return `(page_info, error)` for the resource's final URL."""
        url = resource.final_url or resource.resolved_url
        if not url:
            return None, "resource has no final URL"
        try:
            return self.page_info_lookup(url), None
        except PageInfoError as exc:
            return None, str(exc)

    def create_keys(self, resource: HarvestedResource, exists: KeyExists) -> ResourceKeys:
        unique_id = self.generate_unique_id(exists)
        # TODO reuse the HTML already fetched by the resolver instead of a second GET
        page_info, error = self.lookup_page_info(resource)
        return ResourceKeys(resource, unique_id, page_info, error)
