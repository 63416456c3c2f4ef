"""ContentHarvester: discovers URLs (called "Resources" from the "R" in "URL")
in a piece of content and resolves each one.

Candidates are deduplicated by their literal text before any fetch, and the
batch keeps discovery order even when candidates are resolved by a thread
pool.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Pattern, Union
from urllib.parse import urljoin

from content_harvester.core.config import HarvestConfig
from content_harvester.core.models import HarvestedResource, HarvestedResources
from content_harvester.core.scraping.discovery import compile_pattern, discover_urls
from content_harvester.core.scraping.fetcher import Fetcher
from content_harvester.core.scraping.resolver import ResourceResolver
from content_harvester.rules import build_clean_rules, build_ignore_rules


class ContentHarvester:
    def __init__(
        self,
        resolver: ResourceResolver | None = None,
        discovery_pattern: Union[str, Pattern[str], None] = None,
        follow_html_redirects: bool = False,
        keep_html_redirect_referrers: bool = False,
        max_html_redirects: int = 1,
        max_workers: int = 1,
    ):
        self.resolver = resolver or ResourceResolver()
        self.discovery_pattern = compile_pattern(discovery_pattern)
        self.follow_html_redirects = follow_html_redirects
        self.keep_html_redirect_referrers = keep_html_redirect_referrers
        self.max_html_redirects = max_html_redirects
        self.max_workers = max_workers

    @classmethod
    def from_config(
        cls, config: HarvestConfig, fetcher: Fetcher | None = None
    ) -> "ContentHarvester":
        fetcher = fetcher or Fetcher(
            timeout=config.request_timeout,
            retries=config.retries,
            backoff_factor=config.backoff_factor,
        )
        resolver = ResourceResolver(
            fetcher=fetcher,
            ignore_rules=build_ignore_rules(config.ignore_patterns),
            clean_rules=build_clean_rules(config.clean_param_patterns),
            default_scheme=config.default_scheme,
        )
        return cls(
            resolver=resolver,
            discovery_pattern=config.discovery_pattern,
            follow_html_redirects=config.follow_html_redirects,
            keep_html_redirect_referrers=config.keep_html_redirect_referrers,
            max_html_redirects=config.max_html_redirects,
            max_workers=config.max_workers,
        )

    def discover(self, text: str) -> List[str]:
        """Unique candidate texts in the order they were first seen."""
        seen = set()
        candidates: List[str] = []
        for url_text in discover_urls(text, self.discovery_pattern):
            if url_text not in seen:
                seen.add(url_text)
                candidates.append(url_text)
        return candidates

    def harvest_resource(self, url_text: str) -> HarvestedResource:
        return self.resolver.resolve(url_text)

    def follow_referrer(self, original: HarvestedResource) -> Optional[HarvestedResource]:
        """Resolve the HTML (meta refresh) redirect target of `original`.

        Returns None when there is no redirect, when the hop limit is reached,
        or when the target already appears in the referral chain.
        """
        detected, target = original.is_html_redirect()
        if not detected or not target:
            return None
        if original.redirect_depth >= self.max_html_redirects:
            return None

        target = target.strip().strip("'\"")
        if original.resolved_url:
            target = urljoin(original.resolved_url, target)

        chain = [original] + original.referral_chain()
        visited = {r.original_url_text for r in chain} | {
            r.resolved_url for r in chain if r.resolved_url
        }
        if target in visited:
            return None

        return self.resolver.resolve(target, referring_resource=original)

    def _harvest_candidate(self, url_text: str) -> List[HarvestedResource]:
        resource = self.harvest_resource(url_text)
        if not self.follow_html_redirects:
            return [resource]

        chain = [resource]
        follow = self.follow_referrer(resource)
        while follow is not None:
            chain.append(follow)
            follow = self.follow_referrer(follow)

        if self.keep_html_redirect_referrers:
            return chain
        return [chain[-1]]

    def harvest_resources(self, text: str) -> HarvestedResources:
        """Discover URLs within `text` and return what was found."""
        result = HarvestedResources(text=text)
        candidates = self.discover(text)

        if self.max_workers > 1 and len(candidates) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                # map() yields in submission order: discovery order is kept
                batches = list(pool.map(self._harvest_candidate, candidates))
        else:
            batches = [self._harvest_candidate(c) for c in candidates]

        for batch in batches:
            result.resources.extend(batch)
        return result
