"""Default page-metadata lookup used to derive slugs.

Any callable `url -> PageInfo` that raises `PageInfoError` on failure can be
used instead (see `content_harvester.core.interfaces.PageInfoLookup`).
"""

from __future__ import annotations

from content_harvester.core.models import PageInfo
from content_harvester.core.scraping.fetcher import FETCH_ERRORS, Fetcher
from content_harvester.core.scraping.parser import extract_meta_content, extract_page_title


class PageInfoError(RuntimeError):
    """Page metadata could not be retrieved for a URL."""


class HtmlPageInfoLookup:
    """Fetch a page and read its Open Graph / `<title>` metadata."""

    def __init__(self, fetcher: Fetcher | None = None):
        self.fetcher = fetcher or Fetcher()

    def __call__(self, url: str) -> PageInfo:
        try:
            resp = self.fetcher.get(url)
            resp.raise_for_status()
            html = resp.content
        except FETCH_ERRORS as exc:
            raise PageInfoError(f"could not fetch {url}: {exc}") from exc

        title = extract_page_title(html)
        if not title:
            raise PageInfoError(f"no title found at {url}")
        return PageInfo(
            url=url,
            title=title,
            description=extract_meta_content(html, "og:description", "description"),
            site_name=extract_meta_content(html, "og:site_name"),
        )


def fetch_page_info(url: str, fetcher: Fetcher | None = None) -> PageInfo:
    return HtmlPageInfoLookup(fetcher)(url)
