"""Resolve a discovered URL into a `HarvestedResource`.

One GET per candidate: transport redirects are followed by the fetcher, the
resolved destination is checked against the ignore rules, cleaned with the
clean rules, and its content is classified. Stages after the fetch only
record errors on the resource; they never fail the resolution.
"""

from __future__ import annotations

from typing import Optional, Sequence

import requests

from content_harvester.core.models import HarvestedResource, ResourceContent
from content_harvester.core.scraping.detector import MediaTypeParamError, parse_media_type
from content_harvester.core.scraping.discovery import with_default_scheme
from content_harvester.core.scraping.downloader import Downloader
from content_harvester.core.scraping.fetcher import FETCH_ERRORS, Fetcher
from content_harvester.core.scraping.normalizer import clean_url
from content_harvester.core.scraping.parser import find_meta_refresh
from content_harvester.rules import build_clean_rules, build_ignore_rules, first_ignore_match
from content_harvester.rules.base_rule import CleanRule, IgnoreRule


def classify_response(url: str, resp, downloader: Downloader) -> ResourceContent:
    """Classify `resp` by its `Content-Type`, downloading anything not HTML.

    A missing or malformed header counts as "not HTML": the body is
    downloaded so its type can be sniffed from the bytes. A header whose type
    parsed but whose parameters did not keeps that type.
    """
    content_type = resp.headers.get("Content-Type") or ""
    content = ResourceContent(url=url, content_type=content_type)
    try:
        content.media_type, content.media_type_params = parse_media_type(content_type)
    except MediaTypeParamError as exc:
        content.media_type = exc.media_type
        content.media_type_error = str(exc)
    except ValueError as exc:
        content.media_type_error = str(exc)

    if content.is_html():
        return content

    content.downloaded = downloader.save_response(url, resp)
    return content


class ResourceResolver:
    """Fetch, validate, filter and clean a single candidate URL."""

    def __init__(
        self,
        fetcher: Fetcher | None = None,
        ignore_rules: Optional[Sequence[IgnoreRule]] = None,
        clean_rules: Optional[Sequence[CleanRule]] = None,
        downloader: Downloader | None = None,
        default_scheme: Optional[str] = "http",
    ):
        self.fetcher = fetcher or Fetcher()
        self.ignore_rules = list(ignore_rules) if ignore_rules is not None else build_ignore_rules()
        self.clean_rules = list(clean_rules) if clean_rules is not None else build_clean_rules()
        self.downloader = downloader or Downloader(fetcher=self.fetcher)
        self.default_scheme = default_scheme

    def resolve(
        self, url_text: str, referring_resource: HarvestedResource | None = None
    ) -> HarvestedResource:
        result = HarvestedResource(original_url_text=url_text)
        if referring_resource is not None:
            result.referring_resource = referring_resource
            result.redirect_depth = referring_resource.redirect_depth + 1

        try:
            resp = self.fetcher.stream_get(with_default_scheme(url_text, self.default_scheme))
        except FETCH_ERRORS:
            result.url_valid = False
            result.destination_valid = False
            result.ignored = True
            result.ignore_reason = f"Invalid URL '{url_text}'"
            return result

        try:
            return self._inspect(result, resp)
        finally:
            resp.close()

    def _inspect(self, result: HarvestedResource, resp) -> HarvestedResource:
        result.url_valid = True
        result.http_status_code = resp.status_code
        if resp.status_code != 200:
            result.destination_valid = False
            result.ignored = True
            result.ignore_reason = f"Invalid HTTP Status Code {resp.status_code}"
            return result

        result.resolved_url = resp.url
        result.final_url = resp.url
        # shortened URLs are judged by their destination, never by the candidate text
        ignore, reason = first_ignore_match(self.ignore_rules, result.resolved_url)
        if ignore:
            result.destination_valid = True
            result.ignored = True
            result.ignore_reason = reason
            return result

        result.ignored = False
        result.destination_valid = True
        cleaned_params, cleaned_url = clean_url(result.resolved_url, self.clean_rules)
        if cleaned_params:
            result.cleaned = True
            result.cleaned_params = cleaned_params
            result.cleaned_url = cleaned_url
            result.final_url = cleaned_url
        else:
            result.cleaned = False

        result.content = classify_response(result.final_url, resp, self.downloader)
        if result.content.is_html():
            self._detect_html_redirect(result, resp)
        return result

    def _detect_html_redirect(self, result: HarvestedResource, resp) -> None:
        try:
            body = resp.content
        except (OSError, requests.RequestException) as exc:
            result.html_parse_error = str(exc)
            return
        try:
            detected, target = find_meta_refresh(body)
        except Exception as exc:  # bs4 parser failures are reported, not raised
            result.html_parse_error = str(exc)
            return
        result.html_redirect_detected = detected
        result.html_redirect_target = target
