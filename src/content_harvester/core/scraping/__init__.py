"""Core harvesting primitives exported for reuse across flows.

This package contains small, well-tested building blocks: discovery, Fetcher,
Detector, Parser, Normalizer, Downloader and ResourceResolver. Prefect
task wrappers live in `prefect_tasks` and are imported from there.
"""

from .detector import ResourceType, detect_resource_type, parse_media_type
from .discovery import RELAXED_URL_PATTERN, discover_urls
from .downloader import Downloader
from .fetcher import Fetcher
from .normalizer import clean_url
from .page_info import HtmlPageInfoLookup, PageInfoError, fetch_page_info
from .parser import extract_page_title, find_meta_refresh
from .resolver import ResourceResolver, classify_response

__all__ = [
    "Fetcher",
    "discover_urls",
    "RELAXED_URL_PATTERN",
    "detect_resource_type",
    "parse_media_type",
    "ResourceType",
    "find_meta_refresh",
    "extract_page_title",
    "clean_url",
    "Downloader",
    "HtmlPageInfoLookup",
    "PageInfoError",
    "fetch_page_info",
    "ResourceResolver",
    "classify_response",
]
