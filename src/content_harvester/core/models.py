"""Data models for the harvesting pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Dict, List, NamedTuple, Optional, Tuple

if TYPE_CHECKING:  # pragma: no cover - typing only
    from content_harvester.serializers.base import ResourceSerializer


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CleanedParam(NamedTuple):
    """A query parameter removed from a URL and the rule that removed it."""

    name: str
    reason: str


class FileType(NamedTuple):
    """File type detected from the leading bytes of downloaded content."""

    extension: str
    mime: str


@dataclass
class DownloadedContent:
    """Content that was downloaded to a temporary file for inspection.

    The file at `dest_path` belongs to this object; use `delete()` to dispose
    of it.
    """

    url: str
    dest_path: Optional[str] = None
    download_error: Optional[str] = None
    file_type_error: Optional[str] = None
    file_type: Optional[FileType] = None
    sha256: Optional[str] = None
    size: int = 0

    @property
    def extension(self) -> Optional[str]:
        return self.file_type.extension if self.file_type else None

    def delete(self) -> None:
        """Remove the downloaded file (no-op when nothing is on disk)."""
        if self.dest_path and os.path.exists(self.dest_path):
            os.remove(self.dest_path)


@dataclass
class ResourceContent:
    """The kind of content found at a resolved destination."""

    url: str
    content_type: str = ""
    media_type: str = ""
    media_type_params: Dict[str, str] = field(default_factory=dict)
    media_type_error: Optional[str] = None
    downloaded: Optional[DownloadedContent] = None

    def is_valid(self) -> bool:
        if self.media_type_error is not None:
            return False
        if self.downloaded is not None:
            if self.downloaded.download_error is not None:
                return False
            if self.downloaded.file_type_error is not None:
                return False
        return True

    def is_html(self) -> bool:
        return self.media_type == "text/html"

    def was_downloaded(self) -> bool:
        return self.downloaded is not None


@dataclass
class HarvestedResource:
    """A single URL discovered in content and everything learned about it.

    Discovered URLs are validated, follow their redirects, and may have query
    parameters "cleaned". `referring_resource` is only set when this resource
    came from an HTML (meta refresh) redirect; it points back at the resource
    that asked for the redirect and is never owned by this one.
    """

    original_url_text: str
    harvested_at: datetime = field(default_factory=utcnow)
    url_valid: bool = False
    destination_valid: bool = False
    http_status_code: Optional[int] = None
    ignored: bool = False
    ignore_reason: str = ""
    cleaned: bool = False
    cleaned_params: List[CleanedParam] = field(default_factory=list)
    resolved_url: Optional[str] = None
    cleaned_url: Optional[str] = None
    final_url: Optional[str] = None
    html_redirect_detected: bool = False
    html_redirect_target: Optional[str] = None
    html_parse_error: Optional[str] = None
    referring_resource: Optional["HarvestedResource"] = field(
        default=None, repr=False, compare=False
    )
    redirect_depth: int = 0
    content: Optional[ResourceContent] = None

    def is_valid(self) -> Tuple[bool, bool]:
        """(URL was fetchable, destination answered with 200)."""
        return self.url_valid, self.destination_valid

    def is_ignored(self) -> Tuple[bool, str]:
        return self.ignored, self.ignore_reason

    def is_cleaned(self) -> Tuple[bool, Optional[str]]:
        return self.cleaned, self.cleaned_url

    def get_urls(self) -> Tuple[Optional[str], Optional[str], Optional[str]]:
        """Final (most useful), originally resolved, and cleaned URLs."""
        return self.final_url, self.resolved_url, self.cleaned_url

    def is_html_redirect(self) -> Tuple[bool, Optional[str]]:
        return self.html_redirect_detected, self.html_redirect_target

    def referral_chain(self) -> List["HarvestedResource"]:
        """Resources that led here through HTML redirects, nearest first."""
        chain: List[HarvestedResource] = []
        current = self.referring_resource
        while current is not None:
            chain.append(current)
            current = current.referring_resource
        return chain

    def disposition(self) -> str:
        if not self.url_valid:
            return "invalid_url"
        if not self.destination_valid:
            return "invalid_destination"
        if self.ignored:
            return "ignored"
        return "harvested"


@dataclass
class PageInfo:
    """Page metadata returned by a page-info lookup."""

    url: str
    title: str
    description: str = ""
    site_name: str = ""


@dataclass
class HarvestedResources:
    """The list of URLs discovered in a piece of content."""

    text: str
    resources: List[HarvestedResource] = field(default_factory=list)
    harvested_at: datetime = field(default_factory=utcnow)

    def __len__(self) -> int:
        return len(self.resources)

    def __iter__(self):
        return iter(self.resources)

    def serialize(self, serializer: "ResourceSerializer") -> None:
        """Offer every resource to `serializer`, in order.

        Render failures stop the batch and are raised as `SerializationError`.
        """
        from content_harvester.serializers.base import serialize_resources

        serialize_resources(self, serializer)
