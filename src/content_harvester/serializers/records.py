"""Serializer that turns harvested resources into flat records.

Each renderable resource is written to the sink as one JSON line; resources
skipped by the hooks are kept as records too (with their disposition) so the
whole batch can be stored as a table.
"""

from __future__ import annotations

import io
import json
from typing import Any, Dict, List, Optional, TextIO

import pandas as pd

from content_harvester.core.interfaces import KeyExists, RenderContext, ResourceSerializer
from content_harvester.core.keys import KeyGenerator, ResourceKeys
from content_harvester.core.models import HarvestedResource
from content_harvester.core.scraping.detector import detect_resource_type


def _never_exists(candidate: int, attempt: int) -> bool:
    return False


def resource_record(resource: HarvestedResource) -> Dict[str, Any]:
    """Flat, JSON-friendly view of a harvested resource."""
    content = resource.content
    downloaded = content.downloaded if content is not None else None
    referrer = resource.referring_resource
    resource_type = None
    if content is not None:
        extension = downloaded.extension if downloaded is not None else None
        resource_type = detect_resource_type(content.media_type, extension).value
    return {
        "original_url": resource.original_url_text,
        "disposition": resource.disposition(),
        "harvested_at": resource.harvested_at.isoformat(),
        "url_valid": resource.url_valid,
        "destination_valid": resource.destination_valid,
        "http_status_code": resource.http_status_code,
        "ignored": resource.ignored,
        "ignore_reason": resource.ignore_reason,
        "cleaned": resource.cleaned,
        "cleaned_params": [p.name for p in resource.cleaned_params],
        "resolved_url": resource.resolved_url,
        "cleaned_url": resource.cleaned_url,
        "final_url": resource.final_url,
        "html_redirect_target": resource.html_redirect_target,
        "referred_by": referrer.original_url_text if referrer is not None else None,
        "media_type": content.media_type if content is not None else None,
        "resource_type": resource_type,
        "content_valid": content.is_valid() if content is not None else None,
        "downloaded_path": downloaded.dest_path if downloaded is not None else None,
        "file_extension": downloaded.extension if downloaded is not None else None,
        "sha256": downloaded.sha256 if downloaded is not None else None,
    }


class RecordSerializer(ResourceSerializer):
    """Write JSON lines into `sink` and collect every record in memory."""

    def __init__(
        self,
        key_generator: KeyGenerator | None = None,
        exists: Optional[KeyExists] = None,
        sink: Optional[TextIO] = None,
        params: Optional[Dict[str, Any]] = None,
    ):
        self.key_generator = key_generator or KeyGenerator()
        self.exists = exists or _never_exists
        self.sink = sink if sink is not None else io.StringIO()
        self.params = params or {}
        self.records: List[Dict[str, Any]] = []

    def _skip(self, resource: HarvestedResource) -> None:
        self.records.append(resource_record(resource))

    handle_invalid_url = _skip
    handle_invalid_destination = _skip
    handle_ignored = _skip

    def create_keys(self, resource: HarvestedResource) -> ResourceKeys:
        return self.key_generator.create_keys(resource, self.exists)

    def template_params(self, keys: ResourceKeys) -> Dict[str, Any]:
        return dict(self.params)

    def writer(self, keys: ResourceKeys) -> TextIO:
        return self.sink

    def render(self, context: RenderContext, sink: TextIO) -> None:
        record = resource_record(context.resource)
        record.update(
            {
                "unique_id": context.keys.unique_id,
                "slug": context.keys.slug(),
                "keys_valid": context.keys.is_valid(),
                "batch_harvested_at": context.harvested_at.isoformat(),
            }
        )
        record.update(context.params)
        sink.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")
        self.records.append(record)

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(self.records)
