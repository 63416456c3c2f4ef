"""Drive a `ResourceSerializer` over a harvested batch."""

from __future__ import annotations

from content_harvester.core.interfaces import (
    RenderContext,
    ResourceSerializer,
    SerializationError,
)
from content_harvester.core.models import HarvestedResources


def serialize_resources(
    harvested: HarvestedResources, serializer: ResourceSerializer
) -> None:
    """Offer each resource, in order, to the hook matching its disposition.

    Invalid URLs, invalid destinations and ignored resources go to their
    `handle_*` hook; everything else is rendered. The first render failure
    stops the batch and is raised as `SerializationError`.
    """
    for resource in harvested.resources:
        url_valid, destination_valid = resource.is_valid()
        if not url_valid:
            serializer.handle_invalid_url(resource)
            continue
        if not destination_valid:
            serializer.handle_invalid_destination(resource)
            continue
        if resource.ignored:
            serializer.handle_ignored(resource)
            continue

        try:
            keys = serializer.create_keys(resource)
            context = RenderContext(
                text=harvested.text,
                resource=resource,
                harvested_at=harvested.harvested_at,
                is_cleaned=resource.cleaned,
                final_url=resource.final_url,
                resolved_url=resource.resolved_url,
                cleaned_url=resource.cleaned_url,
                keys=keys,
                params=dict(serializer.template_params(keys) or {}),
            )
            serializer.render(context, serializer.writer(keys))
        except Exception as exc:
            raise SerializationError(resource, exc) from exc
