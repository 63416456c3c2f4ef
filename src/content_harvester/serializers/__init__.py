"""Serializers for harvested batches."""

from content_harvester.core.interfaces import (
    RenderContext,
    ResourceSerializer,
    SerializationError,
)

from .base import serialize_resources
from .records import RecordSerializer, resource_record

__all__ = [
    "RenderContext",
    "ResourceSerializer",
    "SerializationError",
    "serialize_resources",
    "RecordSerializer",
    "resource_record",
]
