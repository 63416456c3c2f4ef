from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, TextIO

from content_harvester.core.models import HarvestedResource, PageInfo

if TYPE_CHECKING:  # pragma: no cover - typing only
    from content_harvester.core.keys import ResourceKeys

# existence check supplied by the caller: (candidate, attempt) -> already taken?
KeyExists = Callable[[int, int], bool]

# page metadata lookup: url -> PageInfo, raising PageInfoError on failure
PageInfoLookup = Callable[[str], PageInfo]


class SerializationError(RuntimeError):
    """Rendering a harvested resource failed; the rest of the batch was skipped."""

    def __init__(self, resource: HarvestedResource, cause: BaseException):
        super().__init__(
            f"failed to render {resource.original_url_text!r}: {cause}"
        )
        self.resource = resource


@dataclass
class RenderContext:
    """Everything a serializer needs to render one harvested resource."""

    text: str
    resource: HarvestedResource
    harvested_at: datetime
    is_cleaned: bool
    final_url: Optional[str]
    resolved_url: Optional[str]
    cleaned_url: Optional[str]
    keys: "ResourceKeys"
    params: Dict[str, Any] = field(default_factory=dict)


class ResourceSerializer(ABC):
    """
    Interface (Contrato) que todo Serializer deve seguir.

    Each resource of a batch is offered to exactly one of the `handle_*`
    hooks or, when it was harvested successfully, to `render`. The hooks
    default to no-ops.
    """

    def handle_invalid_url(self, resource: HarvestedResource) -> None:
        return None

    def handle_invalid_destination(self, resource: HarvestedResource) -> None:
        return None

    def handle_ignored(self, resource: HarvestedResource) -> None:
        return None

    @abstractmethod
    def create_keys(self, resource: HarvestedResource) -> "ResourceKeys":
        """Return the unique key / slug object for a renderable resource."""
        raise NotImplementedError()

    def template_params(self, keys: "ResourceKeys") -> Dict[str, Any]:
        return {}

    @abstractmethod
    def writer(self, keys: "ResourceKeys") -> TextIO:
        """Return the sink the rendered resource is written to."""
        raise NotImplementedError()

    @abstractmethod
    def render(self, context: RenderContext, sink: TextIO) -> None:
        """Write `context` into `sink`; any exception aborts the batch."""
        raise NotImplementedError()
