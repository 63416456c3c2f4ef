"""Abstract rule (plugin) interfaces consulted by the resolver.

Rules are small, pure predicates. An `IgnoreRule` decides whether a resolved
destination should be skipped; a `CleanRule` decides which query parameters
should be stripped from it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Tuple


class IgnoreRule(ABC):
    """Decide whether a resolved URL is excluded from further processing."""

    @abstractmethod
    def evaluate(self, url: str) -> Tuple[bool, str]:
        """Return `(ignore, reason)` for the resolved (post-redirect) URL."""
        raise NotImplementedError()


class CleanRule(ABC):
    """Decide which query parameters are removed from a resolved URL."""

    def should_clean(self, url: str) -> bool:
        """Coarse gate: default behavior is to try cleaning every URL."""
        return True

    @abstractmethod
    def should_remove_param(self, param_name: str) -> Tuple[bool, str]:
        """Return `(remove, reason)` for a single query parameter name."""
        raise NotImplementedError()
