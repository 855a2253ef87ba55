"""Interfaces of the host CMS integration.

The host (a Drupal apachesolr-style integration) is injected, never looked up
globally. Every integration function is optional; the operation that needs a
missing one raises ``MissingDependency``.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Protocol, runtime_checkable


@runtime_checkable
class CmsQuery(Protocol):
    """Query object produced by the host CMS."""

    def get_solrsort(self) -> Any:
        """Return the sort descriptor (``{"#name", "#direction"}``) or None."""
        raise NotImplementedError

    def get_fq(self) -> Mapping[str, Any] | None:
        """Return filter groups: group id -> value or nested values."""
        raise NotImplementedError


class CmsIntegration(Protocol):
    """Functions supplied by the host CMS."""

    def facet_definitions(self) -> Mapping[str, Mapping[str, Mapping[str, Any]]]:
        """Return ``module -> delta -> definition``; definitions carry ``operator``."""
        raise NotImplementedError

    def build_query(
        self,
        query: str,
        filters: Iterable[str],
        sort: str | None,
        path: str,
        service: Any,
    ) -> CmsQuery:
        """Construct a host query object."""
        raise NotImplementedError

    def query_field_weights(self) -> Mapping[str, float]:
        """Return configured query-field boosts keyed by index field name."""
        raise NotImplementedError
