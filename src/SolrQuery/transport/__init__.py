"""Search transports for SolrQuery.

The builder only needs an object with ``search(query, offset, limit, params)``;
``SolrHttpService`` is the bundled HTTP implementation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Mapping, Protocol

from SolrQuery.transport.client import SolrHttpService

if TYPE_CHECKING:
    from SolrQuery.config import SolrConfig


class SearchService(Protocol):
    """Protocol for the collaborator that executes a search request."""

    def search(self, query: str, offset: int, limit: int, params: Mapping[str, Any]) -> Any:
        """Execute the request and return the raw response."""
        raise NotImplementedError


def create_service(config: SolrConfig) -> SolrHttpService:
    """Create an HTTP service for the configured Solr core.

    Args:
        config: Solr connection settings.

    Returns:
        Configured SolrHttpService instance.
    """
    return SolrHttpService(
        config.url,
        timeout=config.timeout,
        max_attempts=config.max_attempts,
    )


def service_factory(config: SolrConfig) -> Callable[[], SolrHttpService]:
    """Return a zero-argument factory, as expected by ``Query(service_factory=...)``."""
    return lambda: create_service(config)


__all__ = [
    "SearchService",
    "SolrHttpService",
    "create_service",
    "service_factory",
]
