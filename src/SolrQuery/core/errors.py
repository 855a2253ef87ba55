"""Exception types raised by the query builder and CMS adapter."""

from __future__ import annotations


class SolrQueryError(Exception):
    """Base class for errors raised by SolrQuery itself.

    Errors coming from the search transport are not wrapped.
    """


class InvalidArgument(SolrQueryError, TypeError):
    """A mutator received a value of an unsupported shape."""


class MissingDependency(SolrQueryError, RuntimeError):
    """A host integration function or service capability is not available."""
