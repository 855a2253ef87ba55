"""SolrQuery: a chaining API for Apache Solr searches.

Example::

    from SolrQuery import solr_query

    results = solr_query("blue smurf", service).set_limit(20).highlight().execute()
"""

from __future__ import annotations

from SolrQuery.core import (
    InvalidArgument,
    MissingDependency,
    ParameterStore,
    Query,
    QueryParser,
    SolrQueryError,
    SortSpec,
    solr_query,
)

__version__ = "0.1.0"

__all__ = [
    "InvalidArgument",
    "MissingDependency",
    "ParameterStore",
    "Query",
    "QueryParser",
    "SolrQueryError",
    "SortSpec",
    "solr_query",
]
