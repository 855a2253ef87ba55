"""Parameter model and chainable query builder."""

from __future__ import annotations

from SolrQuery.core.errors import InvalidArgument, MissingDependency, SolrQueryError
from SolrQuery.core.models import DEFAULT_RETRIEVE_FIELDS, FilterGroup, QueryParser, SortSpec
from SolrQuery.core.params import ParameterStore
from SolrQuery.core.query import Query, solr_query

__all__ = [
    "DEFAULT_RETRIEVE_FIELDS",
    "FilterGroup",
    "InvalidArgument",
    "MissingDependency",
    "ParameterStore",
    "Query",
    "QueryParser",
    "SolrQueryError",
    "SortSpec",
    "solr_query",
]
