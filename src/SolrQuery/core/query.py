"""Chainable Solr query builder.

Every aspect of a request, from the query string to the number of results and
everything in between, is controlled through ``Query``. Setters return the
builder so calls can be chained; getters are read-only properties::

    results = (
        Query("digital camera", service)
        .use_query_parser(QueryParser.DISMAX)
        .set_limit(20)
        .set_boost_queries("sticky:true^5.0")
        .set_query_fields("title^5.0 body^20.0")
        .set_retrieve_fields(["title", "body"])
        .highlight()
        .spellcheck()
        .set_sort("title asc")
        .execute()
    )

Sub-queries are part of the query text itself (``_query_:"{!dismax}kodak"``,
local params such as ``{!lucene df=title}``); the builder does not model them.

The query parser defaults to ``lucene`` regardless of the server's own
``defType`` so that queries behave the same against any core.
"""

from __future__ import annotations

import html
from typing import TYPE_CHECKING, Any, Callable, Mapping, Sequence, Union

from SolrQuery.cms.adapter import ExternalQueryAdapter
from SolrQuery.cms.protocols import CmsIntegration, CmsQuery
from SolrQuery.core import params as keys
from SolrQuery.core.errors import InvalidArgument, MissingDependency
from SolrQuery.core.models import DEFAULT_RETRIEVE_FIELDS, QueryParser, SortSpec
from SolrQuery.core.params import Param, ParameterStore, as_list, flag
from SolrQuery.utils.log import get_logger

if TYPE_CHECKING:
    from SolrQuery.transport import SearchService

log = get_logger("query")

SortValue = Union[str, SortSpec, Mapping[str, str]]

# Body is the only normed field, so its boost is scaled up to compete.
_NORMED_FIELD_BOOST = {"body": 40.0}


def default_params() -> dict[str, Param]:
    """Parameters installed on every new builder.

    Highlighting, spellcheck, faceting and more-like-this are off for speed;
    each can be turned on through the builder.
    """
    return {
        keys.RETRIEVE_FIELDS: DEFAULT_RETRIEVE_FIELDS,
        keys.HIGHLIGHT: "false",
        keys.SPELLCHECK: "false",
        keys.FACET: "false",
        keys.MORE_LIKE_THIS: "false",
        keys.QUERY_PARSER: QueryParser.LUCENE,
    }


class Query:
    """A Solr search under construction.

    Args:
        query: Query text, or a CMS query object to import.
        service: Search transport. When None, ``service_factory`` is asked.
        service_factory: Zero-argument callable returning a default service.
        integration: Host CMS integration used for import/export.

    Raises:
        InvalidArgument: If ``query`` is neither a string nor a CMS query object.
    """

    def __init__(
        self,
        query: str | CmsQuery | None = "",
        service: SearchService | None = None,
        *,
        service_factory: Callable[[], SearchService] | None = None,
        integration: CmsIntegration | None = None,
    ) -> None:
        if service is None and service_factory is not None:
            service = service_factory()
        self._service = service
        self._adapter = ExternalQueryAdapter(integration)
        self._query = ""
        self._offset = 0
        self._limit = 10
        self._base_path = ""
        self._parser_explicit = False
        self._params = ParameterStore(default_params())
        if query is not None:
            self.set_query(query)

    def __repr__(self) -> str:
        return f"Query(query={self._query!r}, offset={self._offset}, limit={self._limit}, params={self._params!r})"

    # -- query text and parser -------------------------------------------------

    @property
    def query_text(self) -> str:
        return self._query

    def set_query(self, value: str | CmsQuery) -> Query:
        """Replace the query text, or import a CMS query object.

        Raises:
            InvalidArgument: If value is neither a string nor a CMS query object.
        """
        if isinstance(value, str):
            self._query = value
            return self
        if isinstance(value, CmsQuery):
            self._import(value)
            return self
        raise InvalidArgument(f"Query must be a string or a CMS query object, got {type(value).__name__}")

    @property
    def query_parser(self) -> str | None:
        return self._params.get(keys.QUERY_PARSER)

    def use_query_parser(self, name: str) -> Query:
        """Select the query parser (``defType``).

        Names are not validated; see ``QueryParser`` for the bundled ones.
        """
        self._params.set(keys.QUERY_PARSER, str(name))
        self._parser_explicit = True
        return self

    def is_using_lucene(self) -> bool:
        """True only when the Lucene parser was selected explicitly."""
        return self._parser_explicit and self.query_parser == QueryParser.LUCENE

    def is_using_dismax(self) -> bool:
        """True only when the DisMax parser was selected explicitly."""
        return self._parser_explicit and self.query_parser == QueryParser.DISMAX

    # -- filters and sort ------------------------------------------------------

    @property
    def filters(self) -> list[str] | None:
        return self._params.get(keys.FILTERS)

    def set_filters(self, value: str | Sequence[str]) -> Query:
        """Replace all filter queries (``fq``)."""
        self._params.set_list(keys.FILTERS, value)
        return self

    def merge_filters(self, value: str | Sequence[str]) -> Query:
        """Append filter queries; existing filters are kept, duplicates too."""
        self._params.extend(keys.FILTERS, value)
        return self

    @property
    def sort(self) -> str | None:
        return self._params.get(keys.SORT)

    def set_sort(self, value: SortValue) -> Query:
        """Set the sort, as ``"title asc"`` or a ``SortSpec``/descriptor mapping."""
        if isinstance(value, str):
            self._params.set(keys.SORT, value)
            return self
        spec = SortSpec.from_descriptor(value)
        if spec is None:
            raise InvalidArgument(f"Unsupported sort value: {value!r}")
        self._params.set(keys.SORT, spec.render())
        return self

    def clear_sort(self) -> Query:
        self._params.remove(keys.SORT)
        return self

    # -- highlighting ----------------------------------------------------------

    def highlight(
        self,
        fragment_size: int | None = None,
        markup_pre: str | None = None,
        markup_post: str | None = None,
        snippets: int | None = 1,
        fields: str | Sequence[str] | None = None,
    ) -> Query:
        """Turn on highlighting.

        Sub-options left as None keep whatever value was set before.

        Args:
            fragment_size: Characters per snippet (``hl.fragsize``).
            markup_pre: Markup inserted before a match (``hl.simple.pre``).
            markup_post: Markup inserted after a match (``hl.simple.post``).
            snippets: Snippets per field (``hl.snippets``).
            fields: Fields to highlight (``hl.fl``).
        """
        cluster: dict[str, Any] = {
            "hl.fragsize": fragment_size,
            "hl.snippets": snippets,
            "hl.fl": None if fields is None else ",".join(as_list(fields, sep=",")),
            "hl.simple.pre": markup_pre,
            "hl.simple.post": markup_post,
        }
        self._params.set(keys.HIGHLIGHT, "true")
        for key, value in cluster.items():
            if value is not None:
                self._params.set(key, value)
        return self

    def clear_highlight(self) -> Query:
        """Turn highlighting off. The ``hl.*`` sub-options stay in place."""
        self._params.set(keys.HIGHLIGHT, "false")
        return self

    # -- faceting --------------------------------------------------------------

    def facet(
        self,
        min_count: int = 0,
        sort: bool | str = True,
        limit: int = 100,
        offset: int = 0,
    ) -> Query:
        """Turn on faceting.

        Args:
            min_count: Minimum count for a facet value to be returned.
            sort: True/False for count ordering, or a raw ``facet.sort`` value
                such as ``"count"`` or ``"index"``.
            limit: Maximum facet values per field.
            offset: Offset into the facet value list.
        """
        self._params.set(keys.FACET, "true")
        self._params.set("facet.limit", limit)
        self._params.set("facet.offset", offset)
        self._params.set("facet.mincount", min_count)
        if isinstance(sort, str):
            self._params.set("facet.sort", sort)
        else:
            self._params.set("facet.sort", flag(bool(sort)))
        return self

    def facet_date_fields(
        self,
        fields: str | Sequence[str] | None = None,
        start: str | None = None,
        end: str | None = None,
        interval: str | None = None,
        other: str | None = None,
        hard_end: bool | str | None = None,
    ) -> Any:
        """Read or write the date faceting settings.

        Called with every argument None, returns the current ``facet.date``
        value. Any argument present, even an empty one, writes all six
        ``facet.date*`` keys and returns the builder.

        Args:
            fields: Date fields to facet on.
            start: Lower bound, e.g. ``NOW/DAY-1YEAR``.
            end: Upper bound, e.g. ``NOW/DAY+1DAY``.
            interval: Bucket size (``facet.date.gap``), e.g. ``+1MONTH``.
            other: Extra buckets (``before``, ``after``, ``between``, ``all``).
            hard_end: Whether the last bucket is truncated at ``end``.
        """
        args = (fields, start, end, interval, other, hard_end)
        if all(arg is None for arg in args):
            return self._params.get(keys.FACET_DATE)

        if isinstance(hard_end, bool):
            hard_end = flag(hard_end)
        self._params.set(keys.FACET_DATE, fields if isinstance(fields, str) or fields is None else list(fields))
        self._params.set("facet.date.start", start)
        self._params.set("facet.date.end", end)
        self._params.set("facet.date.gap", interval)
        self._params.set("facet.date.hardend", hard_end)
        self._params.set("facet.date.other", other)
        return self

    @property
    def facet_fields(self) -> list[str] | None:
        return self._params.get(keys.FACET_FIELDS)

    def set_facet_fields(self, value: str | Sequence[str]) -> Query:
        """Set facet fields; a string is split on commas."""
        self._params.set_list(keys.FACET_FIELDS, value, sep=",")
        return self

    @property
    def facet_queries(self) -> list[str] | None:
        return self._params.get(keys.FACET_QUERIES)

    def set_facet_queries(self, value: str | Sequence[str]) -> Query:
        self._params.set_list(keys.FACET_QUERIES, value)
        return self

    # -- more like this / spellcheck -------------------------------------------

    def more_like_this(
        self,
        count: int = 5,
        fields: str | Sequence[str] | None = None,
        max_words: int = 5,
    ) -> Query:
        """Return similar documents for each result.

        Args:
            count: Similar documents per result (``mlt.count``).
            fields: Fields used for similarity (``mlt.fl``).
            max_words: Maximum query terms considered (``mlt.maxqt``).
        """
        if fields is not None and not isinstance(fields, str):
            fields = ",".join(as_list(fields))
        return self.merge_params(
            {
                keys.MORE_LIKE_THIS: "true",
                "mlt.count": count,
                "mlt.maxqt": max_words,
                "mlt.fl": fields,
            }
        )

    def spellcheck(self, value: bool | str = True) -> Query:
        """Toggle spellchecking.

        Args:
            value: False disables. True enables and checks the query text.
                A string enables and checks that string instead.
        """
        if not value:
            self._params.set(keys.SPELLCHECK, "false")
            return self
        self._params.set(keys.SPELLCHECK, "true")
        if isinstance(value, str):
            self._params.set(keys.SPELLCHECK_QUERY, value)
        return self

    # -- fields ----------------------------------------------------------------

    @property
    def retrieve_fields(self) -> str | None:
        return self._params.get(keys.RETRIEVE_FIELDS)

    def set_retrieve_fields(self, value: str | Sequence[str]) -> Query:
        """Set the returned fields (``fl``), stored as one comma-joined string."""
        if not isinstance(value, str):
            value = ",".join(as_list(value))
        self._params.set(keys.RETRIEVE_FIELDS, value)
        return self

    @property
    def default_field(self) -> str | None:
        return self._params.get(keys.DEFAULT_FIELD)

    def set_default_field(self, value: Any) -> Query:
        """Set the default search field (``df``). Only the Lucene parser reads it."""
        self._params.set(keys.DEFAULT_FIELD, str(value))
        return self

    @property
    def query_fields(self) -> list[str] | None:
        return self._params.get(keys.QUERY_FIELDS)

    def set_query_fields(self, value: str | Sequence[str]) -> Query:
        """Set weighted query fields (``qf``), e.g. ``"title^5.0 body^20.0"``.

        Only the DisMax parser reads them.
        """
        self._params.set_list(keys.QUERY_FIELDS, value, sep=" ")
        return self

    def default_query_fields(self) -> Query:
        """Append ``qf`` entries from the host's field boost settings.

        Only fields both configured on the host and indexed by the service are
        used.

        Raises:
            MissingDependency: If the host has no field boost settings or the
                service cannot list its fields.
        """
        weights = self._adapter.query_field_weights()
        get_fields = getattr(self._service, "get_fields", None)
        if not callable(get_fields):
            raise MissingDependency("Search service cannot list its indexed fields")
        indexed = get_fields() or {}
        entries: list[str] = []
        for field_name in indexed:
            weight = weights.get(field_name)
            if not weight:
                continue
            weight = float(weight) * _NORMED_FIELD_BOOST.get(field_name, 1.0)
            entries.append(f"{field_name}^{weight}")
        if entries:
            self._params.extend(keys.QUERY_FIELDS, entries)
        return self

    @property
    def boost_functions(self) -> list[str] | None:
        return self._params.get(keys.BOOST_FUNCTIONS)

    def set_boost_functions(self, value: str | Sequence[str]) -> Query:
        """Set boost functions (``bf``); DisMax only."""
        self._params.set_list(keys.BOOST_FUNCTIONS, value)
        return self

    @property
    def boost_queries(self) -> list[str] | None:
        return self._params.get(keys.BOOST_QUERIES)

    def set_boost_queries(self, value: str | Sequence[str]) -> Query:
        """Set boost queries (``bq``); DisMax only."""
        self._params.set_list(keys.BOOST_QUERIES, value)
        return self

    # -- paging ----------------------------------------------------------------

    @property
    def base_path(self) -> str:
        return self._base_path

    def set_base_path(self, path: str) -> Query:
        self._base_path = str(path)
        return self

    @property
    def offset(self) -> int:
        return self._offset

    def set_offset(self, value: int) -> Query:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise InvalidArgument(f"Offset must be a non-negative integer, got {value!r}")
        self._offset = value
        return self

    @property
    def start(self) -> int:
        return self._offset

    def set_start(self, value: int) -> Query:
        return self.set_offset(value)

    @property
    def limit(self) -> int:
        return self._limit

    def set_limit(self, value: int) -> Query:
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise InvalidArgument(f"Limit must be a positive integer, got {value!r}")
        self._limit = value
        return self

    @property
    def rows(self) -> int:
        return self._limit

    def set_rows(self, value: int) -> Query:
        return self.set_limit(value)

    # -- raw parameters --------------------------------------------------------

    @property
    def params(self) -> dict[str, Param]:
        """Copy of the full parameter map."""
        return self._params.as_dict()

    def set_params(self, value: Mapping[str, Param]) -> Query:
        """Replace the whole parameter map, defaults included."""
        self._params.replace(value)
        self._parser_explicit = keys.QUERY_PARSER in value
        return self

    def merge_params(self, value: Mapping[str, Param]) -> Query:
        """Merge parameters: scalars overwrite, lists already present are extended."""
        if not isinstance(value, Mapping):
            raise InvalidArgument(f"Parameters must be a mapping, got {type(value).__name__}")
        self._params.merge(value)
        if keys.QUERY_PARSER in value:
            self._parser_explicit = True
        return self

    # -- debugging and state predicates ----------------------------------------

    def debug(self, enabled: bool = True, show_implicit_params: bool = True) -> Query:
        """Toggle debug output.

        Enabling sets ``debugQuery``/``echoHandler`` and ``echoParams``
        (``all`` or ``explicit``). Disabling sets both flags to false and
        removes ``echoParams``.
        """
        value = flag(enabled)
        self._params.set(keys.DEBUG_QUERY, value)
        self._params.set(keys.ECHO_HANDLER, value)
        if enabled:
            self._params.set(keys.ECHO_PARAMS, "all" if show_implicit_params else "explicit")
        else:
            self._params.remove(keys.ECHO_PARAMS)
        return self

    def is_spellchecking(self) -> bool:
        return self._params.is_enabled(keys.SPELLCHECK)

    def is_faceting(self) -> bool:
        return self._params.is_enabled(keys.FACET)

    def is_highlighting(self) -> bool:
        return self._params.is_enabled(keys.HIGHLIGHT)

    def is_debugging(self) -> bool:
        return self._params.is_enabled(keys.DEBUG_QUERY)

    # -- service and execution -------------------------------------------------

    @property
    def service(self) -> SearchService | None:
        return self._service

    def set_service(self, instance: SearchService | None) -> Query:
        self._service = instance
        return self

    def execute(self) -> Any:
        """Run the search and return the service's response unchanged.

        The query text is HTML-escaped (``&``, ``<``, ``>``) for transport. When
        spellchecking is on and no spellcheck text was given, the query text is
        checked.

        Raises:
            MissingDependency: If no search service is set.
        """
        if self._service is None:
            raise MissingDependency("No search service configured for this query")

        encoded = html.escape(self._query, quote=False)
        if self.is_spellchecking() and keys.SPELLCHECK_QUERY not in self._params:
            self._params.set(keys.SPELLCHECK_QUERY, self._query)

        log.debug(
            "Executing query q=%r start=%d rows=%d params=%s",
            encoded,
            self._offset,
            self._limit,
            self._params,
        )
        return self._service.search(encoded, self._offset, self._limit, self._params.as_dict())

    search = execute

    # -- CMS import/export -----------------------------------------------------

    def _import(self, source: CmsQuery) -> None:
        # Host query objects are built for DisMax; explicit settings in the
        # merged fragment still win.
        self.use_query_parser(QueryParser.DISMAX)
        fragment = self._adapter.extract(source, current_sort=self.sort)
        self.merge_params(fragment)

    def to_external_query(self) -> CmsQuery:
        """Export the builder state as a host CMS query object.

        Raises:
            MissingDependency: If the host integration cannot build query objects.
        """
        return self._adapter.to_external_query(self)


def solr_query(query: str | CmsQuery | None = "", service: SearchService | None = None, **kwargs: Any) -> Query:
    """Create a new ``Query``; shorthand for the constructor.

    Example:
        ``solr_query("blue smurf", service).execute()``
    """
    return Query(query, service, **kwargs)
