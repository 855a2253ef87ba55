"""Translation between ``Query`` and host CMS query objects.

Import (``extract``) turns a CMS query object into a parameter fragment:

1. the sort descriptor, when the builder has no sort of its own
2. filter groups, collected per group id and flattened into ``fq`` strings

Flattening rules for a group ``delta`` with values ``v1..vn``:

- OR group (registered with ``operator == "OR"`` in the facet definitions):
  ``{!tag=<delta>}v1 OR v2 ...``. The tag lets facet exclusions reference it.
- otherwise: ``v1 AND v2 ...`` with no tag.

Export (``to_external_query``) hands the builder state to the host's query
constructor.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Mapping

from SolrQuery.cms.protocols import CmsIntegration, CmsQuery
from SolrQuery.core.errors import MissingDependency
from SolrQuery.core.models import FilterGroup, SortSpec
from SolrQuery.core.params import FILTERS, SORT
from SolrQuery.utils.log import get_logger

if TYPE_CHECKING:
    from SolrQuery.core.query import Query

log = get_logger("cms")

_LEGACY_FIELD_MARKER = "_cck_"
_LEGACY_PREFIX_LEN = 7


def legacy_field_delta(delta: str) -> str:
    """Derive the facet delta of a legacy CCK field filter key.

    CCK facet block deltas differ from their index field names: an index key
    such as ``im_cck_field_color`` is registered as ``field_color``. When the
    marker occurs after the first character, the fixed-length type prefix is
    stripped. Returns an empty string for other keys.

    The fixed offset assumes two-letter dynamic field prefixes (``im_``,
    ``sm_``, ``ss_``); other shapes are returned mangled.
    """
    if delta.find(_LEGACY_FIELD_MARKER) > 0:
        return delta[_LEGACY_PREFIX_LEN:].strip()
    return ""


def collect_filter_groups(source: CmsQuery) -> dict[str, list[str]]:
    """Collect filter values per group id, preserving first-seen order.

    A group value may be a single scalar or a (one level) nested sequence.
    """
    groups: dict[str, list[str]] = {}
    raw = source.get_fq() or {}
    for delta, values in raw.items():
        if values is None:
            continue
        bucket = groups.setdefault(str(delta), [])
        if isinstance(values, (str, int, float)):
            bucket.append(str(values))
            continue
        if isinstance(values, Mapping):
            values = values.values()
        for value in values:
            bucket.append(str(value))
    return {delta: values for delta, values in groups.items() if values}


def tag_filter_groups(groups: Mapping[str, Iterable[str]], or_ids: Iterable[str]) -> list[str]:
    """Flatten filter groups into ``fq`` strings.

    Args:
        groups: Group id -> filter values, in encounter order.
        or_ids: Facet deltas registered with OR semantics.

    Returns:
        One filter string per group, in the order of ``groups``.
    """
    or_set = frozenset(or_ids)
    flattened: list[str] = []
    for delta, values in groups.items():
        alternate = legacy_field_delta(delta)
        is_or = delta in or_set or (alternate != "" and alternate in or_set)
        group = FilterGroup(delta=delta, values=tuple(values), operator="OR" if is_or else "AND")
        flattened.append(group.render())
    return flattened


class ExternalQueryAdapter:
    """Converts CMS query objects to and from builder parameters."""

    def __init__(self, integration: CmsIntegration | None) -> None:
        self.integration = integration

    def _require(self, name: str) -> Any:
        func = getattr(self.integration, name, None)
        if not callable(func):
            raise MissingDependency(
                f"Host integration function {name!r} is not available; "
                "is the CMS integration configured?"
            )
        return func

    def or_facet_ids(self) -> frozenset[str]:
        """Return facet deltas whose definition uses the OR operator.

        Raises:
            MissingDependency: If the integration has no ``facet_definitions``.
                Defaulting every group to AND would silently change results.
        """
        definitions = self._require("facet_definitions")() or {}
        ors: set[str] = set()
        for facets in definitions.values():
            for delta, facet in (facets or {}).items():
                if isinstance(facet, Mapping) and facet.get("operator") == "OR":
                    ors.add(str(delta))
        return frozenset(ors)

    def extract(self, source: CmsQuery, *, current_sort: str | None = None) -> dict[str, Any]:
        """Translate a CMS query object into a parameter fragment.

        Args:
            source: Host query object.
            current_sort: Sort already set on the builder; a non-empty value
                keeps the source's sort from being imported.

        Returns:
            Fragment with optional ``sort`` and ``fq`` keys, ready for
            ``ParameterStore.merge``.
        """
        fragment: dict[str, Any] = {}

        if not current_sort:
            sort = SortSpec.from_descriptor(source.get_solrsort())
            if sort is not None:
                fragment[SORT] = sort.render()

        groups = collect_filter_groups(source)
        or_ids = self.or_facet_ids()
        if groups:
            fragment[FILTERS] = tag_filter_groups(groups, or_ids)

        log.debug("Imported CMS query: groups=%d or_groups=%s sort=%s", len(groups), sorted(or_ids), fragment.get(SORT))
        return fragment

    def to_external_query(self, query: Query) -> CmsQuery:
        """Build a host query object from the builder state.

        Raises:
            MissingDependency: If the integration has no ``build_query``.
        """
        build_query = self._require("build_query")
        return build_query(
            query.query_text,
            list(query.filters or []),
            query.sort,
            query.base_path,
            query.service,
        )

    def query_field_weights(self) -> Mapping[str, float]:
        """Return the host's configured query-field boosts.

        Raises:
            MissingDependency: If the integration has no ``query_field_weights``.
        """
        return self._require("query_field_weights")() or {}
