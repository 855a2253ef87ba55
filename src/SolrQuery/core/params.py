"""Outbound Solr request parameters.

``ParameterStore`` keeps every parameter sent with a search request in one
ordered mapping. Values are one of:

- a flag string, ``"true"`` or ``"false"`` (the wire format expects tokens,
  not native booleans)
- a scalar string or number
- a list of strings (repeated request parameters such as ``fq`` or ``qf``)

Keys follow the Solr request vocabulary (``fl``, ``fq``, ``sort``, ``defType``,
``hl.*``, ``facet.*``, ``mlt.*``, ``spellcheck.*``, ``bq``, ``bf``, ...).
Unknown keys are stored and sent unchanged.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Mapping, Sequence, Union

from SolrQuery.core.errors import InvalidArgument

Param = Union[str, int, float, list[str]]

_TRUE_TOKENS = frozenset({"1", "true", "on", "yes"})

# Parameter keys with builder-level meaning.
RETRIEVE_FIELDS = "fl"
FILTERS = "fq"
SORT = "sort"
QUERY_PARSER = "defType"
DEFAULT_FIELD = "df"
QUERY_FIELDS = "qf"
BOOST_QUERIES = "bq"
BOOST_FUNCTIONS = "bf"
HIGHLIGHT = "hl"
SPELLCHECK = "spellcheck"
SPELLCHECK_QUERY = "spellcheck.q"
FACET = "facet"
FACET_FIELDS = "facet.field"
FACET_QUERIES = "facet.query"
FACET_DATE = "facet.date"
MORE_LIKE_THIS = "mlt"
DEBUG_QUERY = "debugQuery"
ECHO_HANDLER = "echoHandler"
ECHO_PARAMS = "echoParams"


def flag(value: bool) -> str:
    """Render a boolean as the ``"true"``/``"false"`` wire token."""
    return "true" if value else "false"


def parse_flag(value: Any) -> bool:
    """Strictly parse a stored flag; anything unrecognized is False."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_TOKENS
    return False


def as_list(value: str | Iterable[str], *, sep: str | None = None) -> list[str]:
    """Normalize a sequence-valued parameter.

    Args:
        value: A single string or a sequence of strings.
        sep: When given, a string is split on this delimiter (empty parts
            dropped); otherwise it is wrapped into a one-element list.

    Returns:
        New list in caller order.

    Raises:
        InvalidArgument: If value is neither a string nor an iterable of strings.
    """
    if isinstance(value, str):
        if sep is None:
            return [value]
        return [part.strip() for part in value.split(sep) if part.strip()]
    if isinstance(value, Mapping) or not isinstance(value, Iterable):
        raise InvalidArgument(f"Expected a string or a sequence of strings, got {type(value).__name__}")
    out: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise InvalidArgument(f"Sequence items must be strings, got {type(item).__name__}")
        out.append(item)
    return out


class ParameterStore:
    """Ordered parameter map with normalizing accessors."""

    __slots__ = ("_params",)

    def __init__(self, initial: Mapping[str, Param] | None = None) -> None:
        self._params: dict[str, Param] = {}
        if initial:
            self.replace(initial)

    def __contains__(self, key: object) -> bool:
        return key in self._params

    def __iter__(self) -> Iterator[str]:
        return iter(self._params)

    def __len__(self) -> int:
        return len(self._params)

    def __repr__(self) -> str:
        return f"ParameterStore({self._params!r})"

    def get(self, key: str, default: Any = None) -> Any:
        return self._params.get(key, default)

    def set(self, key: str, value: Param) -> None:
        self._params[key] = value

    def remove(self, key: str) -> None:
        """Drop a key; missing keys are ignored."""
        self._params.pop(key, None)

    def set_list(self, key: str, value: str | Sequence[str], *, sep: str | None = None) -> None:
        self._params[key] = as_list(value, sep=sep)

    def extend(self, key: str, value: str | Sequence[str]) -> None:
        """Append values to a list parameter, creating it when absent.

        A scalar already stored under the key is kept as the first item.
        Repeated values are kept; nothing is de-duplicated.
        """
        items = as_list(value)
        current = self._params.get(key)
        if isinstance(current, (list, tuple)):
            self._params[key] = list(current) + items
        elif current is None:
            self._params[key] = items
        else:
            self._params[key] = [str(current)] + items

    def merge(self, fragment: Mapping[str, Param]) -> None:
        """Merge a fragment into the map.

        Overlapping scalar keys take the fragment's value. When both the
        stored value and the fragment value are sequences they are
        concatenated, without de-duplication.
        """
        for key, value in fragment.items():
            current = self._params.get(key)
            if isinstance(current, (list, tuple)) and isinstance(value, (list, tuple)):
                self._params[key] = list(current) + list(value)
            else:
                self._params[key] = _copy_value(value)

    def replace(self, mapping: Mapping[str, Param]) -> None:
        if not isinstance(mapping, Mapping):
            raise InvalidArgument(f"Parameters must be a mapping, got {type(mapping).__name__}")
        self._params = {str(key): _copy_value(value) for key, value in mapping.items()}

    def is_enabled(self, key: str) -> bool:
        """Return whether a flag parameter is set to a true token."""
        return parse_flag(self._params.get(key))

    def as_dict(self) -> dict[str, Param]:
        """Return a copy safe to hand to a transport."""
        return {key: _copy_value(value) for key, value in self._params.items()}


def _copy_value(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return list(value)
    return value
