from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final, Mapping


class QueryParser:
    """Names of the query parsers bundled with Solr.

    ``Query.use_query_parser`` accepts any name, these are only the common ones.
    """

    LUCENE: Final = "lucene"
    DISMAX: Final = "dismax"
    RAW: Final = "raw"
    BOOST: Final = "boost"
    FIELD: Final = "field"
    PREFIX: Final = "prefix"


DEFAULT_RETRIEVE_FIELDS: Final = "id,nid,title,comment_count,type,created,changed,score,path,url,uid,name"


@dataclass(frozen=True, slots=True)
class SortSpec:
    """Sort descriptor, rendered as ``"<name> <direction>"``.

    Attributes:
        name: Index field (or function) to sort on.
        direction: ``asc`` or ``desc``.
    """

    name: str
    direction: str = "asc"

    def render(self) -> str:
        return f"{self.name} {self.direction}".strip()

    @classmethod
    def from_descriptor(cls, value: Any) -> SortSpec | None:
        """Build from a CMS sort descriptor.

        Accepts a ``SortSpec``, or a mapping carrying ``#name``/``#direction``
        (apachesolr style) or ``name``/``direction`` keys. Returns None when the
        descriptor has no name.
        """
        if isinstance(value, SortSpec):
            return value
        if not isinstance(value, Mapping):
            return None
        name = value.get("#name", value.get("name"))
        direction = value.get("#direction", value.get("direction", ""))
        if not name:
            return None
        return cls(name=str(name), direction=str(direction or ""))


@dataclass(frozen=True, slots=True)
class FilterGroup:
    """One named group of filter queries combined with a single operator.

    Attributes:
        delta: Group identifier, also used as the ``{!tag=...}`` label.
        values: Filter expressions in the order they were collected.
        operator: ``AND`` or ``OR``.
    """

    delta: str
    values: tuple[str, ...]
    operator: str = "AND"

    def render(self) -> str:
        joined = f" {self.operator} ".join(self.values)
        if self.operator == "OR":
            return f"{{!tag={self.delta}}}{joined}"
        return joined
