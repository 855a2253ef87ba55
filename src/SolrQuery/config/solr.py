"""Solr connection and query default configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping

from SolrQuery.config.common import (
    expect_float,
    expect_int,
    expect_str,
    expect_str_list,
    get_optional_value,
    get_required_value,
    get_section,
)


@dataclass(frozen=True, slots=True)
class SolrConfig:
    """Connection settings for one Solr core.

    Attributes:
        url: Core base URL, after applying the ``url_env`` override.
        url_env: Environment variable that overrides ``url`` when set.
        timeout: Request timeout in seconds.
        max_attempts: Attempts per request, including the first one.
    """

    url: str
    url_env: str
    timeout: float
    max_attempts: int


@dataclass(frozen=True, slots=True)
class QueryDefaults:
    """Defaults applied by the CLI to every new query.

    Attributes:
        rows: Result page size.
        parser: Query parser name, or empty to keep the builder default.
        retrieve_fields: Returned fields; empty keeps the builder default.
    """

    rows: int = 10
    parser: str = ""
    retrieve_fields: tuple[str, ...] = ()


def load_solr(raw: Mapping[str, Any]) -> SolrConfig:
    """Load the ``solr`` section.

    Raises:
        TypeError: If config types are invalid.
        ValueError: If ``solr.url`` is missing.
    """
    section = get_section(raw, "solr", required=True)
    url_env = expect_str(get_optional_value(section, "url_env", "SOLR_URL"), "solr.url_env")
    url = expect_str(get_required_value(section, "url", "solr.url"), "solr.url")
    return SolrConfig(
        url=_url_from_env(url_env) or url,
        url_env=url_env,
        timeout=expect_float(get_optional_value(section, "timeout", 30.0), "solr.timeout"),
        max_attempts=expect_int(get_optional_value(section, "max_attempts", 4), "solr.max_attempts"),
    )


def check_solr(config: SolrConfig) -> None:
    """Validate connection constraints.

    Raises:
        ValueError: If values violate connection constraints.
    """
    if not config.url.strip():
        raise ValueError("solr.url must not be empty")
    if not config.url.startswith(("http://", "https://")):
        raise ValueError("solr.url must be an http(s) URL")
    if config.timeout <= 0:
        raise ValueError("solr.timeout must be positive")
    if config.max_attempts <= 0:
        raise ValueError("solr.max_attempts must be positive")


def load_query_defaults(raw: Mapping[str, Any]) -> QueryDefaults:
    """Load the optional ``query`` section."""
    section = get_section(raw, "query", required=False)
    return QueryDefaults(
        rows=expect_int(get_optional_value(section, "rows", 10), "query.rows"),
        parser=expect_str(get_optional_value(section, "parser", ""), "query.parser").strip(),
        retrieve_fields=tuple(
            item.strip()
            for item in expect_str_list(get_optional_value(section, "retrieve_fields", []), "query.retrieve_fields")
            if item.strip()
        ),
    )


def check_query_defaults(config: QueryDefaults) -> None:
    if config.rows <= 0:
        raise ValueError("query.rows must be positive")


def _url_from_env(url_env: str) -> str:
    """Load the Solr URL override from the environment."""
    if not url_env:
        return ""
    return os.getenv(url_env, "").strip()
