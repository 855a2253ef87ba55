"""Public configuration API for SolrQuery."""

from __future__ import annotations

from SolrQuery.config.app import (
    DEFAULT_CONFIG_PATH,
    AppConfig,
    load_config,
    load_config_with_defaults,
    parse_config_dict,
)
from SolrQuery.config.runtime import RuntimeConfig
from SolrQuery.config.solr import QueryDefaults, SolrConfig

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "AppConfig",
    "QueryDefaults",
    "RuntimeConfig",
    "SolrConfig",
    "load_config",
    "load_config_with_defaults",
    "parse_config_dict",
]
