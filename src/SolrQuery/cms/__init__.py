"""Host CMS query object import/export."""

from __future__ import annotations

from SolrQuery.cms.adapter import (
    ExternalQueryAdapter,
    collect_filter_groups,
    legacy_field_delta,
    tag_filter_groups,
)
from SolrQuery.cms.protocols import CmsIntegration, CmsQuery

__all__ = [
    "CmsIntegration",
    "CmsQuery",
    "ExternalQueryAdapter",
    "collect_filter_groups",
    "legacy_field_delta",
    "tag_filter_groups",
]
