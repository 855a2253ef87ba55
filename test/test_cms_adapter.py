"""Tests for CMS query object import/export and filter tagging."""

from __future__ import annotations

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from SolrQuery import MissingDependency, Query
from SolrQuery.cms import (
    ExternalQueryAdapter,
    collect_filter_groups,
    legacy_field_delta,
    tag_filter_groups,
)


class _CmsQuery:
    def __init__(self, fq: dict | None = None, sort: dict | None = None) -> None:
        self._fq = fq
        self._sort = sort

    def get_solrsort(self) -> dict | None:
        return self._sort

    def get_fq(self) -> dict | None:
        return self._fq


class _Integration:
    def __init__(self, definitions: dict | None = None, weights: dict | None = None) -> None:
        self.definitions = definitions or {}
        self.weights = weights or {}
        self.built: list[tuple] = []

    def facet_definitions(self) -> dict:
        return self.definitions

    def build_query(self, query, filters, sort, path, service):  # noqa: ANN001 - host signature
        self.built.append((query, filters, sort, path, service))
        return _CmsQuery(fq={"export": filters}, sort=None)

    def query_field_weights(self) -> dict:
        return self.weights


class _FacetOnlyIntegration:
    def facet_definitions(self) -> dict:
        return {}


class _FieldService:
    def __init__(self, fields: dict) -> None:
        self._fields = fields

    def search(self, query, offset, limit, params):  # noqa: ANN001 - transport signature
        return {}

    def get_fields(self) -> dict:
        return self._fields


_DEFINITIONS = {
    "apachesolr_search": {
        "category": {"operator": "OR"},
        "type": {"operator": "AND"},
        "field_color": {"operator": "OR"},
    },
    "apachesolr_og": {"im_og_gid": {}},
}


class TestLegacyFieldDelta(unittest.TestCase):
    def test_strips_fixed_prefix(self) -> None:
        self.assertEqual(legacy_field_delta("im_cck_field_color"), "field_color")

    def test_marker_at_start_is_ignored(self) -> None:
        self.assertEqual(legacy_field_delta("_cck_field_color"), "")

    def test_plain_delta(self) -> None:
        self.assertEqual(legacy_field_delta("category"), "")


class TestTagFilterGroups(unittest.TestCase):
    def test_or_group_is_tagged(self) -> None:
        self.assertEqual(
            tag_filter_groups({"category": ["x", "y"]}, {"category"}),
            ["{!tag=category}x OR y"],
        )

    def test_and_group_is_untagged(self) -> None:
        self.assertEqual(tag_filter_groups({"type": ["page"]}, {"category"}), ["page"])
        self.assertEqual(tag_filter_groups({"type": ["a", "b"]}, set()), ["a AND b"])

    def test_legacy_delta_resolves_or(self) -> None:
        result = tag_filter_groups({"im_cck_field_color": ["im_cck_field_color:1", "im_cck_field_color:2"]}, {"field_color"})
        self.assertEqual(result, ["{!tag=im_cck_field_color}im_cck_field_color:1 OR im_cck_field_color:2"])

    def test_group_order_is_kept(self) -> None:
        result = tag_filter_groups({"type": ["page"], "category": ["x"], "uid": ["uid:1"]}, {"category"})
        self.assertEqual(result, ["page", "{!tag=category}x", "uid:1"])


class TestCollectFilterGroups(unittest.TestCase):
    def test_nested_and_scalar_values(self) -> None:
        source = _CmsQuery(fq={"category": ["tid:1", "tid:2"], "type": "type:page", "empty": [], "none": None})
        self.assertEqual(
            collect_filter_groups(source),
            {"category": ["tid:1", "tid:2"], "type": ["type:page"]},
        )

    def test_missing_filters(self) -> None:
        self.assertEqual(collect_filter_groups(_CmsQuery(fq=None)), {})


class TestExternalQueryAdapter(unittest.TestCase):
    def test_or_facet_ids(self) -> None:
        adapter = ExternalQueryAdapter(_Integration(_DEFINITIONS))
        self.assertEqual(adapter.or_facet_ids(), frozenset({"category", "field_color"}))

    def test_extract_fragment(self) -> None:
        adapter = ExternalQueryAdapter(_Integration(_DEFINITIONS))
        source = _CmsQuery(
            fq={"category": ["x", "y"], "type": ["page"]},
            sort={"#name": "created", "#direction": "desc"},
        )
        self.assertEqual(
            adapter.extract(source),
            {"sort": "created desc", "fq": ["{!tag=category}x OR y", "page"]},
        )

    def test_extract_keeps_local_sort(self) -> None:
        adapter = ExternalQueryAdapter(_Integration(_DEFINITIONS))
        source = _CmsQuery(fq={}, sort={"#name": "created", "#direction": "desc"})
        self.assertEqual(adapter.extract(source, current_sort="title asc"), {})

    def test_missing_facet_definitions_fails_fast(self) -> None:
        source = _CmsQuery(fq={"category": ["x", "y"]})
        with self.assertRaises(MissingDependency):
            ExternalQueryAdapter(None).extract(source)
        with self.assertRaises(MissingDependency):
            ExternalQueryAdapter(object()).extract(source)  # type: ignore[arg-type]

    def test_export_requires_build_query(self) -> None:
        adapter = ExternalQueryAdapter(_FacetOnlyIntegration())  # type: ignore[arg-type]
        with self.assertRaises(MissingDependency):
            adapter.to_external_query(Query("blue"))


class TestQueryImportExport(unittest.TestCase):
    def test_import_via_constructor(self) -> None:
        source = _CmsQuery(
            fq={"category": ["x", "y"], "type": ["page"]},
            sort={"#name": "created", "#direction": "desc"},
        )
        query = Query(source, integration=_Integration(_DEFINITIONS))
        self.assertTrue(query.is_using_dismax())
        self.assertEqual(query.filters, ["{!tag=category}x OR y", "page"])
        self.assertEqual(query.sort, "created desc")
        self.assertEqual(query.query_text, "")

    def test_import_into_existing_query_merges(self) -> None:
        query = Query("blue smurf", integration=_Integration(_DEFINITIONS))
        query.use_query_parser("lucene").set_sort("title asc").set_filters("status:1")

        query.set_query(_CmsQuery(fq={"type": ["page"]}, sort={"#name": "created", "#direction": "desc"}))

        self.assertEqual(query.query_text, "blue smurf")
        self.assertEqual(query.query_parser, "dismax")
        self.assertEqual(query.sort, "title asc")
        self.assertEqual(query.filters, ["status:1", "page"])

    def test_import_without_integration_fails(self) -> None:
        with self.assertRaises(MissingDependency):
            Query(_CmsQuery(fq={"type": ["page"]}))

    def test_export(self) -> None:
        integration = _Integration(_DEFINITIONS)
        service = _FieldService({})
        query = (
            Query("blue smurf", service, integration=integration)
            .set_filters(["type:page"])
            .set_sort("title asc")
            .set_base_path("search/site")
        )

        exported = query.to_external_query()

        self.assertEqual(integration.built, [("blue smurf", ["type:page"], "title asc", "search/site", service)])
        self.assertEqual(exported.get_fq(), {"export": ["type:page"]})

    def test_default_query_fields(self) -> None:
        integration = _Integration(weights={"title": 5.0, "body": 1.0, "name": 0, "missing": 2.0})
        service = _FieldService({"title": {}, "body": {}, "name": {}, "uid": {}})
        query = Query("blue", service, integration=integration).set_query_fields("tags^2.0")

        query.default_query_fields()

        self.assertEqual(query.query_fields, ["tags^2.0", "title^5.0", "body^40.0"])

    def test_default_query_fields_requires_field_listing(self) -> None:
        class _PlainService:
            def search(self, query, offset, limit, params):  # noqa: ANN001 - transport signature
                return {}

        query = Query("blue", _PlainService(), integration=_Integration(weights={"title": 5.0}))
        with self.assertRaises(MissingDependency):
            query.default_query_fields()

    def test_default_query_fields_requires_weights(self) -> None:
        query = Query("blue", _FieldService({"title": {}}), integration=_FacetOnlyIntegration())  # type: ignore[arg-type]
        with self.assertRaises(MissingDependency):
            query.default_query_fields()


if __name__ == "__main__":
    unittest.main()
