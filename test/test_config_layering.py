"""Tests for layered config parsing and validation."""

import os
import sys
import tempfile
import unittest
from copy import deepcopy
from pathlib import Path
from unittest.mock import patch

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from SolrQuery.config import load_config, load_config_with_defaults, parse_config_dict


def _base_raw_config() -> dict:
    return {
        "log": {"level": "INFO", "to_file": False, "dir": "log"},
        "solr": {
            "url": "http://localhost:8983/solr/drupal",
            "url_env": "SOLR_QUERY_TEST_URL",
            "timeout": 30,
            "max_attempts": 4,
        },
        "query": {"rows": 10, "parser": "", "retrieve_fields": []},
    }


class TestConfigLayering(unittest.TestCase):
    def test_parse_valid_config(self) -> None:
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("SOLR_QUERY_TEST_URL", None)
            cfg = parse_config_dict(_base_raw_config())
        self.assertEqual(cfg.runtime.level, "INFO")
        self.assertEqual(cfg.solr.url, "http://localhost:8983/solr/drupal")
        self.assertEqual(cfg.solr.timeout, 30.0)
        self.assertEqual(cfg.query.rows, 10)
        self.assertEqual(cfg.query.retrieve_fields, ())

    def test_optional_sections_default(self) -> None:
        cfg = parse_config_dict({"solr": {"url": "http://solr/core"}})
        self.assertEqual(cfg.runtime.level, "INFO")
        self.assertFalse(cfg.runtime.to_file)
        self.assertEqual(cfg.solr.max_attempts, 4)
        self.assertEqual(cfg.query.parser, "")

    def test_env_overrides_url(self) -> None:
        with patch.dict(os.environ, {"SOLR_QUERY_TEST_URL": "https://search.example.org/solr/site"}):
            cfg = parse_config_dict(_base_raw_config())
        self.assertEqual(cfg.solr.url, "https://search.example.org/solr/site")

    def test_missing_solr_section(self) -> None:
        raw = _base_raw_config()
        del raw["solr"]
        with self.assertRaises(ValueError):
            parse_config_dict(raw)

    def test_invalid_types(self) -> None:
        raw = _base_raw_config()
        raw["solr"]["timeout"] = "slow"
        with self.assertRaises(TypeError):
            parse_config_dict(raw)

        raw = _base_raw_config()
        raw["query"]["retrieve_fields"] = [1, 2]
        with self.assertRaises(TypeError):
            parse_config_dict(raw)

    def test_invalid_values(self) -> None:
        for section, key, value in (
            ("solr", "url", "ftp://solr/core"),
            ("solr", "max_attempts", 0),
            ("query", "rows", 0),
            ("log", "level", "LOUD"),
        ):
            raw = deepcopy(_base_raw_config())
            raw[section][key] = value
            with self.assertRaises(ValueError, msg=f"{section}.{key}"):
                parse_config_dict(raw)

    def test_retrieve_fields_accepts_string(self) -> None:
        raw = _base_raw_config()
        raw["query"]["retrieve_fields"] = "id"
        self.assertEqual(parse_config_dict(raw).query.retrieve_fields, ("id",))


class TestConfigOverride(unittest.TestCase):
    def test_override_merges_with_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            default_path = Path(tmp) / "default.yml"
            override_path = Path(tmp) / "override.yml"
            default_path.write_text(
                "log:\n  level: INFO\nsolr:\n  url: http://localhost:8983/solr/drupal\n  url_env: SOLR_QUERY_TEST_URL\n  timeout: 30\n",
                encoding="utf-8",
            )
            override_path.write_text("log:\n  level: debug\nquery:\n  rows: 25\n", encoding="utf-8")

            cfg = load_config_with_defaults(override_path, default_path=default_path)

        self.assertEqual(cfg.runtime.level, "DEBUG")
        self.assertEqual(cfg.solr.url, "http://localhost:8983/solr/drupal")
        self.assertEqual(cfg.query.rows, 25)

    def test_repository_default_config_loads(self) -> None:
        with patch.dict(os.environ, {"SOLR_URL": ""}):
            cfg = load_config(REPO_ROOT / "config" / "default.yml")
        self.assertEqual(cfg.solr.url, "http://localhost:8983/solr/drupal")
        self.assertEqual(cfg.solr.url_env, "SOLR_URL")

    def test_root_must_be_mapping(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "bad.yml"
            path.write_text("- a\n- b\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_config(path)


if __name__ == "__main__":
    unittest.main()
