"""Tests for layered config parsing, validation and default merging."""

import os
import sys
import tempfile
import unittest
from copy import deepcopy
from pathlib import Path
from unittest.mock import patch

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from SolrBridge.config import load_config, load_config_with_defaults, parse_config_dict


def _base_raw_config() -> dict:
    return {
        "log": {"level": "INFO", "to_file": False, "dir": "log"},
        "servers": [
            {
                "name": "main",
                "connector": {
                    "scheme": "http",
                    "host": "localhost",
                    "port": 8983,
                    "path": "/solr",
                    "core": "collection1",
                    "http_user": "",
                    "http_pass_env": "SOLR_HTTP_PASS",
                    "timeout": 5,
                },
                "options": {"excerpt": True, "http_method": "auto"},
            }
        ],
    }


_BASE_YAML = """
log:
  level: INFO
  to_file: false
  dir: log

servers:
  - name: default
    connector:
      host: localhost
      core: collection1
"""


class TestConfigLayering(unittest.TestCase):
    def test_parse_success_nested_access(self) -> None:
        cfg = parse_config_dict(_base_raw_config())
        self.assertEqual(cfg.runtime.level, "INFO")
        server = cfg.server()
        self.assertEqual(server.name, "main")
        self.assertEqual(server.connector.core, "collection1")
        self.assertEqual(server.connector.timeout, 5.0)
        self.assertTrue(server.options.excerpt)
        self.assertFalse(server.options.highlight_data)
        self.assertEqual(server.options.http_method, "AUTO")
        self.assertIs(cfg.server("main"), server)

    def test_unknown_server_name(self) -> None:
        cfg = parse_config_dict(_base_raw_config())
        with self.assertRaises(KeyError):
            cfg.server("other")

    def test_missing_log_section_uses_defaults(self) -> None:
        raw = _base_raw_config()
        del raw["log"]
        self.assertEqual(parse_config_dict(raw).runtime.level, "INFO")

    def test_log_level_error_contains_key(self) -> None:
        raw = _base_raw_config()
        raw["log"]["level"] = "verbose"
        with self.assertRaisesRegex(ValueError, "log\\.level"):
            parse_config_dict(raw)

    def test_missing_host_error_contains_key(self) -> None:
        raw = _base_raw_config()
        del raw["servers"][0]["connector"]["host"]
        with self.assertRaisesRegex(ValueError, "servers\\[0\\]\\.connector\\.host"):
            parse_config_dict(raw)

    def test_port_type_error_contains_key(self) -> None:
        raw = _base_raw_config()
        raw["servers"][0]["connector"]["port"] = "8983"
        with self.assertRaisesRegex(TypeError, "servers\\[0\\]\\.connector\\.port"):
            parse_config_dict(raw)

    def test_http_method_error_contains_key(self) -> None:
        raw = _base_raw_config()
        raw["servers"][0]["options"]["http_method"] = "PUT"
        with self.assertRaisesRegex(ValueError, "servers\\[0\\]\\.options\\.http_method"):
            parse_config_dict(raw)

    def test_empty_core_error(self) -> None:
        raw = _base_raw_config()
        raw["servers"][0]["connector"]["core"] = "  "
        with self.assertRaisesRegex(ValueError, "connector\\.core"):
            parse_config_dict(raw)

    def test_duplicate_server_names(self) -> None:
        raw = _base_raw_config()
        raw["servers"].append(deepcopy(raw["servers"][0]))
        with self.assertRaisesRegex(ValueError, "servers\\[1\\]\\.name"):
            parse_config_dict(raw)

    def test_servers_must_not_be_empty(self) -> None:
        raw = _base_raw_config()
        raw["servers"] = []
        with self.assertRaisesRegex(ValueError, "servers"):
            parse_config_dict(raw)

    def test_numeric_version_override(self) -> None:
        raw = _base_raw_config()
        raw["servers"][0]["options"]["solr_version"] = 7.7
        self.assertEqual(parse_config_dict(raw).server().options.solr_version, "7.7")

    def test_password_is_read_from_env(self) -> None:
        raw = _base_raw_config()
        raw["servers"][0]["connector"]["http_user"] = "solr"
        with patch.dict(os.environ, {"SOLR_HTTP_PASS": " secret "}, clear=False):
            cfg = parse_config_dict(raw)
        self.assertEqual(cfg.server().connector.http_pass, "secret")

    def test_missing_password_env_error(self) -> None:
        raw = _base_raw_config()
        raw["servers"][0]["connector"]["http_user"] = "solr"
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaisesRegex(ValueError, "SOLR_HTTP_PASS environment variable not set"):
                parse_config_dict(raw)


class TestConfigOverride(unittest.TestCase):
    def test_override_merges_with_defaults(self) -> None:
        override_yaml = """
log:
  level: debug
"""
        with tempfile.TemporaryDirectory() as tmp:
            default_path = Path(tmp) / "default.yml"
            default_path.write_text(_BASE_YAML, encoding="utf-8")
            override_path = Path(tmp) / "override.yml"
            override_path.write_text(override_yaml, encoding="utf-8")

            cfg = load_config_with_defaults(override_path, default_path=default_path)

        self.assertEqual(cfg.runtime.level, "DEBUG")
        self.assertEqual(cfg.servers[0].name, "default")

    def test_override_replaces_server_list(self) -> None:
        override_yaml = """
servers:
  - name: remote
    connector: {scheme: https, host: solr.example.org, port: 443, core: books}
"""
        with tempfile.TemporaryDirectory() as tmp:
            default_path = Path(tmp) / "default.yml"
            default_path.write_text(_BASE_YAML, encoding="utf-8")
            override_path = Path(tmp) / "override.yml"
            override_path.write_text(override_yaml, encoding="utf-8")

            cfg = load_config_with_defaults(override_path, default_path=default_path)

        self.assertEqual([server.name for server in cfg.servers], ["remote"])
        self.assertEqual(cfg.server().connector.scheme, "https")

    def test_shipped_default_config_is_valid(self) -> None:
        cfg = load_config(REPO_ROOT / "config" / "default.yml")
        self.assertEqual(cfg.server().connector.core, "collection1")
        self.assertEqual(cfg.server().options.solr_version, "")

    def test_root_must_be_mapping(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "bad.yml"
            path.write_text("- a\n- b\n", encoding="utf-8")
            with self.assertRaisesRegex(ValueError, "mapping"):
                load_config(path)


if __name__ == "__main__":
    unittest.main()
