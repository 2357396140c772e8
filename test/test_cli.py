"""Smoke tests for the click command line with the Solr transport stubbed out."""

import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from SolrBridge.cli.commands import build_cli_query
from SolrBridge.cli.ui import cli
from SolrBridge.errors import TransportUnreachable
from SolrBridge.gateway.client import SolrApiClient

_CONFIG_YAML = """
log:
  level: INFO
  to_file: false
  dir: log

servers:
  - name: main
    connector: {host: localhost, core: collection1}
  - name: backup
    connector: {host: backup, core: collection1}
"""

_SELECT_RESPONSE = {
    "response": {"numFound": 1, "docs": [{"id": "doc1", "score": 2.0, "tm_title": ["Red shoes"]}]},
}


class TestCli(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.config_path = Path(self._tmp.name) / "config.yml"
        self.config_path.write_text(_CONFIG_YAML, encoding="utf-8")
        defaults = patch("SolrBridge.cli.ui.DEFAULT_CONFIG_PATH", REPO_ROOT / "config" / "default.yml")
        defaults.start()
        self.addCleanup(defaults.stop)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _invoke(self, *args: str):
        return CliRunner().invoke(cli, ["--config", str(self.config_path), *args])

    def test_search(self) -> None:
        with patch.object(SolrApiClient, "execute", return_value=_SELECT_RESPONSE) as execute:
            result = self._invoke("search", "red", "shoes", "-f", "title=tm_title", "--limit", "5")
        self.assertEqual(result.exit_code, 0, result.output)
        endpoint, handler, params = execute.call_args.args
        self.assertEqual(handler, "select")
        self.assertIn(("q", "red shoes"), params)
        self.assertIn(("rows", "5"), params)
        self.assertEqual(endpoint.core, "collection1")

    def test_bad_field_mapping(self) -> None:
        result = self._invoke("search", "red", "-f", "title")
        self.assertNotEqual(result.exit_code, 0)

    def test_ping_failure_aborts(self) -> None:
        with patch.object(SolrApiClient, "execute", side_effect=TransportUnreachable("http://localhost:8983/solr/")):
            result = self._invoke("ping")
        self.assertEqual(result.exit_code, 1)

    def test_health_reports_unreachable_server(self) -> None:
        def execute(client, endpoint, handler, params=(), *, method="GET"):
            if endpoint.host == "backup":
                raise TransportUnreachable(endpoint.base_uri)
            return {}

        with patch.object(SolrApiClient, "execute", autospec=True, side_effect=execute):
            result = self._invoke("health")
        self.assertEqual(result.exit_code, 1)

    def test_health_ok(self) -> None:
        with patch.object(SolrApiClient, "execute", return_value={}):
            result = self._invoke("health")
        self.assertEqual(result.exit_code, 0, result.output)

    def test_partial_config_is_merged_over_defaults(self) -> None:
        self.config_path.write_text("log:\n  level: DEBUG\n", encoding="utf-8")
        with patch.object(SolrApiClient, "execute", return_value={}) as execute:
            result = self._invoke("ping")
        self.assertEqual(result.exit_code, 0, result.output)
        endpoint = execute.call_args.args[0]
        self.assertEqual((endpoint.host, endpoint.core), ("localhost", "collection1"))


class TestBuildCliQuery(unittest.TestCase):
    def test_fields_and_sorts(self) -> None:
        query = build_cli_query(
            ["a", "b"],
            conjunction="or",
            negate=True,
            fields=["title=tm_title", "type = ss_type"],
            sorts=["type:desc", "title"],
            filters=["ss_type:book"],
        )
        self.assertEqual(query.field_mapping, {"title": "tm_title", "type": "ss_type"})
        self.assertEqual(query.index_fields["title"].type, "text")
        self.assertEqual(query.index_fields["type"].type, "string")
        self.assertEqual(tuple(query.sorts), (("type", "desc"), ("title", "asc")))
        self.assertEqual(dict(query.filters), {"fq0": "ss_type:book"})
        assert query.keys is not None
        self.assertTrue(query.keys.negation)

    def test_no_keys(self) -> None:
        self.assertIsNone(build_cli_query([]).keys)


if __name__ == "__main__":
    unittest.main()
