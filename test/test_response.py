"""Tests for excerpt extraction and stats/version parsing."""

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from SolrBridge.core.models import EngineVersion, HighlightConfig, StatsSummary
from SolrBridge.response import (
    extract_excerpt,
    format_highlighting,
    format_interval,
    get_stats_summary,
    get_version,
)

_FIELD_MAP = {"title": "tm_title", "type": "ss_type"}

_RESPONSE = {
    "highlighting": {
        "doc1": {
            "spell": [
                "<p>The [HIGHLIGHT]quick[/HIGHLIGHT] fox</p>",
                'ck">jumps [HIGHLIGHT]over[/HIGHLIGHT] the <a hr',
                "<br/>",
            ],
            "tm_title": ["A [HIGHLIGHT]quick[/HIGHLIGHT] <em>title</em>"],
            "ss_type": ["[HIGHLIGHT]book[/HIGHLIGHT]"],
        },
        "doc2": {},
    }
}


class TestExtractExcerpt(unittest.TestCase):
    def test_missing_document_is_absent(self) -> None:
        self.assertIsNone(extract_excerpt(_RESPONSE, "doc9", _FIELD_MAP, HighlightConfig(excerpt=True)))
        self.assertIsNone(extract_excerpt({}, "doc1", _FIELD_MAP, HighlightConfig(excerpt=True)))

    def test_excerpt_snippets_are_cleaned_and_joined(self) -> None:
        result = extract_excerpt(_RESPONSE, "doc1", _FIELD_MAP, HighlightConfig(excerpt=True))
        assert result is not None
        self.assertEqual(
            result.excerpt,
            "The <strong>quick</strong> fox … jumps <strong>over</strong> the",
        )
        self.assertEqual(dict(result.field_overrides), {})

    def test_punctuation_is_trimmed_but_markup_kept(self) -> None:
        response = {"highlighting": {"d": {"spell": ["...., [HIGHLIGHT]x[/HIGHLIGHT]!"]}}}
        result = extract_excerpt(response, "d", {}, HighlightConfig(excerpt=True), prefix="<b>", suffix="</b>")
        assert result is not None
        self.assertEqual(result.excerpt, "<b>x</b>")

    def test_highlight_data_overrides_fulltext_fields_only(self) -> None:
        result = extract_excerpt(_RESPONSE, "doc1", _FIELD_MAP, HighlightConfig(highlight=True))
        assert result is not None
        self.assertEqual(result.excerpt, "")
        self.assertEqual(
            dict(result.field_overrides),
            {"title": ["A <strong>quick</strong> <em>title</em>"]},
        )

    def test_empty_highlighting_block(self) -> None:
        result = extract_excerpt(_RESPONSE, "doc2", _FIELD_MAP, HighlightConfig(excerpt=True, highlight=True))
        assert result is not None
        self.assertEqual(result.excerpt, "")
        self.assertEqual(dict(result.field_overrides), {})

    def test_format_highlighting(self) -> None:
        self.assertEqual(
            format_highlighting(["[HIGHLIGHT]a[/HIGHLIGHT]", "b"], "<mark>", "</mark>"),
            ["<mark>a</mark>", "b"],
        )
        self.assertEqual(format_highlighting("[HIGHLIGHT]a[/HIGHLIGHT]"), "<strong>a</strong>")


_LEGACY_MBEANS = {
    "solr-mbeans": {
        "UPDATEHANDLER": {
            "updateHandler": {
                "stats": {
                    "docsPending": 3,
                    "autocommit maxTime": "15000ms",
                    "deletesById": 2,
                    "deletesByQuery": 1,
                }
            }
        },
        "CORE": {"core": {"stats": {"coreName": "collection1"}}},
        "QUERYHANDLER": {"/replication": {"stats": {"indexSize": "1.2 MB"}}},
    }
}

_FLAT_MBEANS = {
    "solr-mbeans": [
        "CORE",
        {"core": {"stats": {"CORE.coreName": "books"}}},
        "UPDATE",
        {
            "updateHandler": {
                "stats": {
                    "UPDATE.updateHandler.docsPending": 0,
                    "UPDATE.updateHandler.autoCommitMaxTime": "90000ms",
                    "UPDATE.updateHandler.deletesById": 4,
                    "UPDATE.updateHandler.deletesByQuery": 0,
                }
            }
        },
        "REPLICATION",
        {"/replication": {"stats": {"REPLICATION./replication.indexSize": "5 KB"}}},
    ]
}


class TestStats(unittest.TestCase):
    def test_legacy_payload(self) -> None:
        summary = get_stats_summary({"core": {"schema": "drupal-4.3"}}, _LEGACY_MBEANS)
        self.assertEqual(
            summary,
            StatsSummary(
                pending_docs=3,
                autocommit_time_seconds=15.0,
                autocommit_time="15 sec",
                deletes_by_id=2,
                deletes_by_query=1,
                deletes_total=3,
                schema_version="drupal-4.3",
                core_name="collection1",
                index_size="1.2 MB",
            ),
        )

    def test_flat_payload_with_dotted_keys(self) -> None:
        summary = get_stats_summary(None, _FLAT_MBEANS)
        self.assertEqual(summary.pending_docs, 0)
        self.assertEqual(summary.autocommit_time_seconds, 90.0)
        self.assertEqual(summary.autocommit_time, "1 min 30 sec")
        self.assertEqual(summary.deletes_total, 4)
        self.assertEqual(summary.core_name, "books")
        self.assertEqual(summary.index_size, "5 KB")
        self.assertIsNone(summary.schema_version)

    def test_malformed_payloads_yield_empty_summary(self) -> None:
        for payload in (None, {}, {"solr-mbeans": "oops"}, {"solr-mbeans": {"UPDATEHANDLER": "x"}}, []):
            with self.subTest(payload=payload):
                self.assertEqual(get_stats_summary(None, payload), StatsSummary())

    def test_version_override_is_padded(self) -> None:
        self.assertEqual(get_version("7", None), EngineVersion(7, 0, 0))
        self.assertEqual(str(get_version("7.7", {"lucene": {"solr-spec-version": "8.1.1"}})), "7.7.0")

    def test_version_from_server_info(self) -> None:
        version = get_version("", {"lucene": {"solr-spec-version": "8.11.2-SNAPSHOT"}})
        self.assertEqual(version, EngineVersion(8, 11, 2))
        self.assertEqual(version.branch, "8.x")

    def test_unknown_version(self) -> None:
        self.assertEqual(str(get_version(None, None)), "0.0.0")
        self.assertEqual(str(get_version(None, {"lucene": "?"})), "0.0.0")


class TestFormatInterval(unittest.TestCase):
    def test_intervals(self) -> None:
        cases = {
            0: "0 sec",
            1: "1 sec",
            90: "1 min 30 sec",
            3600: "1 hour",
            3605: "1 hour",
            8 * 86400 + 3600: "1 week 1 day",
            30 * 86400: "1 month",
            45 * 86400: "1 month 2 weeks",
            2 * 365 * 86400: "2 years",
        }
        for seconds, expected in cases.items():
            with self.subTest(seconds=seconds):
                self.assertEqual(format_interval(seconds), expected)

    def test_granularity(self) -> None:
        self.assertEqual(format_interval(3661, granularity=3), "1 hour 1 min 1 sec")
        self.assertEqual(format_interval(3661, granularity=1), "1 hour")


if __name__ == "__main__":
    unittest.main()
