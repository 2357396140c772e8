"""Pure extraction of application data from raw Solr payloads."""

from __future__ import annotations

from SolrBridge.response.excerpt import extract_excerpt, format_highlighting
from SolrBridge.response.stats import format_interval, get_stats_summary, get_version

__all__ = [
    "extract_excerpt",
    "format_highlighting",
    "format_interval",
    "get_stats_summary",
    "get_version",
]
