"""Pure translation of abstract query parts into Solr request state."""

from __future__ import annotations

from SolrBridge.query.flatten import escape_phrase, flatten_keys
from SolrBridge.query.grouping import apply_grouping
from SolrBridge.query.highlight import configure_highlighting
from SolrBridge.query.mlt import DEFAULT_MLT_EXCLUSIONS, build_similarity_query
from SolrBridge.query.sorts import build_sorts
from SolrBridge.query.spatial import apply_spatial

__all__ = [
    "DEFAULT_MLT_EXCLUSIONS",
    "apply_grouping",
    "apply_spatial",
    "build_similarity_query",
    "build_sorts",
    "configure_highlighting",
    "escape_phrase",
    "flatten_keys",
]
