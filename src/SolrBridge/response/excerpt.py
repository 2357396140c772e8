"""Highlighting extraction from a raw Solr response."""

from __future__ import annotations

import re
from typing import Any, Mapping

from SolrBridge.core.models import ExcerptResult, HighlightConfig
from SolrBridge.query.highlight import EXCERPT_FIELD, HIGHLIGHT_PREFIX, HIGHLIGHT_SUFFIX

FULLTEXT_PREFIX = "tm_"
EXCERPT_SEPARATOR = " … "

_TAG_RE = re.compile(r"<[^>]*>")
# Fragments cut out of markup may start or end inside a tag.
_BROKEN_TAG_RE = re.compile(r"^.*>|<.*$")
# Leading/trailing punctuation left by fragmenting: 0x00-0x2F, :;=, ?@ and
# 0x5B-0x60. "<" and ">" are kept so markup stays valid.
_TRIM_CHARS = (
    "".join(chr(c) for c in range(0x00, 0x30))
    + ":;="
    + "?@"
    + "".join(chr(c) for c in range(0x5B, 0x61))
)


def format_highlighting(value: Any, prefix: str = "<strong>", suffix: str = "</strong>") -> Any:
    """Replace highlight markers with display markup.

    Args:
        value: A string or a list of strings.
        prefix: Markup inserted for the opening marker.
        suffix: Markup inserted for the closing marker.

    Returns:
        Same shape as `value` with markers replaced.
    """
    if isinstance(value, (list, tuple)):
        return [format_highlighting(item, prefix, suffix) for item in value]
    return str(value).replace(HIGHLIGHT_PREFIX, prefix).replace(HIGHLIGHT_SUFFIX, suffix)


def clean_snippet(snippet: str, prefix: str = "<strong>", suffix: str = "</strong>") -> str:
    """Turn one raw excerpt snippet into display text."""
    text = _TAG_RE.sub("", snippet)
    text = _BROKEN_TAG_RE.sub("", text)
    text = format_highlighting(text, prefix, suffix)
    return text.strip(_TRIM_CHARS)


def extract_excerpt(
    response: Mapping[str, Any],
    solr_id: str,
    field_map: Mapping[str, str],
    config: HighlightConfig,
    *,
    prefix: str = "<strong>",
    suffix: str = "</strong>",
) -> ExcerptResult | None:
    """Extract the excerpt and highlighted fields for one result.

    Args:
        response: Decoded Solr response.
        solr_id: Solr document id of the result.
        field_map: Abstract field id -> Solr field name.
        config: Which highlighting passes to evaluate.
        prefix: Display markup for the start of a highlighted term.
        suffix: Display markup for the end of a highlighted term.

    Returns:
        Extracted highlighting, or None when the response carries no
        highlighting block for this document.
    """
    highlighting = response.get("highlighting")
    if not isinstance(highlighting, Mapping) or not isinstance(highlighting.get(solr_id), Mapping):
        return None
    doc_highlighting: Mapping[str, Any] = highlighting[solr_id]

    excerpt = ""
    snippets = doc_highlighting.get(EXCERPT_FIELD)
    if config.excerpt and snippets:
        if isinstance(snippets, str):
            snippets = [snippets]
        cleaned = [clean_snippet(str(snippet), prefix, suffix) for snippet in snippets]
        excerpt = EXCERPT_SEPARATOR.join(snippet for snippet in cleaned if snippet)

    overrides: dict[str, Any] = {}
    if config.highlight:
        for field, solr_field in field_map.items():
            if not solr_field.startswith(FULLTEXT_PREFIX):
                continue
            highlighted = doc_highlighting.get(solr_field)
            if highlighted:
                # Markup is kept here; only the markers are replaced.
                overrides[field] = format_highlighting(highlighted, prefix, suffix)

    return ExcerptResult(excerpt=excerpt, field_overrides=overrides)
