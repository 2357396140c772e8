"""Highlighting parameters.

Two passes share the highlighting component:

- the excerpt pass highlights the catch-all `spell` field, only to cut short
  snippets out of it;
- the highlight pass highlights the fulltext fields (`tm_*`) in full so that
  retrieved field values can be replaced by their highlighted version.
"""

from __future__ import annotations

from SolrBridge.core.request import SolrRequest

HIGHLIGHT_PREFIX = "[HIGHLIGHT]"
HIGHLIGHT_SUFFIX = "[/HIGHLIGHT]"
EXCERPT_FIELD = "spell"
FULLTEXT_FIELD_PATTERN = "tm_*"
EXCERPT_SNIPPETS = 3
EXCERPT_FRAGSIZE = 70


def configure_highlighting(request: SolrRequest, *, excerpt: bool, highlight: bool) -> None:
    """Set highlighting parameters on the request, in place.

    Args:
        request: Request to modify.
        excerpt: Whether short excerpt snippets are wanted.
        highlight: Whether full highlighted field values are wanted.
    """
    if not (excerpt or highlight):
        return

    hl = request.get_highlighting()
    hl.fields = EXCERPT_FIELD
    hl.simple_pre = HIGHLIGHT_PREFIX
    hl.simple_post = HIGHLIGHT_SUFFIX
    hl.snippets = EXCERPT_SNIPPETS
    hl.fragsize = EXCERPT_FRAGSIZE
    hl.merge_contiguous = True

    if not highlight:
        return

    hl.fields = FULLTEXT_FIELD_PATTERN
    hl.snippets = 1
    hl.fragsize = 0
    if excerpt:
        # The global settings above now describe the full-field pass, so the
        # excerpt field gets its own snippet settings back.
        spell = hl.for_field(EXCERPT_FIELD)
        spell["snippets"] = EXCERPT_SNIPPETS
        spell["fragsize"] = EXCERPT_FRAGSIZE
        # hl.fl cannot list a wildcard pattern together with another field.
        hl.fields = "*"
