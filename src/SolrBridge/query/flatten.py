"""Keyword tree -> Solr query string.

Formatting rules per group:

    conjunction | negation | result
    ------------+----------+---------------------------
    AND         | False    | A B C        (A AND B AND C when nested)
    AND         | True     | *:* AND -(A AND B AND C)
    OR          | False    | ((A) OR (B) OR (C))
    OR          | True     | *:* AND -A AND -B AND -C

A group with a single, unnested term collapses to that term (or
`*:* AND -term` when negated). Solr has no standalone top-level "NOT X"
query, so every negation is anchored on the match-all query `*:*`.
"""

from __future__ import annotations

import re

from SolrBridge.core.keys import Conjunction, KeywordGroup, Term

_RE_NEEDS_QUOTE = re.compile(r'[\s+\-&|!(){}\[\]^"~*?:\\/]')
_RE_PHRASE_ESCAPE = re.compile(r'(["\\])')
_RESERVED_WORDS = frozenset({"AND", "OR", "NOT"})


def escape_phrase(term: str) -> str:
    """Escape a term for use in a Solr query string.

    Plain words are returned unchanged. Anything containing query syntax
    characters, whitespace, or equal to a boolean operator is quoted as a
    phrase, with quotes and backslashes escaped.

    Args:
        term: Raw search term.

    Returns:
        Escaped term, or "" for blank input.
    """
    t = term.strip()
    if not t:
        return ""
    if t in _RESERVED_WORDS or _RE_NEEDS_QUOTE.search(t):
        return '"' + _RE_PHRASE_ESCAPE.sub(r"\\\1", t) + '"'
    return t


def flatten_keys(keys: KeywordGroup, is_nested: bool = False) -> str:
    """Flatten a keyword tree into a single Solr query string.

    Args:
        keys: Root keyword group.
        is_nested: Whether `keys` is a child of another group.

    Returns:
        Solr query string describing the same boolean expression, or "" if
        the tree holds no terms.
    """
    is_or = keys.conjunction is Conjunction.OR
    negated = keys.negation

    parts: list[str] = []
    nested_expressions = False
    for child in keys.children:
        if isinstance(child, KeywordGroup):
            sub = flatten_keys(child, is_nested=True)
            if not sub:
                continue
            nested_expressions = True
            # Terms of a negated OR are each prefixed with "-", so a nested
            # expression must stay one unit.
            if is_or and negated:
                sub = f"({sub})"
            parts.append(sub)
        elif isinstance(child, Term):
            escaped = escape_phrase(child.text or "")
            if escaped:
                parts.append(escaped)

    if not parts:
        return ""

    if len(parts) == 1 and not nested_expressions:
        return f"*:* AND -{parts[0]}" if negated else parts[0]

    if is_or:
        if negated:
            return "*:* AND -" + " AND -".join(parts)
        return "((" + ") OR (".join(parts) + "))"

    joined = (" AND " if negated or is_nested else " ").join(parts)
    return f"*:* AND -({joined})" if negated else joined
