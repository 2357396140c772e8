"""Sort clause builder."""

from __future__ import annotations

import random
from typing import Mapping, Sequence

from SolrBridge.core.request import SortClause
from SolrBridge.utils.log import log

RANDOM_SORT_FIELD = "search_api_random"
RANDOM_FIELD_PREFIX = "random_"
SINGLE_STRING_PREFIX = "ss_"
SORT_FIELD_PREFIX = "sort_"

_MAX_SEED = 2**31 - 1


def sortable_field(solr_field: str) -> str:
    """Map a single-valued string field to its non-tokenized sort copy.

    The schema keeps a `sort_*` copy of every `ss_*` field; sorting on the
    latter would use the analyzed value.
    """
    if solr_field.startswith(SINGLE_STRING_PREFIX):
        return SORT_FIELD_PREFIX + solr_field[len(SINGLE_STRING_PREFIX):]
    return solr_field


def random_sort_field(seed: int | None = None) -> str:
    """Return the query-time random field name for a seed.

    A fresh seed is drawn for every call unless one is given; pin the seed to
    keep the order stable across result pages.
    """
    if seed is None:
        seed = random.randint(0, _MAX_SEED)
    return f"{RANDOM_FIELD_PREFIX}{seed}"


def build_sorts(
    sorts: Sequence[tuple[str, str]],
    field_map: Mapping[str, str],
    *,
    seed: int | None = None,
) -> list[SortClause]:
    """Translate abstract sorts into Solr sort clauses.

    Args:
        sorts: (abstract field, direction) pairs in priority order.
        field_map: Abstract field id -> Solr field name.
        seed: Optional random seed for the random-order field.

    Returns:
        Sort clauses in input order, directions lower-cased. Fields missing
        from `field_map` are skipped.
    """
    clauses: list[SortClause] = []
    for field, direction in sorts:
        if field == RANDOM_SORT_FIELD:
            solr_field = random_sort_field(seed)
        else:
            mapped = field_map.get(field)
            if not mapped:
                log.warning("Skipping sort on unmapped field: %s", field)
                continue
            solr_field = sortable_field(mapped)
        clauses.append(SortClause(solr_field, str(direction).lower()))
    return clauses
