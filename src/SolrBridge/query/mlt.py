""""More like this" (similarity) query builder."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Sequence

from SolrBridge.core.models import EngineVersion, IndexField, is_text_type
from SolrBridge.core.request import SolrRequest
from SolrBridge.errors import UnsupportedField
from SolrBridge.utils.log import log

# Solr field name prefixes by type letter: d = date, i = integer, f = float.
ALWAYS_EXCLUDED_PREFIXES = frozenset({"d"})
# Solr 4 cannot use numeric fields in MLT queries.
DEFAULT_MLT_EXCLUSIONS: Mapping[int, frozenset[str]] = MappingProxyType({4: frozenset({"i", "f"})})


def build_similarity_query(
    request: SolrRequest,
    fields: Sequence[str],
    index_fields: Mapping[str, IndexField],
    field_map: Mapping[str, str],
    version: EngineVersion,
    *,
    exclusions: Mapping[int, frozenset[str]] = DEFAULT_MLT_EXCLUSIONS,
) -> tuple[SolrRequest | None, list[UnsupportedField]]:
    """Turn a select request into a "more like this" request.

    The similarity mode replaces the query handler, so it is expressed as a
    request customization (`qt=mlt`) rather than a plain parameter.

    Args:
        request: Base request; its query, filters, paging and field list are
            carried over. It is not modified.
        fields: Abstract fields to look for similarities in.
        index_fields: Abstract field id -> field description.
        field_map: Abstract field id -> Solr field name.
        version: Detected Solr version.
        exclusions: Solr major version -> field type prefixes that are not
            supported by that version.

    Returns:
        Tuple of (new request or None, warnings). None means no similarity
        query applies: no fields were requested or none is usable.
    """
    if not fields:
        return None, []

    excluded_prefixes = ALWAYS_EXCLUDED_PREFIXES | exclusions.get(version.major, frozenset())
    warnings: list[UnsupportedField] = []
    mlt_fields: list[str] = []
    min_word_length_fields: list[str] = []
    for field in fields:
        solr_field = field_map.get(field)
        if not solr_field:
            warnings.append(UnsupportedField(field, f"More like this is not supported for unmapped field {field}."))
            continue
        if solr_field[0] in excluded_prefixes:
            warnings.append(
                UnsupportedField(field, f"More like this is not supported for field {field} on Solr {version}.")
            )
            continue
        mlt_fields.append(solr_field)
        index_field = index_fields.get(field)
        # Word length heuristics make no sense for non-text data.
        if index_field is not None and not is_text_type(index_field.type):
            min_word_length_fields.append(solr_field)

    for warning in warnings:
        log.warning("%s", warning)

    if not mlt_fields:
        return None, warnings

    mlt = SolrRequest(
        q=request.q,
        handler="select",
        fields=list(request.fields),
        start=request.start,
        rows=request.rows,
        filter_queries=dict(request.filter_queries),
    )
    mlt.set_param("mlt.fl", ",".join(mlt_fields))
    for solr_field in min_word_length_fields:
        mlt.add_param(f"f.{solr_field}.mlt.minwl", 0)
    mlt.set_param("mlt.mindf", 1)
    mlt.set_param("mlt.mintf", 1)
    mlt.customizations["qt"] = "mlt"
    return mlt, warnings
