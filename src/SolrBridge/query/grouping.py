"""Result grouping (field collapsing) parameters."""

from __future__ import annotations

from typing import Mapping

from SolrBridge.core.models import GroupingSpec, IndexField, is_text_type
from SolrBridge.errors import UnsupportedField
from SolrBridge.query.sorts import sortable_field
from SolrBridge.utils.log import log

GroupParams = dict[str, "str | list[str]"]


def apply_grouping(
    spec: GroupingSpec,
    index_fields: Mapping[str, IndexField],
    field_map: Mapping[str, str],
) -> tuple[GroupParams, list[UnsupportedField]]:
    """Build Solr grouping parameters.

    Only single-valued, non-fulltext fields can be grouped on; other fields
    are skipped with a warning. If no field survives, no grouping parameter
    is emitted at all.

    Args:
        spec: Requested grouping.
        index_fields: Abstract field id -> field description.
        field_map: Abstract field id -> Solr field name.

    Returns:
        Tuple of (params, warnings). `group.field` is a list, every other
        value a string.
    """
    warnings: list[UnsupportedField] = []
    group_fields: list[str] = []
    for field in spec.fields:
        index_field = index_fields.get(field)
        label = index_field.name if index_field is not None else field
        if index_field is not None and is_text_type(index_field.type):
            warnings.append(
                UnsupportedField(
                    field,
                    f"Grouping is not supported for field {label}. "
                    'Only single-valued fields not indexed as "Fulltext" are supported.',
                )
            )
            continue
        solr_field = field_map.get(field)
        if not solr_field:
            warnings.append(UnsupportedField(field, f"Grouping is not supported for field {label}. It is not indexed."))
            continue
        group_fields.append(solr_field)

    for warning in warnings:
        log.warning("%s", warning)

    if not group_fields:
        return {}, warnings

    params: GroupParams = {"group": "true", "group.ngroups": "true"}
    if spec.truncate:
        params["group.truncate"] = "true"
    if spec.group_facet:
        params["group.facet"] = "true"
    params["group.field"] = group_fields

    group_sorts = [
        f"{sortable_field(field_map[field])} {str(direction).lower()}"
        for field, direction in spec.group_sort
        if field_map.get(field)
    ]
    if group_sorts:
        params["group.sort"] = ", ".join(group_sorts)

    # Solr already returns one document per group by default.
    if spec.group_limit and spec.group_limit != 1:
        params["group.limit"] = str(spec.group_limit)

    return params, warnings
