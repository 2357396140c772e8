"""Spatial (location) filter builder.

Turns abstract location filters into Solr spatial filter queries and rewrites
the parts of the request that touch the same location field:

- range filters on the field (as produced by "distance" UI widgets) are
  folded into the spatial filter as lower/upper distance bounds;
- sorts on the field become distance sorts;
- field facets on the field become concentric distance-bucket facet queries.
"""

from __future__ import annotations

import re
from typing import Mapping, Sequence

from SolrBridge.core.models import SpatialFilter
from SolrBridge.core.request import SolrRequest, format_number
from SolrBridge.utils.log import log

SPATIAL_METHODS = ("geofilt", "bbox")
DEFAULT_SPATIAL_METHOD = "geofilt"
DEFAULT_DISTANCE_STEPS = 5
DEFAULT_FACET_RADIUS = 100.0
LOCATION_PREFIX = "loc"

_RANGE_BOUND = r'"?(\*|\d+(?:\.\d+)?)"?'


def escape_field_name(name: str) -> str:
    """Escape a Solr field name for use on the left side of `field:value`."""
    return name.replace(":", r"\:")


def _range_filter_pattern(solr_field: str) -> re.Pattern[str]:
    return re.compile(
        "^" + re.escape(escape_field_name(solr_field)) + r":\[" + _RANGE_BOUND + " TO " + _RANGE_BOUND + r"\]$"
    )


def apply_spatial(
    request: SolrRequest,
    spatial_filters: Sequence[SpatialFilter],
    field_map: Mapping[str, str],
) -> None:
    """Add spatial filters to the request, in place.

    Args:
        request: Request to modify.
        spatial_filters: Location filters; incomplete ones are ignored.
        field_map: Abstract field id -> Solr field name.
    """
    for spatial in spatial_filters:
        if not spatial.field or spatial.lat is None or spatial.lon is None:
            continue
        solr_field = field_map.get(spatial.field)
        if not solr_field:
            log.warning("Skipping spatial filter on unmapped field: %s", spatial.field)
            continue

        point = f"{format_number(float(spatial.lat))},{format_number(float(spatial.lon))}"
        method = spatial.method if spatial.method in SPATIAL_METHODS else DEFAULT_SPATIAL_METHOD
        radius = float(spatial.radius) if spatial.radius is not None else None
        min_radius: float | None = None

        pattern = _range_filter_pattern(solr_field)
        for key, filter_query in list(request.filter_queries.items()):
            match = pattern.match(filter_query)
            if match is None:
                continue
            del request.filter_queries[key]
            lower, upper = match.groups()
            if lower != "*" and float(lower):
                min_radius = float(lower) if min_radius is None else max(min_radius, float(lower))
            if upper != "*":
                radius = float(upper) if radius is None else min(radius, float(upper))

        # A lower bound needs a function range query, which cannot take a
        # field name containing a colon.
        if min_radius is not None and ":" not in solr_field:
            upper_bound = f" u={format_number(radius)}" if radius is not None else ""
            request.filter_queries[solr_field] = (
                f"{{!frange l={format_number(min_radius)}{upper_bound}}}geodist({solr_field},{point})"
            )
        elif radius is not None:
            request.filter_queries[solr_field] = (
                f"{{!{method} pt={point} sfield={solr_field} d={format_number(radius)}}}"
            )

        for sort in request.sorts:
            if sort.field == solr_field:
                sort.field = f"geodist({solr_field},{point})"

        _replace_distance_facets(
            request,
            field=spatial.field,
            solr_field=solr_field,
            point=point,
            method=method,
            radius=radius,
        )

    # Plain sorting on (multi-valued) location fields is not supported.
    request.sorts = [sort for sort in request.sorts if not sort.field.startswith(LOCATION_PREFIX)]


def _replace_distance_facets(
    request: SolrRequest,
    *,
    field: str,
    solr_field: str,
    point: str,
    method: str,
    radius: float | None,
) -> None:
    """Replace field facets on a location field with distance buckets."""
    remaining = []
    replaced = False
    for facet in request.facet_fields:
        if facet.field != field:
            remaining.append(facet)
            continue
        replaced = True
        steps = facet.limit if facet.limit > 0 else DEFAULT_DISTANCE_STEPS
        step = (radius if radius is not None else DEFAULT_FACET_RADIUS) / steps
        for k in range(steps - 1, 0, -1):
            distance = format_number(step * k)
            request.facet_queries.append(
                f"{{!{method} pt={point} sfield={solr_field} d={distance} key=spatial-{field}-{distance}}}"
            )

    if not replaced:
        return
    request.facet_fields = remaining
    for setting in ("limit", "mincount", "missing"):
        request.remove_param(f"f.{solr_field}.facet.{setting}")
    facet_field_values = [value for value in request.get_param("facet.field") if value != solr_field]
    request.remove_param("facet.field")
    if facet_field_values:
        request.add_param("facet.field", facet_field_values)
