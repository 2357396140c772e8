from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from SolrBridge.core.keys import KeywordGroup
from SolrBridge.core.models import GroupingSpec, IndexField, SpatialFilter


@dataclass(frozen=True, slots=True)
class FacetRequest:
    """Field facet requested on an abstract field."""

    field: str
    limit: int = 0
    mincount: int = 1
    missing: bool = False


@dataclass(frozen=True, slots=True)
class SearchQuery:
    """Abstract search intent passed through the service layer.

    Field references are abstract ids; `field_mapping` resolves them to Solr
    field names and `index_fields` describes their data types. SolrBridge
    never derives either mapping itself.

    Attributes:
        field_mapping: Abstract field id -> Solr field name.
        index_fields: Abstract field id -> field description.
        keys: Fulltext keyword tree, None for "match all".
        filters: Keyed raw Solr filter queries.
        sorts: (abstract field, direction) pairs in priority order. The
            field "search_api_random" requests random ordering.
        facets: Field facets.
        spatial: Location filters.
        grouping: Optional result grouping.
        mlt_fields: Abstract fields for a "more like this" query; empty for
            a regular query.
        random_seed: Seed pinning random ordering across pages.
        offset: Offset of the first result.
        limit: Number of results, None for Solr's default.
        name: Optional query name for display.
    """

    field_mapping: Mapping[str, str] = field(default_factory=dict)
    index_fields: Mapping[str, IndexField] = field(default_factory=dict)
    keys: Optional[KeywordGroup] = None
    filters: Mapping[str, str] = field(default_factory=dict)
    sorts: Sequence[tuple[str, str]] = ()
    facets: Sequence[FacetRequest] = ()
    spatial: Sequence[SpatialFilter] = ()
    grouping: Optional[GroupingSpec] = None
    mlt_fields: Sequence[str] = ()
    random_seed: Optional[int] = None
    offset: int = 0
    limit: Optional[int] = 10
    name: Optional[str] = None
