"""Search service: abstract query in, mapped result items out."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from SolrBridge.config.server import SearchOptions
from SolrBridge.core.models import HighlightConfig, ResultItem, SearchResults
from SolrBridge.core.query import SearchQuery
from SolrBridge.core.request import FacetField, SolrRequest
from SolrBridge.gateway.gateway import SolrGateway
from SolrBridge.query import (
    apply_grouping,
    apply_spatial,
    build_similarity_query,
    build_sorts,
    configure_highlighting,
    flatten_keys,
)
from SolrBridge.response.excerpt import FULLTEXT_PREFIX, extract_excerpt
from SolrBridge.utils.log import log

MATCH_ALL = "*:*"
ID_FIELD = "id"


@dataclass(slots=True)
class SolrSearchService:
    """Application service that runs abstract queries against one Solr core."""

    gateway: SolrGateway
    options: SearchOptions = field(default_factory=SearchOptions)

    @property
    def highlight_config(self) -> HighlightConfig:
        return HighlightConfig(excerpt=self.options.excerpt, highlight=self.options.highlight_data)

    def build_request(self, query: SearchQuery) -> tuple[SolrRequest, list[str]]:
        """Translate an abstract query into a Solr request.

        Only a similarity query needs the server (to detect its version);
        everything else is pure translation.

        Args:
            query: Abstract query.

        Returns:
            Tuple of (request, warnings). Warnings name requested features
            that were skipped.
        """
        field_map = query.field_mapping
        warnings: list[str] = []

        keys = flatten_keys(query.keys) if query.keys is not None else ""
        request = SolrRequest(
            q=keys or MATCH_ALL,
            fields=["*", "score"] if self.options.retrieve_data else [ID_FIELD, "score"],
            start=query.offset,
            rows=query.limit,
            filter_queries=dict(query.filters),
        )
        if keys:
            request.set_param("defType", "edismax")
            request.set_param("q.op", "AND")
            fulltext_fields = [name for name in field_map.values() if name.startswith(FULLTEXT_PREFIX)]
            if fulltext_fields:
                request.set_param("qf", " ".join(fulltext_fields))

        if query.mlt_fields:
            mlt, mlt_warnings = build_similarity_query(
                request,
                query.mlt_fields,
                query.index_fields,
                field_map,
                self.gateway.solr_version(),
            )
            warnings.extend(str(warning) for warning in mlt_warnings)
            if mlt is not None:
                request = mlt

        for facet in query.facets:
            solr_field = field_map.get(facet.field)
            if not solr_field:
                warnings.append(f"Facet on unmapped field {facet.field} was skipped.")
                continue
            request.facet_fields.append(
                FacetField(facet.field, solr_field, limit=facet.limit, mincount=facet.mincount, missing=facet.missing)
            )

        request.sorts = build_sorts(query.sorts, field_map, seed=query.random_seed)
        apply_spatial(request, query.spatial, field_map)

        if query.grouping is not None:
            group_params, group_warnings = apply_grouping(query.grouping, query.index_fields, field_map)
            warnings.extend(str(warning) for warning in group_warnings)
            for name, value in group_params.items():
                request.add_param(name, value)

        configure_highlighting(request, excerpt=self.options.excerpt, highlight=self.options.highlight_data)
        return request, warnings

    def search(self, query: SearchQuery) -> SearchResults:
        """Execute a query and map the response.

        Raises:
            TransportUnreachable: If the core cannot be reached.
            RemoteRejected: If the response cannot be decoded.
        """
        request, warnings = self.build_request(query)
        response = self.gateway.select(request)

        total, docs = _docs_from_response(response)
        items = [self._map_doc(response, doc, query.field_mapping) for doc in docs]
        log.debug("Query %s returned %d of %d results", query.name or "-", len(items), total)
        return SearchResults(total=total, items=items, warnings=warnings)

    def _map_doc(self, response: Mapping[str, Any], doc: Mapping[str, Any], field_map: Mapping[str, str]) -> ResultItem:
        solr_id = str(doc.get(ID_FIELD, ""))
        fields = {name: doc[solr_field] for name, solr_field in field_map.items() if solr_field in doc}
        excerpt = None
        highlighting = extract_excerpt(response, solr_id, field_map, self.highlight_config)
        if highlighting is not None:
            fields.update(highlighting.field_overrides)
            excerpt = highlighting.excerpt or None
        score = doc.get("score")
        return ResultItem(
            id=solr_id,
            score=float(score) if isinstance(score, (int, float)) else None,
            fields=fields,
            excerpt=excerpt,
        )


def _docs_from_response(response: Mapping[str, Any]) -> tuple[int, Sequence[Mapping[str, Any]]]:
    """Return (total, docs) from a flat or grouped select response.

    For grouped responses the total is the number of groups and the docs of
    all groups are concatenated in response order.
    """
    grouped = response.get("grouped")
    if isinstance(grouped, Mapping) and grouped:
        total = 0
        docs: list[Mapping[str, Any]] = []
        for group_field in grouped.values():
            if not isinstance(group_field, Mapping):
                continue
            total += int(group_field.get("ngroups") or 0)
            for group in group_field.get("groups") or []:
                docs.extend(group.get("doclist", {}).get("docs") or [])
        return total, docs

    result = response.get("response")
    if not isinstance(result, Mapping):
        return 0, []
    return int(result.get("numFound") or 0), list(result.get("docs") or [])
