"""Command implementations for the SolrBridge CLI.

Encapsulates what each command does, separated from CLI parameter handling.
Results are written to the console via logging.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from SolrBridge.core.keys import Conjunction, KeywordGroup, Term
from SolrBridge.core.models import IndexField, SearchResults
from SolrBridge.core.query import SearchQuery
from SolrBridge.gateway.gateway import SolrGateway
from SolrBridge.response.excerpt import FULLTEXT_PREFIX
from SolrBridge.services.health import STATUS_OK, HealthReport, check_servers
from SolrBridge.services.search import SolrSearchService
from SolrBridge.utils.log import log


@dataclass(slots=True)
class PingCommand:
    """Ping one server's core."""

    gateway: SolrGateway

    def execute(self) -> float:
        seconds = self.gateway.ping()
        log.info("Solr server %s reachable in %.3fs: %s", self.gateway.name, seconds, self.gateway.core_link())
        return seconds


@dataclass(slots=True)
class InfoCommand:
    """Print version and core statistics of one server."""

    gateway: SolrGateway

    def execute(self) -> None:
        version = self.gateway.solr_version()
        stats = self.gateway.stats_summary()
        log.info("Server: %s (%s)", self.gateway.name, self.gateway.server_uri())
        log.info("Core: %s", self.gateway.core_link())
        log.info("Solr version: %s (branch %s)", version, version.branch)
        log.info("Core name: %s", _fmt(stats.core_name))
        log.info("Schema version: %s", _fmt(stats.schema_version))
        log.info("Index size: %s", _fmt(stats.index_size))
        log.info("Pending documents: %s", _fmt(stats.pending_docs))
        log.info("Autocommit time: %s", _fmt(stats.autocommit_time))
        log.info(
            "Pending deletions: %s (by id: %s, by query: %s)",
            _fmt(stats.deletes_total),
            _fmt(stats.deletes_by_id),
            _fmt(stats.deletes_by_query),
        )


@dataclass(slots=True)
class HealthCommand:
    """Ping every configured server and report."""

    gateways: Sequence[SolrGateway]

    def execute(self) -> HealthReport:
        report = check_servers(self.gateways)
        if report.status == STATUS_OK:
            log.info("[%s] %s", report.status, report.message)
        else:
            log.error("[%s] %s", report.status, report.message)
        return report


@dataclass(slots=True)
class SearchCommand:
    """Run one query and print the results."""

    search_service: SolrSearchService
    query: SearchQuery

    def execute(self) -> SearchResults:
        log.debug("Running query name=%s keys=%s", self.query.name, self.query.keys)
        results = self.search_service.search(self.query)
        for warning in results.warnings:
            log.warning("%s", warning)
        log.info("Found %d results", results.total)
        for line in render_results(results).splitlines():
            log.info(line)
        return results


def build_cli_query(
    keys: Sequence[str],
    *,
    conjunction: str = "AND",
    negate: bool = False,
    fields: Sequence[str] = (),
    filters: Sequence[str] = (),
    sorts: Sequence[str] = (),
    offset: int = 0,
    limit: int = 10,
    seed: int | None = None,
) -> SearchQuery:
    """Build a query from command line values.

    Args:
        keys: Search terms.
        conjunction: How the terms are combined.
        negate: Whether to negate the combined terms.
        fields: "name=solr_field" mappings. Fields whose Solr name starts
            with "tm_" are fulltext fields.
        filters: Raw Solr filter queries.
        sorts: "name[:direction]" sorts.
        offset: Offset of the first result.
        limit: Number of results.
        seed: Random sort seed.

    Returns:
        Search query.

    Raises:
        ValueError: If a field mapping is malformed.
    """
    field_mapping: dict[str, str] = {}
    index_fields: dict[str, IndexField] = {}
    for item in fields:
        name, sep, solr_field = item.partition("=")
        if not sep or not name.strip() or not solr_field.strip():
            raise ValueError(f"Field mapping must look like name=solr_field: {item}")
        name, solr_field = name.strip(), solr_field.strip()
        field_mapping[name] = solr_field
        index_fields[name] = IndexField(name, "text" if solr_field.startswith(FULLTEXT_PREFIX) else "string")

    sort_pairs: list[tuple[str, str]] = []
    for item in sorts:
        name, _, direction = item.partition(":")
        sort_pairs.append((name.strip(), direction.strip() or "asc"))

    key_tree = None
    if keys:
        key_tree = KeywordGroup(
            conjunction=Conjunction(conjunction.upper()),
            negation=negate,
            children=tuple(Term(key) for key in keys),
        )

    return SearchQuery(
        field_mapping=field_mapping,
        index_fields=index_fields,
        keys=key_tree,
        filters={f"fq{idx}": fq for idx, fq in enumerate(filters)},
        sorts=tuple(sort_pairs),
        random_seed=seed,
        offset=offset,
        limit=limit,
    )


def render_results(results: SearchResults) -> str:
    """Render result items into a human-readable text block."""
    lines: list[str] = []
    for idx, item in enumerate(results.items, start=1):
        score = f"{item.score:.3f}" if item.score is not None else "-"
        lines.append(f"{idx}. {item.id}  score={score}")
        for name, value in item.fields.items():
            if isinstance(value, (list, tuple)):
                value = " | ".join(str(v) for v in value)
            lines.append(f"   {name}: {value}")
        if item.excerpt:
            lines.append(f"   Excerpt: {item.excerpt}")
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"


def _fmt(value: object) -> str:
    return "-" if value is None else str(value)
