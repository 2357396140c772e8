"""Mutable Solr select request.

`SolrRequest` is the caller-owned request object the clause builders write
into. It keeps structured state (filters, sorts, facets, highlighting) so
that builders can inspect and rewrite what earlier builders produced, and
renders to the flat list of HTTP parameters only at the very end.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable


def format_param_value(value: Any) -> str:
    """Render one parameter value the way Solr expects it.

    Booleans become "true"/"false"; integral floats lose their ".0".
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    return str(value)


def format_number(value: float | int) -> str:
    """Format a number without a trailing ".0" (12.0 -> "12", 2.5 -> "2.5")."""
    if isinstance(value, int):
        return str(value)
    return f"{value:.14g}"


@dataclass(slots=True)
class SortClause:
    field: str
    direction: str = "asc"

    def render(self) -> str:
        return f"{self.field} {self.direction}"


@dataclass(slots=True)
class FacetField:
    """Field facet on an abstract field.

    Attributes:
        field: Abstract field id.
        solr_field: Solr field name.
        limit: Maximum number of facet values; 0 leaves Solr's default.
        mincount: Minimum count for a value to be returned.
        missing: Whether to count documents without a value.
    """

    field: str
    solr_field: str
    limit: int = 0
    mincount: int = 1
    missing: bool = False

    def to_params(self) -> list[tuple[str, str]]:
        prefix = f"f.{self.solr_field}.facet"
        params = [("facet.field", self.solr_field)]
        if self.limit:
            params.append((f"{prefix}.limit", str(self.limit)))
        params.append((f"{prefix}.mincount", str(self.mincount)))
        if self.missing:
            params.append((f"{prefix}.missing", "true"))
        return params


@dataclass(slots=True)
class HighlightSettings:
    """Highlighting component settings (`hl.*`)."""

    fields: str = ""
    simple_pre: str = ""
    simple_post: str = ""
    snippets: int | None = None
    fragsize: int | None = None
    merge_contiguous: bool = False
    per_field: dict[str, dict[str, int]] = field(default_factory=dict)

    def for_field(self, name: str) -> dict[str, int]:
        """Return the per-field override mapping for `name`, creating it."""
        return self.per_field.setdefault(name, {})

    def to_params(self) -> list[tuple[str, str]]:
        params = [("hl", "true")]
        if self.fields:
            params.append(("hl.fl", self.fields))
        if self.simple_pre:
            params.append(("hl.simple.pre", self.simple_pre))
        if self.simple_post:
            params.append(("hl.simple.post", self.simple_post))
        if self.snippets is not None:
            params.append(("hl.snippets", str(self.snippets)))
        if self.fragsize is not None:
            params.append(("hl.fragsize", str(self.fragsize)))
        if self.merge_contiguous:
            params.append(("hl.mergeContiguous", "true"))
        for name, overrides in self.per_field.items():
            for setting, value in overrides.items():
                params.append((f"f.{name}.hl.{setting}", str(value)))
        return params


@dataclass(slots=True)
class SolrRequest:
    """Solr select request under construction.

    Attributes:
        q: Main query string.
        handler: Request handler path relative to the core.
        fields: Field list (`fl`).
        start: Offset of the first result.
        rows: Number of results; None leaves Solr's default.
        filter_queries: Keyed filter queries (`fq`), in insertion order.
        sorts: Sort clauses, in priority order.
        facet_fields: Field facets.
        facet_queries: Facet queries (`facet.query`).
        highlighting: Highlighting settings, None when disabled.
        params: Additional (multi-valued) parameters.
        customizations: Request-type customizations added last, overriding
            any parameter of the same name (e.g. `qt=mlt`).
    """

    q: str = "*:*"
    handler: str = "select"
    fields: list[str] = field(default_factory=lambda: ["*", "score"])
    start: int = 0
    rows: int | None = 10
    filter_queries: dict[str, str] = field(default_factory=dict)
    sorts: list[SortClause] = field(default_factory=list)
    facet_fields: list[FacetField] = field(default_factory=list)
    facet_queries: list[str] = field(default_factory=list)
    highlighting: HighlightSettings | None = None
    params: dict[str, list[str]] = field(default_factory=dict)
    customizations: dict[str, str] = field(default_factory=dict)

    def add_param(self, name: str, value: Any) -> None:
        """Append value(s) to a parameter; lists add one value per item."""
        values: Iterable[Any] = value if isinstance(value, (list, tuple)) else (value,)
        bucket = self.params.setdefault(name, [])
        bucket.extend(format_param_value(item) for item in values)

    def set_param(self, name: str, value: Any) -> None:
        self.params.pop(name, None)
        self.add_param(name, value)

    def get_param(self, name: str) -> list[str]:
        return list(self.params.get(name, []))

    def remove_param(self, name: str) -> None:
        self.params.pop(name, None)

    def add_sort(self, field_name: str, direction: str = "asc") -> None:
        self.sorts.append(SortClause(field_name, direction))

    def remove_sort(self, field_name: str) -> None:
        self.sorts = [sort for sort in self.sorts if sort.field != field_name]

    def get_highlighting(self) -> HighlightSettings:
        """Return highlighting settings, enabling highlighting if needed."""
        if self.highlighting is None:
            self.highlighting = HighlightSettings()
        return self.highlighting

    def to_params(self) -> list[tuple[str, str]]:
        """Render the request into ordered (name, value) HTTP parameters."""
        params: list[tuple[str, str]] = [("q", self.q)]
        if self.fields:
            params.append(("fl", ",".join(self.fields)))
        params.append(("start", str(self.start)))
        if self.rows is not None:
            params.append(("rows", str(self.rows)))
        params.extend(("fq", fq) for fq in self.filter_queries.values())
        if self.sorts:
            params.append(("sort", ", ".join(sort.render() for sort in self.sorts)))
        if self.facet_fields or self.facet_queries:
            params.append(("facet", "true"))
            for facet in self.facet_fields:
                params.extend(facet.to_params())
            params.extend(("facet.query", fq) for fq in self.facet_queries)
        if self.highlighting is not None:
            params.extend(self.highlighting.to_params())
        for name, values in self.params.items():
            if name in self.customizations:
                continue
            params.extend((name, value) for value in values)
        params.extend(self.customizations.items())
        return params
