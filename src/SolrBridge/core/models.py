from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence

FieldMapping = Mapping[str, str]

_TEXT_TYPES: frozenset[str] = frozenset({"text"})
_LEADING_INT_RE = re.compile(r"^\s*(\d+)")


@dataclass(frozen=True, slots=True)
class IndexField:
    """Description of an abstract index field.

    Attributes:
        name: Human readable label, used in warnings.
        type: Data type id (e.g. "text", "string", "integer", "date").
    """

    name: str
    type: str


def is_text_type(type_id: str, text_types: frozenset[str] = _TEXT_TYPES) -> bool:
    """Return True if the data type is tokenized fulltext."""
    return type_id in text_types or type_id.startswith("solr_text")


@dataclass(frozen=True, slots=True)
class SpatialFilter:
    """Location filter around a point.

    `field`, `lat` and `lon` are required; a filter missing any of them is
    ignored by the spatial builder.
    """

    field: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    radius: Optional[float] = None
    method: str = "geofilt"


@dataclass(frozen=True, slots=True)
class GroupingSpec:
    """Result grouping (field collapsing) request.

    Attributes:
        fields: Abstract field ids to group on. Fulltext fields are rejected.
        truncate: Compute facet counts on the most relevant document per group.
        group_facet: Compute grouped facets.
        group_sort: Sort inside each group as (field, direction) pairs.
        group_limit: Documents returned per group; Solr's own default is 1.
    """

    fields: Sequence[str] = ()
    truncate: bool = False
    group_facet: bool = False
    group_sort: Sequence[tuple[str, str]] = ()
    group_limit: Optional[int] = None


@dataclass(frozen=True, slots=True)
class HighlightConfig:
    """Which highlighting passes are requested/evaluated."""

    excerpt: bool = False
    highlight: bool = False


@dataclass(frozen=True, slots=True, order=True)
class EngineVersion:
    """Solr version triple."""

    major: int = 0
    minor: int = 0
    patch: int = 0

    @classmethod
    def parse(cls, version: str | None) -> EngineVersion:
        """Parse a version string, padding missing components with zero.

        Args:
            version: Version string such as "8", "7.7" or "8.11.2".

        Returns:
            Parsed version; unparsable components become 0.
        """
        parts = (str(version or "").strip().split(".") + ["0", "0", "0"])[:3]
        return cls(*(_leading_int(part) for part in parts))

    @property
    def branch(self) -> str:
        return f"{self.major}.x"

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def _leading_int(text: str) -> int:
    match = _LEADING_INT_RE.match(text)
    return int(match.group(1)) if match else 0


@dataclass(frozen=True, slots=True)
class StatsSummary:
    """Normalized core statistics.

    Every attribute is None when the underlying statistic is unavailable.
    """

    pending_docs: Optional[int] = None
    autocommit_time_seconds: Optional[float] = None
    autocommit_time: Optional[str] = None
    deletes_by_id: Optional[int] = None
    deletes_by_query: Optional[int] = None
    deletes_total: Optional[int] = None
    schema_version: Optional[str] = None
    core_name: Optional[str] = None
    index_size: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ExcerptResult:
    """Highlighting extracted for one result.

    Attributes:
        excerpt: Joined excerpt snippets, empty when excerpts are disabled.
        field_overrides: Abstract field id -> highlighted values that should
            replace the retrieved field data.
    """

    excerpt: str = ""
    field_overrides: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "field_overrides", MappingProxyType(dict(self.field_overrides)))


@dataclass(frozen=True, slots=True)
class ResultItem:
    """One search hit mapped back to abstract field ids."""

    id: str
    score: Optional[float]
    fields: Mapping[str, Any]
    excerpt: Optional[str] = None


@dataclass(frozen=True, slots=True)
class SearchResults:
    """Result set of one executed query.

    Attributes:
        total: Number of matching documents (or groups when grouping).
        items: Mapped result items in response order.
        warnings: Messages for requested features that were skipped.
    """

    total: int
    items: Sequence[ResultItem] = ()
    warnings: Sequence[str] = ()
