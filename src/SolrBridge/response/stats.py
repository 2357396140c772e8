"""Solr version and core statistics parsing.

Introspection payloads differ between Solr releases (legacy stat names such
as `docsPending` vs. dotted metric names such as
`UPDATE.updateHandler.docsPending`, map vs. flat-list `solr-mbeans`). Every
lookup here is tolerant: a missing or malformed sub-key yields an empty value
rather than an exception.
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Sequence

from dateutil.relativedelta import relativedelta

from SolrBridge.core.models import EngineVersion, StatsSummary
from SolrBridge.utils.log import log

_LEADING_NUMBER_RE = re.compile(r"^\s*(-?\d+)")

_UPDATE_CATEGORIES = ("UPDATEHANDLER", "UPDATE")
_REPLICATION_CATEGORIES = ("QUERYHANDLER", "REPLICATION", "QUERY")


def get_version(override: str | None, server_info: Mapping[str, Any] | None) -> EngineVersion:
    """Return the Solr version.

    Args:
        override: Configured version override ("8", "7.7", ...); zero-padded
            to three components. Takes precedence when non-empty.
        server_info: Payload of the server `admin/info/system` handler.

    Returns:
        Detected version, `0.0.0` when unknown.
    """
    if override is not None and str(override).strip():
        return EngineVersion.parse(str(override))
    spec_version = _dig(server_info, "lucene", "solr-spec-version")
    if spec_version:
        return EngineVersion.parse(str(spec_version))
    return EngineVersion()


def get_stats_summary(
    system_info: Mapping[str, Any] | None,
    mbean_stats: Mapping[str, Any] | None,
) -> StatsSummary:
    """Summarize core statistics.

    Args:
        system_info: Payload of the core `admin/system` handler.
        mbean_stats: Payload of the core `admin/mbeans?stats=true` handler.

    Returns:
        Summary; every field is None when its statistic is unavailable.
    """
    beans = _normalize_mbeans(_dig(mbean_stats, "solr-mbeans"))
    if not beans:
        log.debug("No mbean statistics available, returning empty summary")
        return StatsSummary()

    update_stats = _bean_stats(beans, _UPDATE_CATEGORIES, "updateHandler")
    pending_docs = _as_int(_stat(update_stats, "docsPending", "UPDATE.updateHandler.docsPending"))
    max_time = _as_int(
        _stat(update_stats, "autocommit maxTime", "autoCommitMaxTime", "UPDATE.updateHandler.autoCommitMaxTime")
    )
    deletes_by_id = _as_int(_stat(update_stats, "deletesById", "UPDATE.updateHandler.deletesById"))
    deletes_by_query = _as_int(_stat(update_stats, "deletesByQuery", "UPDATE.updateHandler.deletesByQuery"))

    autocommit_seconds = max_time / 1000 if max_time is not None else None
    deletes_total = None
    if deletes_by_id is not None and deletes_by_query is not None:
        deletes_total = deletes_by_id + deletes_by_query

    core_stats = _bean_stats(beans, ("CORE",), "core")
    replication_stats = _bean_stats(beans, _REPLICATION_CATEGORIES, "/replication")

    return StatsSummary(
        pending_docs=pending_docs,
        autocommit_time_seconds=autocommit_seconds,
        autocommit_time=format_interval(autocommit_seconds) if autocommit_seconds is not None else None,
        deletes_by_id=deletes_by_id,
        deletes_by_query=deletes_by_query,
        deletes_total=deletes_total,
        schema_version=_as_str(_dig(system_info, "core", "schema")),
        core_name=_as_str(_stat(core_stats, "coreName", "CORE.coreName")),
        index_size=_as_str(
            _stat(replication_stats, "indexSize", "REPLICATION./replication.indexSize", "QUERY./replication.indexSize")
        ),
    )


def format_interval(seconds: float, granularity: int = 2) -> str:
    """Format a duration for humans, e.g. 90 -> "1 min 30 sec".

    Args:
        seconds: Duration in seconds; fractions are dropped.
        granularity: Maximum number of units, counting zero units between
            non-zero ones.

    Returns:
        Human readable duration, "0 sec" for zero.
    """
    delta = relativedelta(seconds=int(seconds))
    years, days = divmod(delta.days, 365)
    months, days = divmod(days, 30)
    weeks, days = divmod(days, 7)
    units = (
        (years, "year", "years"),
        (months, "month", "months"),
        (weeks, "week", "weeks"),
        (days, "day", "days"),
        (delta.hours, "hour", "hours"),
        (delta.minutes, "min", "min"),
        (delta.seconds, "sec", "sec"),
    )
    parts: list[str] = []
    for amount, singular, plural in units:
        if amount:
            parts.append(f"{amount} {singular if amount == 1 else plural}")
            granularity -= 1
        elif parts:
            granularity -= 1
        if granularity <= 0:
            break
    return " ".join(parts) if parts else "0 sec"


def _normalize_mbeans(value: Any) -> dict[str, Any]:
    """Return `solr-mbeans` as a category mapping.

    With `json.nl=flat` Solr sends ["CORE", {...}, "QUERYHANDLER", {...}].
    """
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        items = list(value)
        return {
            str(items[idx]): items[idx + 1]
            for idx in range(0, len(items) - 1, 2)
            if isinstance(items[idx], str)
        }
    return {}


def _bean_stats(beans: Mapping[str, Any], categories: Sequence[str], bean: str) -> Mapping[str, Any]:
    for category in categories:
        stats = _dig(beans, category, bean, "stats")
        if isinstance(stats, Mapping):
            return stats
    return {}


def _stat(stats: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if name in stats:
            return stats[name]
    return None


def _dig(value: Any, *path: str) -> Any:
    cur = value
    for key in path:
        if not isinstance(cur, Mapping) or key not in cur:
            return None
        cur = cur[key]
    return cur


def _as_int(value: Any) -> int | None:
    """Coerce a stat value to int; "15000ms" -> 15000."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    match = _LEADING_NUMBER_RE.match(str(value))
    return int(match.group(1)) if match else None


def _as_str(value: Any) -> str | None:
    if value is None or isinstance(value, (Mapping, list)):
        return None
    return str(value)
