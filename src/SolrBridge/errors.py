"""Error kinds raised (or collected) by SolrBridge."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class SolrBridgeError(Exception):
    """Base class for every error raised by SolrBridge."""


class TransportUnreachable(SolrBridgeError):
    """A Solr server or core endpoint could not be reached.

    Attributes:
        uri: Base URI of the endpoint that failed.
        reason: Short description of the underlying transport failure.
    """

    def __init__(self, uri: str, reason: str = "") -> None:
        message = f"Solr endpoint {uri} not reachable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.uri = uri
        self.reason = reason


class RemoteRejected(SolrBridgeError):
    """Solr answered, but the JSON body carries an error list.

    Attributes:
        errors: Raw error payload as returned by Solr.
    """

    def __init__(self, errors: Any, message: str = "Error trying to send a REST request.") -> None:
        super().__init__(f"{message}\nError message(s): {errors!r}")
        self.errors = errors


@dataclass(frozen=True, slots=True)
class UnsupportedField:
    """A requested field that cannot take part in a grouping or similarity query.

    This is collected as a warning next to an otherwise successful result,
    it is never raised.
    """

    field: str
    reason: str

    def __str__(self) -> str:
        return self.reason
