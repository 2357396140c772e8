"""Solr transport: HTTP client and engine gateway."""

from __future__ import annotations

from SolrBridge.gateway.client import Endpoint, SolrApiClient
from SolrBridge.gateway.gateway import SolrGateway

__all__ = ["Endpoint", "SolrApiClient", "SolrGateway"]
