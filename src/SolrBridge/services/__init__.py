"""Service layer for SolrBridge.

Provides the search and health services and factory functions for
component creation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from SolrBridge.gateway.gateway import SolrGateway
from SolrBridge.services.health import HealthReport, check_servers
from SolrBridge.services.search import SolrSearchService

if TYPE_CHECKING:
    from SolrBridge.config import AppConfig


def create_gateways(config: AppConfig) -> list[SolrGateway]:
    """Create one gateway per configured server, in configured order."""
    return [SolrGateway.from_server_config(server) for server in config.servers]


def create_search_service(config: AppConfig, server_name: str | None = None) -> SolrSearchService:
    """Create a search service for one configured server.

    Args:
        config: Application configuration.
        server_name: Server to search; the first configured server when None.

    Returns:
        Configured SolrSearchService instance.
    """
    server = config.server(server_name)
    return SolrSearchService(gateway=SolrGateway.from_server_config(server), options=server.options)


__all__ = [
    "HealthReport",
    "SolrSearchService",
    "check_servers",
    "create_gateways",
    "create_search_service",
]
