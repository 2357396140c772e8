from __future__ import annotations

"""Public configuration API for SolrBridge."""

from SolrBridge.config.app import (
    AppConfig,
    load_config,
    load_config_with_defaults,
    parse_config_dict,
)
from SolrBridge.config.runtime import RuntimeConfig
from SolrBridge.config.server import ConnectorConfig, SearchOptions, ServerConfig

__all__ = [
    "RuntimeConfig",
    "ConnectorConfig",
    "SearchOptions",
    "ServerConfig",
    "AppConfig",
    "load_config",
    "load_config_with_defaults",
    "parse_config_dict",
]
