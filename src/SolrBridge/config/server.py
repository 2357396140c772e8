"""Solr server configuration: connection settings and search options."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from SolrBridge.config.common import (
    expect_bool,
    expect_choice,
    expect_float,
    expect_int,
    expect_str,
    expect_version_str,
    get_optional_value,
    get_required_value,
    get_section,
)

_ALLOWED_SCHEMES = {"http", "https"}
HTTP_METHODS = {"AUTO", "GET", "POST"}


@dataclass(frozen=True, slots=True)
class ConnectorConfig:
    """Where and how to reach one Solr core.

    Attributes:
        scheme: "http" or "https".
        host: Host name.
        port: TCP port.
        path: Solr web application path.
        core: Core name.
        http_user: Basic auth user, empty to disable authentication.
        http_pass_env: Environment variable holding the basic auth password.
        http_pass: Password resolved from `http_pass_env`.
        timeout: Request timeout in seconds.
    """

    scheme: str = "http"
    host: str = "localhost"
    port: int = 8983
    path: str = "/solr"
    core: Optional[str] = None
    http_user: str = ""
    http_pass_env: str = ""
    http_pass: str = ""
    timeout: float = 5.0


@dataclass(frozen=True, slots=True)
class SearchOptions:
    """Feature toggles consumed by the search service and gateway."""

    excerpt: bool = False
    retrieve_data: bool = False
    highlight_data: bool = False
    skip_schema_check: bool = False
    solr_version: str = ""
    http_method: str = "AUTO"
    autocorrect_spell: bool = True
    autocorrect_suggest_words: bool = True


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """One configured Solr server."""

    name: str
    connector: ConnectorConfig
    options: SearchOptions


def load_server_configs(raw: Mapping[str, Any]) -> tuple[ServerConfig, ...]:
    """Load the `servers` list.

    Args:
        raw: Root configuration mapping.

    Returns:
        Parsed server configurations in configured order.

    Raises:
        TypeError: If config types are invalid.
        ValueError: If required keys are missing.
    """
    servers_obj = raw.get("servers")
    if servers_obj is None:
        raise ValueError("Missing required config: servers")
    if not isinstance(servers_obj, list):
        raise TypeError("servers must be a list")
    return tuple(load_server(item, f"servers[{idx}]") for idx, item in enumerate(servers_obj))


def load_server(value: Any, config_key: str) -> ServerConfig:
    """Parse one server mapping into `ServerConfig`."""
    if not isinstance(value, Mapping):
        raise TypeError(f"{config_key} must be an object")
    name = expect_str(get_required_value(value, "name", f"{config_key}.name"), f"{config_key}.name").strip()
    connector = _load_connector(get_section(value, f"{config_key}.connector", required=True), f"{config_key}.connector")
    options = _load_options(get_section(value, f"{config_key}.options", required=False), f"{config_key}.options")
    return ServerConfig(name=name, connector=connector, options=options)


def _load_connector(section: Mapping[str, Any], key: str) -> ConnectorConfig:
    defaults = ConnectorConfig()
    http_pass_env = expect_str(get_optional_value(section, "http_pass_env", ""), f"{key}.http_pass_env").strip()
    core = expect_str(get_optional_value(section, "core", ""), f"{key}.core").strip()
    return ConnectorConfig(
        scheme=expect_str(get_optional_value(section, "scheme", defaults.scheme), f"{key}.scheme").strip().lower(),
        host=expect_str(get_required_value(section, "host", f"{key}.host"), f"{key}.host").strip(),
        port=expect_int(get_optional_value(section, "port", defaults.port), f"{key}.port"),
        path=expect_str(get_optional_value(section, "path", defaults.path), f"{key}.path").strip(),
        core=core or None,
        http_user=expect_str(get_optional_value(section, "http_user", ""), f"{key}.http_user"),
        http_pass_env=http_pass_env,
        http_pass=_load_secret_from_env(http_pass_env),
        timeout=expect_float(get_optional_value(section, "timeout", defaults.timeout), f"{key}.timeout"),
    )


def _load_options(section: Mapping[str, Any], key: str) -> SearchOptions:
    defaults = SearchOptions()

    def flag(name: str) -> bool:
        return expect_bool(get_optional_value(section, name, getattr(defaults, name)), f"{key}.{name}")

    return SearchOptions(
        excerpt=flag("excerpt"),
        retrieve_data=flag("retrieve_data"),
        highlight_data=flag("highlight_data"),
        skip_schema_check=flag("skip_schema_check"),
        solr_version=expect_version_str(get_optional_value(section, "solr_version", ""), f"{key}.solr_version"),
        http_method=expect_str(
            get_optional_value(section, "http_method", defaults.http_method), f"{key}.http_method"
        ).strip().upper(),
        autocorrect_spell=flag("autocorrect_spell"),
        autocorrect_suggest_words=flag("autocorrect_suggest_words"),
    )


def check_server_configs(servers: tuple[ServerConfig, ...]) -> None:
    """Validate server constraints.

    Raises:
        ValueError: If values violate server constraints.
    """
    if not servers:
        raise ValueError("servers must include at least one server")
    seen: set[str] = set()
    for idx, server in enumerate(servers):
        key = f"servers[{idx}]"
        if not server.name:
            raise ValueError(f"{key}.name must not be empty")
        if server.name in seen:
            raise ValueError(f"{key}.name is duplicated: {server.name}")
        seen.add(server.name)

        connector = server.connector
        expect_choice(connector.scheme, _ALLOWED_SCHEMES, f"{key}.connector.scheme")
        if not connector.host:
            raise ValueError(f"{key}.connector.host must not be empty")
        if not 0 < connector.port < 65536:
            raise ValueError(f"{key}.connector.port must be between 1 and 65535")
        if not connector.core:
            raise ValueError(f"{key}.connector.core must not be empty")
        if connector.timeout <= 0:
            raise ValueError(f"{key}.connector.timeout must be positive")
        if connector.http_user and connector.http_pass_env and not connector.http_pass:
            raise ValueError(
                f"{key}.connector.http_user is set but {connector.http_pass_env} environment variable not set. "
                "Set it in your .env file or shell environment."
            )

        expect_choice(server.options.http_method, HTTP_METHODS, f"{key}.options.http_method")


def _load_secret_from_env(env_name: str) -> str:
    """Load a secret from an environment variable."""
    if not env_name:
        return ""
    return os.getenv(env_name, "").strip()
