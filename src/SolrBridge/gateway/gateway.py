"""Engine gateway: the only I/O boundary towards Solr.

Maintains a `core` endpoint (the default, used for searching and core
introspection) and a `server` endpoint (the bare Solr server, used for
administrative introspection), normalizes transport failures and memoizes
server/core introspection for the lifetime of the instance.
"""

from __future__ import annotations

import json
import os
import time
from typing import Any, Optional
from urllib.parse import urlencode

from SolrBridge.config.server import ConnectorConfig, SearchOptions, ServerConfig
from SolrBridge.core.models import EngineVersion, StatsSummary
from SolrBridge.core.request import SolrRequest
from SolrBridge.errors import RemoteRejected, TransportUnreachable
from SolrBridge.gateway.client import Endpoint, SolrApiClient
from SolrBridge.response.stats import get_stats_summary, get_version
from SolrBridge.utils.log import log

# Requests whose encoded parameters exceed this size are sent as POST when
# the HTTP method is AUTO, to stay below common URL length limits.
AUTO_POST_THRESHOLD = 1024

PING_HANDLER = "admin/ping"
SERVER_INFO_HANDLER = "admin/info/system"
SYSTEM_INFO_HANDLER = "admin/system"
LUKE_HANDLER = "admin/luke"
MBEANS_HANDLER = "admin/mbeans?stats=true"


class SolrGateway:
    """Gateway to one Solr core and its server.

    Attributes:
        name: Display name of the server.
        connector: Connection settings.
        options: Search options (version override, HTTP method).
    """

    def __init__(
        self,
        connector: ConnectorConfig,
        *,
        options: SearchOptions | None = None,
        client: SolrApiClient | None = None,
        name: str = "default",
    ) -> None:
        """Initialize the gateway and register its endpoints.

        Args:
            connector: Connection settings; `core` addresses the core endpoint.
            options: Search options; defaults apply when None.
            client: HTTP client; a new one is created when None.
            name: Display name used in logs and health reports.
        """
        self.name = name
        self.connector = connector
        self.options = options or SearchOptions()
        self._client = client or SolrApiClient()
        self._endpoints = {
            "core": _endpoint_from_connector("core", connector, connector.core),
            "server": _endpoint_from_connector("server", connector, None),
        }
        self._ping: Optional[float] = None
        self._server_info: Optional[dict[str, Any]] = None
        self._system_info: Optional[dict[str, Any]] = None

    @classmethod
    def from_server_config(cls, server: ServerConfig, client: SolrApiClient | None = None) -> SolrGateway:
        """Build a gateway for a configured server."""
        return cls(server.connector, options=server.options, client=client, name=server.name)

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> SolrGateway:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def reset(self) -> None:
        """Forget memoized introspection results."""
        self._ping = None
        self._server_info = None
        self._system_info = None

    def endpoint(self, key: str = "core") -> Endpoint:
        """Return the registered endpoint `core` or `server`."""
        return self._endpoints[key]

    # Introspection

    def ping(self) -> float:
        """Ping the core.

        Returns:
            Round-trip time in seconds of the first successful ping.

        Raises:
            TransportUnreachable: If the core cannot be reached.
        """
        if self._ping is None:
            started = time.perf_counter()
            self._client.execute(self.endpoint("core"), PING_HANDLER)
            self._ping = time.perf_counter() - started
            log.debug("Ping %s: %.3fs", self.name, self._ping)
        return self._ping

    def server_info(self) -> dict[str, Any]:
        """Return (memoized) information about the Solr server."""
        if self._server_info is None:
            self._server_info = self._client.execute(self.endpoint("server"), SERVER_INFO_HANDLER)
        return self._server_info

    def system_info(self) -> dict[str, Any]:
        """Return (memoized) information about the Solr core."""
        if self._system_info is None:
            self._system_info = self._client.execute(self.endpoint("core"), SYSTEM_INFO_HANDLER)
        return self._system_info

    def luke(self) -> dict[str, Any]:
        """Return index metadata from Solr's Luke handler (never memoized)."""
        return self._client.execute(self.endpoint("core"), LUKE_HANDLER)

    def stats_summary(self) -> StatsSummary:
        """Return a fresh summary of the core statistics.

        Raises:
            TransportUnreachable: If the core cannot be reached.
        """
        mbeans = self._client.execute(self.endpoint("core"), MBEANS_HANDLER)
        return get_stats_summary(self.system_info(), mbeans)

    def solr_version(self, force_auto_detect: bool = False) -> EngineVersion:
        """Return the Solr version.

        Args:
            force_auto_detect: Ignore the configured version override and ask
                the server.

        Returns:
            Configured or detected version; `0.0.0` when unknown.
        """
        override = None if force_auto_detect else self.options.solr_version
        if override:
            return get_version(override, None)
        return get_version(None, self.server_info())

    def solr_major_version(self, force_auto_detect: bool = False) -> int:
        return self.solr_version(force_auto_detect).major

    def solr_branch(self, force_auto_detect: bool = False) -> str:
        """Return the Solr branch, e.g. "8.x"."""
        return self.solr_version(force_auto_detect).branch

    # Searching

    def select(self, request: SolrRequest) -> dict[str, Any]:
        """Execute a select request on the core.

        Raises:
            TransportUnreachable: If the core cannot be reached.
            RemoteRejected: If the response cannot be decoded.
        """
        params = request.to_params()
        method = self._http_method_for(params)
        log.debug("Select on %s: handler=%s method=%s q=%s", self.name, request.handler, method, request.q)
        return self._client.execute(self.endpoint("core"), request.handler, params, method=method)

    def _http_method_for(self, params: list[tuple[str, str]]) -> str:
        method = self.options.http_method.upper()
        if method in ("GET", "POST"):
            return method
        return "POST" if len(urlencode(params)) > AUTO_POST_THRESHOLD else "GET"

    # REST passthrough

    def core_rest_get(self, path: str) -> Any:
        return self._rest_request("core", path)

    def core_rest_post(self, path: str, command_json: str = "") -> Any:
        return self._rest_request("core", path, "POST", command_json)

    def server_rest_get(self, path: str) -> Any:
        return self._rest_request("server", path)

    def server_rest_post(self, path: str, command_json: str = "") -> Any:
        return self._rest_request("server", path, "POST", command_json)

    def _rest_request(self, endpoint: str, path: str, method: str = "GET", command_json: str = "") -> Any:
        """Send a REST request and return the decoded body.

        Raises:
            TransportUnreachable: If the endpoint cannot be reached, or
                answers with an error status and no error list.
            RemoteRejected: If the body is not JSON or carries errors.
        """
        headers = {"Accept": "application/json"}
        body = None
        if method == "POST":
            headers["Content-type"] = "application/json"
            body = command_json
        target = self.endpoint(endpoint)
        resp = self._client.execute_raw(target, method, path, headers=headers, body=body)
        failed = resp.status_code >= 400
        try:
            output = json.loads(resp.text) if resp.text else None
        except ValueError as e:
            if failed:
                raise TransportUnreachable(target.base_uri, f"HTTP {resp.status_code}") from e
            raise RemoteRejected(["Response body is not valid JSON"]) from e
        if isinstance(output, dict) and output.get("errors"):
            log.debug("Solr REST request rejected: status=%s path=%s", resp.status_code, path)
            raise RemoteRejected(output["errors"])
        if failed:
            raise TransportUnreachable(target.base_uri, f"HTTP {resp.status_code}")
        return output

    # Links

    def server_uri(self) -> str:
        """Return the server base URI.

        A `localhost` host is replaced by the SERVER_NAME environment
        variable when set, so that links work from other machines.
        """
        uri = self.endpoint("server").base_uri
        server_name = os.environ.get("SERVER_NAME", "").strip()
        if self.connector.host == "localhost" and server_name:
            uri = uri.replace("localhost", server_name)
        return uri

    def core_link(self) -> str:
        """Return the admin UI link to the core."""
        return f"{self.server_uri()}#/{self.connector.core or ''}"


def _endpoint_from_connector(key: str, connector: ConnectorConfig, core: str | None) -> Endpoint:
    return Endpoint(
        key=key,
        scheme=connector.scheme,
        host=connector.host,
        port=connector.port,
        path=connector.path,
        core=core,
        http_user=connector.http_user,
        http_pass=connector.http_pass,
        timeout=connector.timeout,
    )
