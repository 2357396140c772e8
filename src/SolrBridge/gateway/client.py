"""Solr HTTP client.

Sends select/admin requests and raw REST requests to a Solr endpoint over
HTTP and returns decoded JSON. Request construction and response
interpretation are handled elsewhere.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

import requests

from SolrBridge.errors import RemoteRejected, TransportUnreachable
from SolrBridge.utils.log import log

DEFAULT_TIMEOUT = 5.0

HEADERS = {
    "User-Agent": "solr-bridge/0.1",
    "Accept": "application/json",
}

# Query parameters the client always adds to select/admin requests.
JSON_WRITER_PARAMS = (("wt", "json"), ("json.nl", "flat"))


@dataclass(frozen=True, slots=True)
class Endpoint:
    """Address of a Solr server or core.

    Attributes:
        key: Endpoint name ("core" or "server").
        scheme: URL scheme.
        host: Host name.
        port: TCP port.
        path: Solr web application path, e.g. "/solr".
        core: Core name; None addresses the bare server.
        http_user: Basic auth user; empty disables authentication.
        http_pass: Basic auth password.
        timeout: Request timeout in seconds.
    """

    key: str
    scheme: str = "http"
    host: str = "localhost"
    port: int = 8983
    path: str = "/solr"
    core: Optional[str] = None
    http_user: str = ""
    http_pass: str = ""
    timeout: float = DEFAULT_TIMEOUT

    @property
    def base_uri(self) -> str:
        """Base URI ending with a slash, e.g. http://localhost:8983/solr/core1/."""
        path = self.path.strip("/")
        uri = f"{self.scheme}://{self.host}:{self.port}/"
        if path:
            uri += f"{path}/"
        if self.core:
            uri += f"{self.core}/"
        return uri

    @property
    def auth(self) -> tuple[str, str] | None:
        return (self.http_user, self.http_pass) if self.http_user else None


class SolrApiClient:
    """Low-level HTTP client for the Solr HTTP API.

    Every transport failure (connection, timeout, HTTP error status) is
    raised as `TransportUnreachable` naming the endpoint. No retries are
    performed.
    """

    def __init__(self, session: requests.Session | None = None) -> None:
        """Initialize the client with a reusable HTTP session.

        Args:
            session: Optional preconfigured session.
        """
        self._session = session or requests.Session()

    def close(self) -> None:
        """Close the underlying HTTP session and release pooled connections."""
        self._session.close()

    def __enter__(self) -> SolrApiClient:
        """Enter context manager."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager and close session."""
        self.close()

    def execute(
        self,
        endpoint: Endpoint,
        handler: str,
        params: Sequence[tuple[str, str]] = (),
        *,
        method: str = "GET",
    ) -> dict[str, Any]:
        """Execute a request handler and decode the JSON response.

        Args:
            endpoint: Target endpoint.
            handler: Handler path relative to the endpoint, e.g. "select"
                or "admin/mbeans?stats=true".
            params: Ordered query parameters; names may repeat.
            method: "GET" or "POST". POST sends the parameters form-encoded.

        Returns:
            Decoded JSON object.

        Raises:
            TransportUnreachable: If the endpoint cannot be reached or
                answers with an HTTP error status.
            RemoteRejected: If the body is not a JSON object.
        """
        url = endpoint.base_uri + handler.lstrip("/")
        all_params = [*params, *JSON_WRITER_PARAMS]
        log.debug("Solr request: method=%s url=%s params=%d", method, url, len(all_params))
        if method.upper() == "POST":
            resp = self._send(endpoint, "POST", url, data=all_params)
        else:
            resp = self._send(endpoint, "GET", url, params=all_params)
        return _decode_json(resp)

    def execute_raw(
        self,
        endpoint: Endpoint,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: str | bytes | None = None,
    ) -> requests.Response:
        """Send a raw request relative to the endpoint's base URI.

        The status is not checked: Solr answers rejected REST commands with an
        error status and a JSON body listing the errors.

        Args:
            endpoint: Target endpoint.
            method: HTTP method.
            path: Path (with optional query string) appended to the base URI.
            headers: Extra request headers.
            body: Raw request body.

        Returns:
            The HTTP response.

        Raises:
            TransportUnreachable: If the endpoint cannot be reached.
        """
        url = endpoint.base_uri + path.lstrip("/")
        log.debug("Solr raw request: method=%s url=%s", method, url)
        return self._send(endpoint, method.upper(), url, headers=headers, data=body, check_status=False)

    def _send(
        self,
        endpoint: Endpoint,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        check_status: bool = True,
        **kwargs: Any,
    ) -> requests.Response:
        try:
            resp = self._session.request(
                method,
                url,
                headers={**HEADERS, **(headers or {})},
                auth=endpoint.auth,
                timeout=endpoint.timeout or DEFAULT_TIMEOUT,
                **kwargs,
            )
            if check_status:
                resp.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status = getattr(e.response, "status_code", None)
            log.debug("Solr HTTP error: url=%s status=%s", url, status)
            raise TransportUnreachable(endpoint.base_uri, f"HTTP {status}") from e
        except requests.exceptions.RequestException as e:
            log.debug("Solr request failed: url=%s error=%s", url, e)
            raise TransportUnreachable(endpoint.base_uri, type(e).__name__) from e
        log.debug("Solr response ok: status=%s bytes=%s", resp.status_code, len(resp.content))
        return resp


def _decode_json(resp: requests.Response) -> dict[str, Any]:
    try:
        payload = resp.json()
    except ValueError as e:
        raise RemoteRejected(["Response body is not valid JSON"], "Error decoding the Solr response.") from e
    if not isinstance(payload, dict):
        raise RemoteRejected(["Response body is not a JSON object"], "Error decoding the Solr response.")
    return payload
