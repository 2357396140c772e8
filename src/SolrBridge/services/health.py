"""Reachability report over configured Solr servers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from SolrBridge.errors import SolrBridgeError
from SolrBridge.gateway.gateway import SolrGateway
from SolrBridge.utils.log import log

STATUS_OK = "OK"
STATUS_ERROR = "ERROR"


@dataclass(frozen=True, slots=True)
class HealthReport:
    """Outcome of pinging every configured server.

    Attributes:
        status: "OK" when every server answered, otherwise "ERROR".
        active: Number of configured servers.
        message: Human readable summary.
        unreachable: Names of the servers that could not be reached.
    """

    status: str
    active: int
    message: str
    unreachable: tuple[str, ...] = ()


def check_servers(gateways: Sequence[SolrGateway]) -> HealthReport:
    """Ping every gateway and summarize reachability.

    Args:
        gateways: Gateways of the configured servers.

    Returns:
        Health report; transport failures are reported, not raised.
    """
    unreachable: list[str] = []
    for gateway in gateways:
        try:
            seconds = gateway.ping()
        except SolrBridgeError as e:
            log.warning("Solr server %s not reachable: %s", gateway.name, e)
            unreachable.append(gateway.name)
            continue
        log.debug("Solr server %s reachable in %.3fs", gateway.name, seconds)

    active = len(gateways)
    if not unreachable:
        noun = "server was" if active == 1 else "servers were"
        return HealthReport(STATUS_OK, active, f"All {active} Solr {noun} reachable")
    if len(unreachable) == 1:
        message = f"The Solr server {unreachable[0]} could not be reached"
    else:
        message = f"{len(unreachable)} Solr servers could not be reached"
    return HealthReport(STATUS_ERROR, active, message, tuple(unreachable))
