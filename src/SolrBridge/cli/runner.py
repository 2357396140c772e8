"""Command runner for coordinating CLI execution.

Manages logging configuration, component lifecycle and error handling for
command execution.
"""

from __future__ import annotations

from typing import Callable, TypeVar

import click

from SolrBridge.cli.commands import HealthCommand, InfoCommand, PingCommand, SearchCommand
from SolrBridge.config import AppConfig
from SolrBridge.core.query import SearchQuery
from SolrBridge.gateway.gateway import SolrGateway
from SolrBridge.services import create_gateways, create_search_service
from SolrBridge.services.health import HealthReport
from SolrBridge.utils.log import configure_logging, log

T = TypeVar("T")


class CommandRunner:
    """Orchestrates command execution with proper resource management."""

    def __init__(self, config: AppConfig) -> None:
        """Initialize command runner.

        Args:
            config: Application configuration.
        """
        self.config = config

    def run_ping(self, action: str, server_name: str | None = None) -> float:
        """Ping one server.

        Raises:
            click.Abort: When the server cannot be reached.
        """
        return self._run(action, lambda: self._with_gateway(server_name, lambda gw: PingCommand(gw).execute()))

    def run_info(self, action: str, server_name: str | None = None) -> None:
        """Print server version and core statistics.

        Raises:
            click.Abort: When the server cannot be reached.
        """
        self._run(action, lambda: self._with_gateway(server_name, lambda gw: InfoCommand(gw).execute()))

    def run_health(self, action: str) -> HealthReport:
        """Report reachability of every configured server."""

        def health() -> HealthReport:
            gateways = create_gateways(self.config)
            try:
                return HealthCommand(gateways).execute()
            finally:
                for gateway in gateways:
                    gateway.close()

        return self._run(action, health)

    def run_search(self, action: str, query: SearchQuery, server_name: str | None = None) -> None:
        """Execute a search and print the results.

        Raises:
            click.Abort: When the search fails.
        """

        def search() -> None:
            service = create_search_service(self.config, server_name)
            with service.gateway:
                SearchCommand(search_service=service, query=query).execute()

        self._run(action, search)

    def _with_gateway(self, server_name: str | None, fn: Callable[[SolrGateway], T]) -> T:
        with SolrGateway.from_server_config(self.config.server(server_name)) as gateway:
            return fn(gateway)

    def _run(self, action: str, fn: Callable[[], T]) -> T:
        configure_logging(
            level=self.config.runtime.level,
            action=action,
            log_to_file=self.config.runtime.to_file,
            log_dir=self.config.runtime.dir,
        )
        try:
            return fn()
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("%s failed: %s", action.capitalize(), e)
            raise click.Abort from e
