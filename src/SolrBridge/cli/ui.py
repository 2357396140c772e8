"""Click CLI interface definitions.

Defines the command-line interface structure and routes commands to their
runners.
"""

from __future__ import annotations

from pathlib import Path

import click
from dotenv import load_dotenv

from SolrBridge.cli.commands import build_cli_query
from SolrBridge.cli.runner import CommandRunner
from SolrBridge.config import load_config_with_defaults
from SolrBridge.config.app import DEFAULT_CONFIG_PATH
from SolrBridge.services.health import STATUS_OK

_server_option = click.option(
    "--server",
    "server_name",
    default=None,
    help="Configured server name (default: the first server).",
)


@click.group(help="SolrBridge: query and inspect Solr servers.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Path to YAML config file.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path) -> None:
    """CLI entry group.

    Loads environment variables from .env file before processing config,
    so that passwords referenced by `http_pass_env` are available.

    Args:
        ctx: Click context.
        config_path: Path to YAML config file, merged over the defaults.
    """
    load_dotenv()

    cfg = load_config_with_defaults(config_path, default_path=DEFAULT_CONFIG_PATH)
    ctx.obj = cfg


@cli.command("ping")
@_server_option
@click.pass_context
def ping_cmd(ctx: click.Context, server_name: str | None) -> None:
    """Ping the core of a configured server."""
    CommandRunner(ctx.obj).run_ping(action=ctx.command.name, server_name=server_name)


@cli.command("info")
@_server_option
@click.pass_context
def info_cmd(ctx: click.Context, server_name: str | None) -> None:
    """Print version and core statistics of a configured server."""
    CommandRunner(ctx.obj).run_info(action=ctx.command.name, server_name=server_name)


@cli.command("health")
@click.pass_context
def health_cmd(ctx: click.Context) -> None:
    """Ping every configured server; exits with status 1 if any is unreachable."""
    report = CommandRunner(ctx.obj).run_health(action=ctx.command.name)
    if report.status != STATUS_OK:
        ctx.exit(1)


@cli.command("search")
@click.argument("keys", nargs=-1)
@click.option("--conjunction", type=click.Choice(["AND", "OR"], case_sensitive=False), default="AND", show_default=True)
@click.option("--negate", is_flag=True, help="Negate the combined keys.")
@click.option("--field", "-f", "fields", multiple=True, help="Field mapping name=solr_field (repeatable).")
@click.option("--filter", "-q", "filters", multiple=True, help="Raw Solr filter query (repeatable).")
@click.option("--sort", "-s", "sorts", multiple=True, help="Sort as name[:asc|desc] (repeatable).")
@click.option("--offset", type=int, default=0, show_default=True)
@click.option("--limit", type=int, default=10, show_default=True)
@click.option("--seed", type=int, default=None, help="Seed for the search_api_random sort.")
@_server_option
@click.pass_context
def search_cmd(
    ctx: click.Context,
    keys: tuple[str, ...],
    conjunction: str,
    negate: bool,
    fields: tuple[str, ...],
    filters: tuple[str, ...],
    sorts: tuple[str, ...],
    offset: int,
    limit: int,
    seed: int | None,
    server_name: str | None,
) -> None:
    """Search a configured server and print the results.

    Raises:
        click.Abort: When the search fails.
    """
    try:
        query = build_cli_query(
            keys,
            conjunction=conjunction,
            negate=negate,
            fields=fields,
            filters=filters,
            sorts=sorts,
            offset=offset,
            limit=limit,
            seed=seed,
        )
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--field") from e
    CommandRunner(ctx.obj).run_search(action=ctx.command.name, query=query, server_name=server_name)
