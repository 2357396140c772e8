"""CLI package for SolrBridge.

The click group lives in `ui`, command orchestration in `runner` and the
command logic in `commands`.
"""

from __future__ import annotations

__all__ = ["CommandRunner", "main"]

from SolrBridge.cli.runner import CommandRunner
from SolrBridge.cli.ui import cli


def main() -> None:
    """Run SolrBridge CLI.

    Entry point referenced by console script in pyproject.toml.
    """
    cli()
