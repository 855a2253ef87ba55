"""CLI package for SolrQuery."""

from __future__ import annotations

__all__ = ["CommandRunner", "SearchOptions", "main"]

from SolrQuery.cli.runner import CommandRunner, SearchOptions
from SolrQuery.cli.ui import cli


def main() -> None:
    """Run SolrQuery CLI.

    Entry point referenced by the ``solrq`` console script in pyproject.toml.
    """
    cli()
