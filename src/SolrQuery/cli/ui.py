"""Click CLI interface definitions."""

from __future__ import annotations

from pathlib import Path

import click
from dotenv import load_dotenv

from SolrQuery.cli.runner import CommandRunner, SearchOptions
from SolrQuery.config import DEFAULT_CONFIG_PATH, load_config_with_defaults


@click.group(help="SolrQuery: build and run Apache Solr searches.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="YAML config file, merged over the default config.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path) -> None:
    """CLI entry group.

    Loads environment variables from a .env file before reading config, so
    ``SOLR_URL`` can be set there.
    """
    load_dotenv()
    ctx.obj = load_config_with_defaults(config_path)


@cli.command("search")
@click.argument("query")
@click.option("--filter", "-f", "filters", multiple=True, help="Filter query (fq); repeatable.")
@click.option("--sort", "-s", default=None, help='Sort expression, e.g. "created desc".')
@click.option("--rows", "-n", type=click.IntRange(min=1), default=None, help="Number of results.")
@click.option("--start", type=click.IntRange(min=0), default=0, show_default=True, help="Result offset.")
@click.option("--fields", default=None, help="Comma-separated fields to return (fl).")
@click.option("--parser", default=None, help="Query parser (defType), e.g. lucene or dismax.")
@click.option("--facet-field", "facet_fields", multiple=True, help="Facet on this field; repeatable.")
@click.option("--debug", is_flag=True, help="Include Solr debug output.")
@click.pass_context
def search_cmd(
    ctx: click.Context,
    query: str,
    filters: tuple[str, ...],
    sort: str | None,
    rows: int | None,
    start: int,
    fields: str | None,
    parser: str | None,
    facet_fields: tuple[str, ...],
    debug: bool,
) -> None:
    """Run QUERY against the configured Solr core and print the JSON response."""
    options = SearchOptions(
        query=query,
        filters=filters,
        sort=sort,
        rows=rows,
        start=start,
        fields=fields,
        parser=parser,
        facet_fields=facet_fields,
        debug=debug,
    )
    runner = CommandRunner(ctx.obj)
    click.echo(runner.run_search(action=ctx.command.name, options=options))
