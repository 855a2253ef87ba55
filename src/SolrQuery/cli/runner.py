"""Command runner for coordinating CLI execution.

Builds a ``Query`` from command options and config defaults, executes it
through the configured HTTP service and releases the service afterwards.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable

import click

from SolrQuery.config import AppConfig
from SolrQuery.core.query import Query
from SolrQuery.transport import SearchService, SolrHttpService, create_service
from SolrQuery.utils.log import configure_logging, log


@dataclass(frozen=True, slots=True)
class SearchOptions:
    """Options of the ``search`` command; None means "use config default"."""

    query: str
    filters: tuple[str, ...] = ()
    sort: str | None = None
    rows: int | None = None
    start: int = 0
    fields: str | None = None
    parser: str | None = None
    facet_fields: tuple[str, ...] = ()
    debug: bool = False


@dataclass(slots=True)
class CommandRunner:
    """Orchestrates command execution with logging and resource cleanup.

    Attributes:
        config: Application configuration.
        service_builder: Creates the search service; swapped out in tests.
    """

    config: AppConfig
    service_builder: Callable[[AppConfig], SearchService] = field(default=lambda config: create_service(config.solr))

    def build_query(self, options: SearchOptions, service: SearchService) -> Query:
        """Translate command options into a builder."""
        defaults = self.config.query
        query = Query(options.query, service)
        query.set_limit(options.rows or defaults.rows).set_offset(options.start)

        parser = options.parser or defaults.parser
        if parser:
            query.use_query_parser(parser)
        if options.fields:
            query.set_retrieve_fields(options.fields)
        elif defaults.retrieve_fields:
            query.set_retrieve_fields(list(defaults.retrieve_fields))
        if options.filters:
            query.merge_filters(list(options.filters))
        if options.sort:
            query.set_sort(options.sort)
        if options.facet_fields:
            query.facet(min_count=1).set_facet_fields(list(options.facet_fields))
        if options.debug:
            query.debug()
        return query

    def run_search(self, action: str, options: SearchOptions) -> str:
        """Execute the search and return the response as pretty JSON.

        Raises:
            click.Abort: When the search fails.
        """
        configure_logging(
            level=self.config.runtime.level,
            action=action,
            log_to_file=self.config.runtime.to_file,
            log_dir=self.config.runtime.dir,
        )
        service = None
        try:
            service = self.service_builder(self.config)
            query = self.build_query(options, service)
            log.info("Searching %s q=%r", self.config.solr.url, query.query_text)
            response = query.execute()
            _log_summary(response)
            return json.dumps(response, ensure_ascii=False, indent=2)
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("Search failed: %s", e)
            raise click.Abort from e
        finally:
            if isinstance(service, SolrHttpService):
                service.close()


def _log_summary(response: Any) -> None:
    if not isinstance(response, dict):
        return
    body = response.get("response")
    if isinstance(body, dict):
        log.info("Found %s documents, returned %d", body.get("numFound"), len(body.get("docs") or []))
