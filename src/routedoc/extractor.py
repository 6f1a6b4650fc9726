"""Strategy pipeline driver.

Runs every matched route through the configured strategies, strictly in
route order and strategy order, and freezes the result into an
EndpointMetadata. Route-local failures skip the route; configuration
problems abort the run before the first route is processed.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType

import click

from routedoc.config import DocsConfig
from routedoc.errors import ConfigurationError, RouteError
from routedoc.examples import ExampleGenerator
from routedoc.models import EndpointMetadata
from routedoc.parser.docblock import parse_docblock
from routedoc.routing.base import RouteTable
from routedoc.routing.matcher import MatchedRoute
from routedoc.strategies.base import RouteContext, Strategy, load_class

logger = logging.getLogger("routedoc.extractor")

BUILTIN_STRATEGIES = {
    "metadata": "routedoc.strategies.metadata:MetadataStrategy",
    "url_parameters": "routedoc.strategies.url_parameters:UrlParametersStrategy",
    "query_parameters": "routedoc.strategies.query_parameters:QueryParametersStrategy",
    "body_parameters": "routedoc.strategies.body_parameters:BodyParametersStrategy",
    "headers": "routedoc.strategies.headers:HeadersStrategy",
    "responses": "routedoc.strategies.responses:ResponsesStrategy",
    "response_fields": "routedoc.strategies.response_fields:ResponseFieldsStrategy",
}

HIDDEN_TAG = "hideFromAPIDocumentation"


@dataclass(frozen=True)
class LogEntry:
    processed: bool
    label: str
    reason: str = ""

    @property
    def line(self) -> str:
        if self.processed:
            return f"Processed route: {self.label}"
        if self.reason:
            return f"Skipping route: {self.label} - {self.reason}"
        return f"Skipping route: {self.label}"


def check_ownership(strategies: list[Strategy]) -> None:
    """Reject two strategies owning one field unless both declare a merge."""
    owners: dict[str, list[Strategy]] = {}
    for strategy in strategies:
        for name in strategy.owns:
            owners.setdefault(name, []).append(strategy)
    for name, claimants in owners.items():
        if len(claimants) > 1 and not all(name in s.merges for s in claimants):
            names = ", ".join(s.name for s in claimants)
            raise ConfigurationError(
                f"Field {name!r} is owned by several strategies ({names}) without a merge policy"
            )


class Extractor:
    """Turns matched routes into endpoint metadata."""

    def __init__(self, config: DocsConfig, table: RouteTable, examples: ExampleGenerator | None = None,
                 invoker=None, strategies: list[Strategy] | None = None, echo=click.echo):
        self.config = config
        self.table = table
        self.examples = examples or ExampleGenerator(config.faker_seed, config.randomize_choices)
        self.invoker = invoker
        self.echo = echo
        if strategies is None:
            strategies = [
                load_class(name, BUILTIN_STRATEGIES, Strategy)(config, self.examples, invoker)
                for name in config.strategies
            ]
        check_ownership(strategies)
        self.strategies = strategies
        self.log: list[LogEntry] = []

    @property
    def processed_count(self) -> int:
        return sum(1 for entry in self.log if entry.processed)

    @property
    def skipped_count(self) -> int:
        return sum(1 for entry in self.log if not entry.processed)

    def extract(self, matched: list[MatchedRoute]) -> list[EndpointMetadata]:
        endpoints = []
        for item in matched:
            try:
                endpoint = self.process_route(item)
            except RouteError as e:
                logger.debug("Skipped %s: %r", item.route.label, e)
                self._record(LogEntry(False, item.route.label, str(e)))
                continue
            if endpoint is None:
                self._record(LogEntry(False, item.route.label, f"@{HIDDEN_TAG} was specified"))
                continue
            endpoints.append(endpoint)
            self._record(LogEntry(True, item.route.label))
        return endpoints

    def process_route(self, item: MatchedRoute) -> EndpointMetadata | None:
        """Run one route through the strategies; None when the route is hidden."""
        route = item.route
        doc = parse_docblock(route.docblock)
        group_doc = parse_docblock(route.group_docblock)
        if doc.has(HIDDEN_TAG) or group_doc.has(HIDDEN_TAG):
            return None

        handler = self.table.resolve_handler(route.handler)
        context = RouteContext(route=route, handler=handler, doc=doc, group_doc=group_doc, rule=item.rule)

        endpoint: dict = {"methods": list(route.methods), "uri": route.uri}
        for strategy in self.strategies:
            fragment = strategy.contribute(context, MappingProxyType(endpoint))
            if fragment:
                self._merge(strategy, endpoint, fragment)

        if not endpoint.get("group_name"):
            endpoint["group_name"] = self.config.default_group
        return EndpointMetadata(**endpoint)

    def _merge(self, strategy: Strategy, endpoint: dict, fragment: dict) -> None:
        for name, value in fragment.items():
            if name not in strategy.owns:
                raise ConfigurationError(f"{strategy.name} returned {name!r}, a field it does not own")
            if name not in endpoint:
                endpoint[name] = value
            elif name in strategy.merges and isinstance(endpoint[name], list):
                endpoint[name] = endpoint[name] + list(value)
            elif name in strategy.merges and isinstance(endpoint[name], dict):
                endpoint[name] = {**endpoint[name], **value}
            else:
                raise ConfigurationError(f"{strategy.name} would overwrite {name!r}")

    def _record(self, entry: LogEntry) -> None:
        self.log.append(entry)
        self.echo(entry.line)
