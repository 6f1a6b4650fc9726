"""CLI entry point for routedoc."""

import logging
from pathlib import Path

import click

from routedoc.config import DocsConfig, load_config
from routedoc.errors import RoutedocError
from routedoc.invoker import HandlerInvoker
from routedoc.pipeline import DocsGenerator
from routedoc.routing.base import RouteTable
from routedoc.routing.matcher import match_routes
from routedoc.strategies.base import import_object


def _load_table(reference: str) -> RouteTable:
    """Import "module:attribute"; a callable attribute is called to build the table."""
    try:
        target = import_object(reference)
    except ImportError as e:
        raise click.BadParameter(str(e), param_hint="--router") from e
    if callable(target) and not hasattr(target, "list_routes"):
        target = target()
    if not hasattr(target, "list_routes") or not hasattr(target, "resolve_handler"):
        raise click.BadParameter(f"{reference} is not a route table", param_hint="--router")
    return target


def _load_config(config_path: Path | None, base_url: str | None, seed: int | None) -> DocsConfig:
    config = load_config(config_path)
    overrides = {}
    if base_url:
        overrides["base_url"] = base_url
    if seed is not None:
        overrides["faker_seed"] = seed
    return config.model_copy(update=overrides) if overrides else config


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
def main(verbose: bool):
    """Generate API documentation from an application's routes."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@main.command()
@click.option("--router", "router_ref", required=True, help="Route table to document, as module:attribute.")
@click.option("-c", "--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML/JSON config file.")
@click.option("--base-url", default=None, help="Override the configured base URL.")
@click.option("--seed", default=None, type=int, help="Override the configured faker seed.")
@click.option("--no-response-calls", is_flag=True, help="Never call handlers to capture example responses.")
def generate(router_ref: str, config_path: Path | None, base_url: str | None, seed: int | None, no_response_calls: bool):
    """Generate Markdown pages and a Postman collection."""
    try:
        config = _load_config(config_path, base_url, seed)
        table = _load_table(router_ref)
        invoker = None if no_response_calls else HandlerInvoker()
        DocsGenerator(config, table, invoker=invoker).generate()
    except RoutedocError as e:
        raise click.ClickException(str(e)) from e


@main.command()
@click.option("--router", "router_ref", required=True, help="Route table to inspect, as module:attribute.")
@click.option("-c", "--config", "config_path", default=None, type=click.Path(exists=True, path_type=Path), help="YAML/JSON config file.")
def routes(router_ref: str, config_path: Path | None):
    """List the routes the configured rules would document."""
    try:
        config = load_config(config_path)
        table = _load_table(router_ref)
        matched = match_routes(table, config.routes)
    except RoutedocError as e:
        raise click.ClickException(str(e)) from e

    for item in matched:
        click.echo(item.route.label)
    click.echo(f"{len(matched)} routes matched.")
