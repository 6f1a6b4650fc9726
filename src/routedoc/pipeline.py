"""Generation run: match → extract → group → render → validate → write."""

import logging
import uuid
from dataclasses import dataclass, field

import click

from routedoc.config import DocsConfig
from routedoc.errors import OutputError
from routedoc.examples import ExampleGenerator
from routedoc.extractor import Extractor
from routedoc.generator.groups import build_model
from routedoc.generator.markdown import MarkdownWriter
from routedoc.generator.output import StagedOutput
from routedoc.generator.postman import PostmanCollectionWriter
from routedoc.generator.validator import validate_files
from routedoc.models import EndpointGroup, EndpointMetadata
from routedoc.routing.base import RouteTable
from routedoc.routing.matcher import match_routes

logger = logging.getLogger("routedoc.pipeline")


@dataclass
class GenerationResult:
    endpoints: list[EndpointMetadata]
    groups: list[EndpointGroup]
    processed: int
    skipped: int
    markdown: dict[str, str] = field(default_factory=dict)
    collection: str | None = None


class DocsGenerator:
    """Runs one documentation generation over a route table."""

    def __init__(self, config: DocsConfig, table: RouteTable, invoker=None, echo=click.echo,
                 id_factory=uuid.uuid4):
        self.config = config
        self.table = table
        self.invoker = invoker
        self.echo = echo
        self.id_factory = id_factory

    def extract(self) -> tuple[list[EndpointMetadata], Extractor]:
        # strategies are loaded and checked before any route is looked at
        examples = ExampleGenerator(self.config.faker_seed, self.config.randomize_choices)
        extractor = Extractor(self.config, self.table, examples=examples, invoker=self.invoker, echo=self.echo)
        matched = match_routes(self.table, self.config.routes)
        logger.debug("%d routes matched", len(matched))
        return extractor.extract(matched), extractor

    def render(self, groups: list[EndpointGroup]) -> tuple[dict[str, str], str | None]:
        markdown = MarkdownWriter(self.config).render(groups)
        collection = None
        if self.config.postman.enabled:
            collection = PostmanCollectionWriter(self.config, id_factory=self.id_factory).to_json(groups)
        return markdown, collection

    def generate(self, write: bool = True) -> GenerationResult:
        endpoints, extractor = self.extract()
        groups, _ = build_model(endpoints, self.config.group_sort)
        markdown, collection = self.render(groups)

        files = dict(markdown)
        if collection is not None:
            files["collection.json"] = collection
        errors = validate_files(files)
        if errors:
            details = "\n".join(f"  {name}: {error}" for name, error in errors.items())
            raise OutputError(f"Rendered output failed validation:\n{details}")

        if write:
            self.write(markdown, collection)

        self.echo(f"Processed {extractor.processed_count} routes, skipped {extractor.skipped_count}.")
        return GenerationResult(
            endpoints=endpoints,
            groups=groups,
            processed=extractor.processed_count,
            skipped=extractor.skipped_count,
            markdown=markdown,
            collection=collection,
        )

    def write(self, markdown: dict[str, str], collection: str | None) -> None:
        output = self.config.output
        with StagedOutput() as staged:
            staged.stage_directory(output.markdown_dir, markdown)
            if collection is not None:
                staged.stage_file(output.collection_path, collection)
            staged.commit()
        self.echo(f"Markdown written to {output.markdown_dir}")
        if collection is not None:
            self.echo(f"Postman collection written to {output.collection_path}")
