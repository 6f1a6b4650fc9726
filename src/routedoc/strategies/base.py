"""Strategy contract.

A strategy looks at one route and returns a fragment of the endpoint's
metadata (a dict of the fields it owns) or None for "nothing to add".
It can read what earlier strategies produced but never write a field it
does not own; two strategies may share a field only if both list it in
`merges`.
"""

import importlib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Mapping

from routedoc.config import DocsConfig, MatchRule
from routedoc.errors import ConfigurationError
from routedoc.examples import ExampleGenerator
from routedoc.models import Parameter
from routedoc.parser.docblock import DocBlock
from routedoc.routing.base import Handler, RouteDescriptor


@dataclass(frozen=True)
class RouteContext:
    """Read-only inputs every strategy receives for a route."""

    route: RouteDescriptor
    handler: Handler
    doc: DocBlock  # the handler's own docblock
    group_doc: DocBlock  # the owning controller's docblock
    rule: MatchRule


class Strategy(ABC):
    owns: frozenset[str] = frozenset()
    merges: frozenset[str] = frozenset()

    def __init__(self, config: DocsConfig, examples: ExampleGenerator, invoker=None):
        self.config = config
        self.examples = examples
        self.invoker = invoker

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def contribute(self, route: RouteContext, endpoint: Mapping) -> dict | None:
        """Return {field: value} for owned fields, or None."""

    def with_example(self, param: Parameter) -> Parameter:
        """Fill in a generated example unless one was declared or it is left out."""
        if param.has_example:
            return param
        if not param.required and not self.config.include_optional:
            return param
        return param.model_copy(update={"example": self.examples.generate(param)})


def import_object(path: str):
    """Import "package.module:Name" or "package.module.Name"."""
    if ":" in path:
        module_name, _, attr = path.partition(":")
    else:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise ImportError(f"{path!r} is not a dotted import path")
    module = importlib.import_module(module_name)
    try:
        return getattr(module, attr)
    except AttributeError as e:
        raise ImportError(f"{module_name} has no attribute {attr}") from e


def load_class(name: str, builtins: dict[str, str], base: type) -> type:
    """Resolve a built-in short name or an import path to a subclass of `base`."""
    path = builtins.get(name, name)
    try:
        cls = import_object(path)
    except ImportError as e:
        raise ConfigurationError(f"Unknown strategy {name!r}: {e}") from e
    if not isinstance(cls, type) or not issubclass(cls, base):
        raise ConfigurationError(f"{name!r} is not a {base.__name__} subclass")
    return cls
