"""Read-only view of a host application's route table.

The core never talks to a routing implementation directly; it depends on
the narrow RouteTable interface below. Adapters (see router.py) turn a
framework's registrations into RouteDescriptor records.
"""

import importlib
import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

from routedoc.errors import UnresolvableHandler


@dataclass(frozen=True)
class RouteDescriptor:
    """A single registered route, exactly as the host reported it."""

    methods: tuple[str, ...]  # ("GET",) / ("PUT", "PATCH")
    uri: str  # api/users/{user}
    handler: Any  # callable, (Class, "method") or "module:Class@method"
    name: str | None = None
    versions: tuple[str, ...] = ()
    docblock: str = ""
    group_docblock: str = ""

    @property
    def label(self) -> str:
        return f"[{','.join(self.methods)}] {self.uri}"


@dataclass
class Handler:
    """Capabilities of a resolved route handler."""

    func: Callable
    docblock: str = ""
    group_docblock: str = ""
    owner: type | None = None
    signature: inspect.Signature | None = field(default=None, repr=False)


class RouteTable(Protocol):
    def list_routes(self) -> list[RouteDescriptor]:
        ...

    def resolve_handler(self, ref: Any) -> Handler:
        ...


def normalize_uri(uri: str) -> str:
    """Strip surrounding slashes; the root route becomes '/'."""
    uri = uri.strip("/")
    return uri or "/"


def normalize_methods(methods) -> tuple[str, ...]:
    if isinstance(methods, str):
        methods = [methods]
    result = []
    for m in methods:
        m = m.upper()
        if m not in result:
            result.append(m)
    # HEAD is implied by GET and never documented on its own
    if "GET" in result and "HEAD" in result:
        result.remove("HEAD")
    return tuple(result)


def resolve_reference(ref: Any) -> Handler:
    """Turn a handler reference into a Handler.

    Accepts a plain callable, a (Class, "method") tuple, or a string of the
    form "package.module:function" / "package.module:Class@method".
    """
    owner = None
    if isinstance(ref, str):
        ref = _import_reference(ref)

    if isinstance(ref, tuple):
        if len(ref) != 2:
            raise UnresolvableHandler(f"Malformed handler reference {ref!r}")
        owner, method_name = ref
        func = getattr(owner, method_name, None)
        if func is None:
            raise UnresolvableHandler(
                f"{getattr(owner, '__name__', owner)} has no method {method_name}"
            )
    else:
        func = ref

    if not callable(func):
        raise UnresolvableHandler(f"Handler {ref!r} is not callable")

    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        signature = None

    return Handler(
        func=func,
        docblock=inspect.getdoc(func) or "",
        group_docblock=(inspect.getdoc(owner) or "") if owner else "",
        owner=owner,
        signature=signature,
    )


def _import_reference(ref: str):
    module_name, sep, attr = ref.partition(":")
    if not sep or not attr:
        raise UnresolvableHandler(f"Handler reference {ref!r} must look like 'module:attribute'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise UnresolvableHandler(f"Cannot import {module_name}: {e}") from e

    class_name, at, method_name = attr.partition("@")
    target = getattr(module, class_name, None)
    if target is None:
        raise UnresolvableHandler(f"{module_name} has no attribute {class_name}")
    if at:
        return (target, method_name)
    return target
