"""Built-in route table adapter.

Applications register their endpoints through a Router (directly, or by
feeding it plain dicts with Router.from_iterable) and routedoc reads the
table back through the RouteTable interface.
"""

from contextlib import contextmanager
from typing import Any, Iterable

from routedoc.errors import UnresolvableHandler
from routedoc.routing.base import (
    Handler,
    RouteDescriptor,
    normalize_methods,
    normalize_uri,
    resolve_reference,
)

# (action, methods, uri suffix) in the order resource routes are documented
RESOURCE_ACTIONS = [
    ("index", ("GET",), ""),
    ("create", ("GET",), "/create"),
    ("show", ("GET",), "/{%s}"),
    ("edit", ("GET",), "/{%s}/edit"),
    ("store", ("POST",), ""),
    ("update", ("PUT", "PATCH"), "/{%s}"),
    ("destroy", ("DELETE",), "/{%s}"),
]

API_RESOURCE_EXCLUDED = {"create", "edit"}


def singular(word: str) -> str:
    """Naive English singular used for resource placeholders (users -> user)."""
    if word.endswith("ies") and len(word) > 3:
        return word[:-3] + "y"
    if word.endswith(("ses", "xes", "zes", "ches", "shes")):
        return word[:-2]
    if word.endswith("s") and not word.endswith("ss"):
        return word[:-1]
    return word


class Router:
    """In-memory route registry implementing RouteTable."""

    def __init__(self):
        self._routes: list[dict] = []
        self._versions: tuple[str, ...] = ()

    # -- registration ---------------------------------------------------------

    def add(self, methods, uri: str, handler: Any, name: str | None = None) -> dict:
        route = {
            "methods": normalize_methods(methods),
            "uri": normalize_uri(uri),
            "handler": handler,
            "name": name,
            "versions": self._versions,
        }
        self._routes.append(route)
        return route

    def get(self, uri, handler, name=None):
        return self.add(["GET", "HEAD"], uri, handler, name)

    def post(self, uri, handler, name=None):
        return self.add("POST", uri, handler, name)

    def put(self, uri, handler, name=None):
        return self.add("PUT", uri, handler, name)

    def patch(self, uri, handler, name=None):
        return self.add("PATCH", uri, handler, name)

    def delete(self, uri, handler, name=None):
        return self.add("DELETE", uri, handler, name)

    def options(self, uri, handler, name=None):
        return self.add("OPTIONS", uri, handler, name)

    def match(self, methods, uri, handler, name=None):
        return self.add(methods, uri, handler, name)

    def resource(self, uri: str, controller: type, only: Iterable[str] | None = None,
                 except_: Iterable[str] | None = None) -> list[dict]:
        """Register the seven conventional resource actions for a controller."""
        return self._register_resource(uri, controller, only, except_, api=False)

    def api_resource(self, uri: str, controller: type, only: Iterable[str] | None = None,
                     except_: Iterable[str] | None = None) -> list[dict]:
        """Like resource(), without the HTML-form actions (create, edit)."""
        return self._register_resource(uri, controller, only, except_, api=True)

    def _register_resource(self, uri, controller, only, except_, api):
        base = normalize_uri(uri)
        last_segment = base.rsplit("/", 1)[-1]
        placeholder = singular(last_segment).replace("-", "_")
        prefix = (base.rsplit("/", 1)[0] + ".") if "/" in base else ""
        only = set(only) if only is not None else None
        except_ = set(except_ or ())

        registered = []
        for action, methods, suffix in RESOURCE_ACTIONS:
            if api and action in API_RESOURCE_EXCLUDED:
                continue
            if only is not None and action not in only:
                continue
            if action in except_:
                continue
            path = base + (suffix % placeholder if "%s" in suffix else suffix)
            name = f"{prefix.replace('/', '.')}{last_segment}.{action}"
            registered.append(self.add(methods, path, (controller, action), name))
        return registered

    @contextmanager
    def version(self, *tags: str):
        """Tag every route registered inside the block with the given versions."""
        previous = self._versions
        self._versions = previous + tuple(t for t in tags if t not in previous)
        try:
            yield self
        finally:
            self._versions = previous

    @classmethod
    def from_iterable(cls, items: Iterable[dict]) -> "Router":
        """Build a router from dicts with methods/uri/handler[/name/versions] keys."""
        router = cls()
        for item in items:
            with router.version(*item.get("versions", ())):
                router.add(item["methods"], item["uri"], item["handler"], item.get("name"))
        return router

    # -- RouteTable -----------------------------------------------------------

    def list_routes(self) -> list[RouteDescriptor]:
        descriptors = []
        for route in self._routes:
            try:
                handler = self.resolve_handler(route["handler"])
                docblock, group_docblock = handler.docblock, handler.group_docblock
            except UnresolvableHandler:
                docblock, group_docblock = "", ""
            descriptors.append(
                RouteDescriptor(
                    methods=route["methods"],
                    uri=route["uri"],
                    handler=route["handler"],
                    name=route["name"],
                    versions=route["versions"],
                    docblock=docblock,
                    group_docblock=group_docblock,
                )
            )
        return descriptors

    def resolve_handler(self, ref: Any) -> Handler:
        return resolve_reference(ref)
