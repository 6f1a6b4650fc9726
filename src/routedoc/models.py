"""Endpoint data models.

Strategies build up plain dicts of these fields; once a route has been
through the whole pipeline the result is frozen into an EndpointMetadata
and handed to the writers.
"""

import re

from pydantic import BaseModel, ConfigDict

PLACEHOLDER = re.compile(r"\{(\w+)(\?)?\}")


class Parameter(BaseModel):
    """A URL, query or body parameter."""

    name: str  # dotted / [] names describe nested bodies: user.name, tags[]
    type: str = "string"
    required: bool = False
    description: str = ""
    example: object = None
    has_example: bool = False  # example (or No-example) was declared explicitly
    enum: list | None = None
    minimum: float | None = None
    maximum: float | None = None
    exclusive_minimum: bool = False
    exclusive_maximum: bool = False


class ExampleResponse(BaseModel):
    status: int = 200
    content_type: str = "application/json"
    body: str = ""
    description: str = ""


class ResponseField(BaseModel):
    name: str
    type: str = ""
    description: str = ""


class EndpointMetadata(BaseModel):
    """Everything documented about one route."""

    model_config = ConfigDict(frozen=True)

    methods: list[str]
    uri: str
    title: str = ""
    description: str = ""
    group_name: str
    group_description: str = ""
    authenticated: bool = False
    url_parameters: list[Parameter] = []
    query_parameters: list[Parameter] = []
    body_parameters: list[Parameter] = []
    headers: dict[str, str] = {}
    responses: list[ExampleResponse] = []
    response_fields: list[ResponseField] = []

    @property
    def display_title(self) -> str:
        return self.title or self.uri

    @property
    def anchor(self) -> str:
        """Identifier unique per (method, uri), used for Markdown anchors."""
        raw = f"{self.methods[0]}{self.uri}".lower()
        return re.sub(r"[^a-z0-9]+", "-", raw).strip("-")

    def cleaned_url_parameters(self) -> dict:
        return _examples(self.url_parameters)

    def cleaned_query_parameters(self) -> dict:
        return _examples(self.query_parameters)

    def cleaned_body(self) -> dict:
        return nest_parameters(self.body_parameters)

    def bound_uri(self) -> str:
        """The uri with placeholders replaced by example values."""
        values = self.cleaned_url_parameters()

        def replace(match):
            value = values.get(match.group(1))
            return "" if value is None else str(value)

        uri = PLACEHOLDER.sub(replace, self.uri)
        # an empty optional segment leaves a double or trailing slash
        uri = re.sub(r"/{2,}", "/", uri)
        return uri.rstrip("/") or "/"


class EndpointGroup(BaseModel):
    sort_index: int
    name: str
    description: str = ""
    endpoints: list[EndpointMetadata] = []


def _examples(params: list[Parameter]) -> dict:
    return {p.name: p.example for p in params if p.example is not None}


def nest_parameters(params: list[Parameter]) -> dict:
    """Build a nested example body from flat dotted / [] parameter names."""
    body: dict = {}
    for param in params:
        if param.example is None:
            continue
        _assign(body, param.name, param.example)
    return body


def _assign(target: dict, name: str, value) -> None:
    head, _, rest = name.partition(".")
    if head.endswith("[]"):
        key = head[:-2]
        if not rest:
            target[key] = value if isinstance(value, list) else [value]
            return
        items = target.get(key)
        if not isinstance(items, list) or not items or not isinstance(items[0], dict):
            items = [{}]
            target[key] = items
        _assign(items[0], rest, value)
        return

    if not rest:
        if isinstance(target.get(head), dict) and isinstance(value, dict):
            return
        target[head] = value
        return
    child = target.get(head)
    if not isinstance(child, dict):
        child = {}
        target[head] = child
    _assign(child, rest, value)
