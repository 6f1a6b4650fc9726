"""Example responses.

ResponsesStrategy owns the `responses` field and delegates to an ordered
chain of response strategies. The first one that produces responses wins;
the rest are not consulted for that route.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import BaseModel

from routedoc.errors import InvocationError, StrategyFailure
from routedoc.invoker import SyntheticRequest
from routedoc.models import ExampleResponse, nest_parameters
from routedoc.parser.tags import STATUS, parse_response_file_tag, parse_response_tag
from routedoc.strategies.base import RouteContext, Strategy, import_object, load_class

logger = logging.getLogger("routedoc.strategies.responses")

BUILTIN_RESPONSE_STRATEGIES = {
    "response_tag": "routedoc.strategies.responses:ResponseTagStrategy",
    "response_file": "routedoc.strategies.responses:ResponseFileStrategy",
    "response_call": "routedoc.strategies.responses:ResponseCallStrategy",
    "api_resource": "routedoc.strategies.responses:ApiResourceStrategy",
}


class ResponseStrategy(ABC):
    def __init__(self, config, examples, invoker=None):
        self.config = config
        self.examples = examples
        self.invoker = invoker

    @abstractmethod
    def respond(self, route: RouteContext, endpoint) -> list[ExampleResponse] | None:
        """Return example responses, or None to let the next strategy try."""


class ResponsesStrategy(Strategy):
    owns = frozenset({"responses"})

    def __init__(self, config, examples, invoker=None):
        super().__init__(config, examples, invoker)
        self.chain = [
            load_class(name, BUILTIN_RESPONSE_STRATEGIES, ResponseStrategy)(config, examples, invoker)
            for name in config.response_strategies
        ]

    def contribute(self, route: RouteContext, endpoint) -> dict | None:
        for strategy in self.chain:
            responses = strategy.respond(route, endpoint)
            if responses:
                logger.debug("Responses for %s from %s", route.route.label, type(strategy).__name__)
                return {"responses": responses}
        return None


class ResponseTagStrategy(ResponseStrategy):
    """Literal @response tags."""

    def respond(self, route, endpoint):
        tags = route.doc.all("response")
        if not tags:
            return None
        return [_with_content_type(parse_response_tag(tag)) for tag in tags]


class ResponseFileStrategy(ResponseStrategy):
    """@responseFile tags pointing at stored example files."""

    def respond(self, route, endpoint):
        tags = route.doc.all("responseFile")
        if not tags:
            return None
        responses = []
        for tag in tags:
            status, path, overrides = parse_response_file_tag(tag)
            file_path = Path(path)
            if not file_path.is_absolute():
                file_path = Path(self.config.response_files_dir) / file_path
            if not file_path.is_file():
                raise StrategyFailure(f"@responseFile {path} does not exist")
            body = file_path.read_text(encoding="utf-8")
            if overrides:
                body = _merge_json(body, overrides, path)
            responses.append(_with_content_type(ExampleResponse(status=status, body=body)))
        return responses


class ResponseCallStrategy(ResponseStrategy):
    """Capture a live response by calling the handler in-process."""

    def respond(self, route, endpoint):
        if self.invoker is None:
            return None
        settings = route.rule.apply.response_calls
        methods = {m.upper() for m in settings.methods}
        if "*" not in methods and not methods & set(route.route.methods):
            return None

        request = SyntheticRequest(
            method=route.route.methods[0],
            uri=route.route.uri,
            url_params=_examples(endpoint.get("url_parameters")),
            query=_examples(endpoint.get("query_parameters")),
            body=nest_parameters(endpoint.get("body_parameters") or []),
            headers=dict(endpoint.get("headers") or {}),
        )
        try:
            captured = self.invoker.invoke(route.handler, request, timeout=settings.timeout)
        except InvocationError as e:
            logger.warning("Response call for %s failed: %s", route.route.label, e)
            return None
        return [
            ExampleResponse(status=captured.status, body=captured.body, content_type=captured.content_type)
        ]


class ApiResourceStrategy(ResponseStrategy):
    """Example derived from a pydantic model named by @apiResource / @apiResourceCollection."""

    def respond(self, route, endpoint):
        tag = route.doc.first("apiResourceCollection")
        collection = tag is not None
        if tag is None:
            tag = route.doc.first("apiResource")
        if tag is None:
            return None

        status = 200
        text = tag.strip()
        match = STATUS.match(text)
        if match:
            status = int(match.group(1))
            text = text[match.end():]
        ref = text.split()[0] if text.split() else ""
        try:
            model = import_object(ref)
        except ImportError as e:
            raise StrategyFailure(f"@apiResource {ref} could not be loaded: {e}") from e
        if not isinstance(model, type) or not issubclass(model, BaseModel):
            raise StrategyFailure(f"@apiResource {ref} is not a pydantic model")

        if collection:
            data = {"data": [self.examples.example_for_model(model), self.examples.example_for_model(model)]}
        else:
            data = {"data": self.examples.example_for_model(model)}
        body = json.dumps(data, indent=4, ensure_ascii=False, default=str)
        return [ExampleResponse(status=status, body=body)]


def _examples(params) -> dict:
    if not params:
        return {}
    return {p.name: p.example for p in params if p.example is not None}


def _with_content_type(response: ExampleResponse) -> ExampleResponse:
    body = response.body.strip()
    if not body:
        return response
    try:
        json.loads(body)
    except ValueError:
        return response.model_copy(update={"content_type": "text/plain"})
    return response


def _merge_json(body: str, overrides: dict, path: str) -> str:
    try:
        data = json.loads(body)
    except ValueError as e:
        raise StrategyFailure(f"@responseFile {path} is not valid JSON, cannot merge overrides") from e
    if not isinstance(data, dict):
        raise StrategyFailure(f"@responseFile {path} must contain a JSON object to merge overrides")
    data.update(overrides)
    return json.dumps(data, indent=4, ensure_ascii=False)
