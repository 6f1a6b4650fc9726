"""In-process handler invocation, used to capture live example responses.

The call is synchronous from the pipeline's point of view. It runs on a
daemon thread so that a slow handler can be abandoned after `timeout`
seconds without keeping the process alive.
"""

import inspect
import json
import threading
from dataclasses import dataclass, field

from pydantic import BaseModel, ValidationError

from routedoc.errors import InvocationError
from routedoc.examples import unwrap_optional
from routedoc.routing.base import Handler
from routedoc.strategies.signature import arguments, is_model


@dataclass
class SyntheticRequest:
    method: str
    uri: str
    url_params: dict = field(default_factory=dict)
    query: dict = field(default_factory=dict)
    body: dict = field(default_factory=dict)
    headers: dict = field(default_factory=dict)


@dataclass
class CapturedResponse:
    status: int
    body: str
    content_type: str = "application/json"


class HandlerInvoker:
    """Calls handlers directly with arguments taken from a SyntheticRequest."""

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout

    def invoke(self, handler: Handler, request: SyntheticRequest, timeout: float | None = None) -> CapturedResponse:
        func = self._bound(handler)
        kwargs = self._arguments(handler, request)
        timeout = self.timeout if timeout is None else timeout

        outcome = {}

        def call():
            try:
                outcome["result"] = func(**kwargs)
            except Exception as e:
                outcome["error"] = e

        worker = threading.Thread(target=call, name="routedoc-invoke", daemon=True)
        worker.start()
        worker.join(timeout)
        if worker.is_alive():
            raise InvocationError(f"Handler did not respond within {timeout}s")
        if "error" in outcome:
            e = outcome["error"]
            raise InvocationError(f"Handler raised {type(e).__name__}: {e}") from e
        return to_response(outcome.get("result"))

    def _bound(self, handler: Handler):
        if handler.owner is None:
            return handler.func
        try:
            instance = handler.owner()
        except Exception as e:
            raise InvocationError(f"Cannot instantiate {handler.owner.__name__}: {e}") from e
        return getattr(instance, handler.func.__name__)

    def _arguments(self, handler: Handler, request: SyntheticRequest) -> dict:
        kwargs = {}
        if handler.signature is not None and "request" in handler.signature.parameters:
            kwargs["request"] = request
        for arg in arguments(handler):
            if arg.name in request.url_params:
                kwargs[arg.name] = request.url_params[arg.name]
            elif is_model(arg.annotation):
                model = unwrap_optional(arg.annotation)
                try:
                    kwargs[arg.name] = model.model_validate(request.body)
                except ValidationError as e:
                    raise InvocationError(f"Example body is not a valid {model.__name__}: {e}") from e
            elif arg.name in request.query:
                kwargs[arg.name] = request.query[arg.name]
            elif arg.name in request.body:
                kwargs[arg.name] = request.body[arg.name]
            elif arg.default is inspect.Parameter.empty:
                raise InvocationError(f"No example value for handler argument {arg.name!r}")
        return kwargs


def to_response(result) -> CapturedResponse:
    """Normalize what a handler returned into status + serialized body."""
    status = 200
    if isinstance(result, tuple) and len(result) == 2 and isinstance(result[1], int):
        result, status = result

    # framework response objects
    if hasattr(result, "status_code") and (hasattr(result, "body") or hasattr(result, "text")):
        body = getattr(result, "text", None)
        if body is None:
            body = result.body
        if isinstance(body, bytes):
            body = body.decode("utf-8", errors="replace")
        content_type = getattr(result, "media_type", None) or "application/json"
        return CapturedResponse(status=result.status_code, body=body, content_type=content_type)

    if result is None:
        return CapturedResponse(status=204 if status == 200 else status, body="")
    if isinstance(result, BaseModel):
        return CapturedResponse(status=status, body=result.model_dump_json(indent=4))
    if isinstance(result, (dict, list)):
        return CapturedResponse(status=status, body=json.dumps(result, indent=4, ensure_ascii=False, default=str))
    if isinstance(result, bytes):
        result = result.decode("utf-8", errors="replace")
    text = str(result)
    try:
        json.loads(text)
        content_type = "application/json"
    except ValueError:
        content_type = "text/plain"
    return CapturedResponse(status=status, body=text, content_type=content_type)
