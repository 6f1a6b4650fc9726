"""Static analysis of handler signatures.

Used as a fallback when a handler declares no parameter tags: simple
typed arguments describe URL/query parameters, a pydantic model argument
describes the request body.
"""

import enum
import inspect
import typing

from pydantic import BaseModel

from routedoc.examples import annotation_type, field_bounds, unwrap_optional
from routedoc.models import Parameter
from routedoc.routing.base import Handler

IGNORED_ARGUMENTS = {"self", "cls", "request"}


def arguments(handler: Handler) -> list[inspect.Parameter]:
    if handler.signature is None:
        return []
    return [
        p for p in handler.signature.parameters.values()
        if p.name not in IGNORED_ARGUMENTS
        and p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    ]


def is_model(annotation) -> bool:
    annotation = unwrap_optional(annotation)
    return isinstance(annotation, type) and issubclass(annotation, BaseModel)


def body_model(handler: Handler) -> type[BaseModel] | None:
    for arg in arguments(handler):
        if is_model(arg.annotation):
            return unwrap_optional(arg.annotation)
    return None


def argument_parameter(arg: inspect.Parameter) -> Parameter:
    """Describe a plain (non-model) handler argument."""
    if arg.annotation is not inspect.Parameter.empty:
        param_type = annotation_type(arg.annotation)
    elif arg.default not in (inspect.Parameter.empty, None):
        param_type = annotation_type(type(arg.default))
    else:
        param_type = "string"
    return Parameter(
        name=arg.name,
        type=param_type,
        required=arg.default is inspect.Parameter.empty,
        enum=_choices(arg.annotation),
    )


def model_parameters(model: type[BaseModel], prefix: str = "") -> list[Parameter]:
    """Flatten a pydantic model into dotted body parameters."""
    params = []
    for name, info in model.model_fields.items():
        key = prefix + (info.alias or name)
        annotation = unwrap_optional(info.annotation)
        required = info.is_required()
        description = info.description or ""

        if is_model(annotation):
            params.append(Parameter(name=key, type="object", required=required, description=description))
            params.extend(model_parameters(annotation, key + "."))
            continue

        item = _list_item(annotation)
        if item is not None and is_model(item):
            params.append(Parameter(name=key, type="object[]", required=required, description=description))
            params.extend(model_parameters(unwrap_optional(item), key + "[]."))
            continue

        param_type = annotation_type(annotation)
        if item is not None:
            param_type = annotation_type(item) + "[]"
        params.append(
            Parameter(
                name=key,
                type=param_type,
                required=required,
                description=description,
                example=info.examples[0] if info.examples else None,
                has_example=bool(info.examples),
                enum=_choices(annotation),
                **field_bounds(info.metadata),
            )
        )
    return params


def _list_item(annotation):
    if typing.get_origin(annotation) in (list, tuple, set):
        args = typing.get_args(annotation)
        return args[0] if args else str
    return None


def _choices(annotation) -> list | None:
    annotation = unwrap_optional(annotation)
    if typing.get_origin(annotation) is typing.Literal:
        return list(typing.get_args(annotation))
    if isinstance(annotation, type) and issubclass(annotation, enum.Enum):
        return [member.value for member in annotation]
    return None
