"""Query parameters from @queryParam tags or the handler signature."""

from routedoc.models import PLACEHOLDER, Parameter
from routedoc.parser.tags import parse_param_tag
from routedoc.strategies import signature
from routedoc.strategies.base import RouteContext, Strategy


class QueryParametersStrategy(Strategy):
    owns = frozenset({"query_parameters"})

    def contribute(self, route: RouteContext, endpoint) -> dict | None:
        tags = route.doc.all("queryParam")
        if tags:
            params = [parse_param_tag(tag) for tag in tags]
        else:
            params = self._from_signature(route)

        params = apply_defaults(params, route.rule.apply.query)
        if not params:
            return None
        return {"query_parameters": [self.with_example(p) for p in params]}

    def _from_signature(self, route: RouteContext) -> list[Parameter]:
        placeholders = {m.group(1) for m in PLACEHOLDER.finditer(route.route.uri)}
        return [
            signature.argument_parameter(arg)
            for arg in signature.arguments(route.handler)
            if arg.name not in placeholders and not signature.is_model(arg.annotation)
        ]


def apply_defaults(params: list[Parameter], defaults: dict) -> list[Parameter]:
    """Use rule-level default values as examples, adding undeclared parameters."""
    if not defaults:
        return params
    by_name = {p.name: i for i, p in enumerate(params)}
    result = list(params)
    for name, value in defaults.items():
        if name in by_name:
            i = by_name[name]
            result[i] = result[i].model_copy(update={"example": value, "has_example": True})
        else:
            result.append(
                Parameter(name=name, type=_value_type(value), example=value, has_example=True)
            )
    return result


def _value_type(value) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return "string"
