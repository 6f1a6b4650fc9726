"""URL parameters: uri placeholders, refined by @urlParam tags."""

from routedoc.models import PLACEHOLDER, Parameter
from routedoc.parser.tags import parse_param_tag
from routedoc.strategies import signature
from routedoc.strategies.base import RouteContext, Strategy


class UrlParametersStrategy(Strategy):
    owns = frozenset({"url_parameters"})

    def contribute(self, route: RouteContext, endpoint) -> dict | None:
        tagged = {p.name: p for p in map(parse_param_tag, route.doc.all("urlParam"))}
        typed = {arg.name: signature.argument_parameter(arg) for arg in signature.arguments(route.handler)}

        params = []
        for match in PLACEHOLDER.finditer(route.route.uri):
            name, optional = match.group(1), bool(match.group(2))
            if name in tagged:
                params.append(tagged.pop(name))
                continue
            param_type = typed[name].type if name in typed else _guess_type(name)
            params.append(Parameter(name=name, type=param_type, required=not optional))
        # tags for parameters the uri does not show are still documented
        params.extend(tagged.values())

        if not params:
            return None
        return {"url_parameters": [self.with_example(p) for p in params]}


def _guess_type(name: str) -> str:
    if name == "id" or name.endswith("_id"):
        return "integer"
    return "string"
