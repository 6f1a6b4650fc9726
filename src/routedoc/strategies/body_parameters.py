"""Body parameters from @bodyParam tags or a pydantic model argument."""

from routedoc.parser.tags import parse_param_tag
from routedoc.strategies import signature
from routedoc.strategies.base import RouteContext, Strategy
from routedoc.strategies.query_parameters import apply_defaults


class BodyParametersStrategy(Strategy):
    owns = frozenset({"body_parameters"})

    def contribute(self, route: RouteContext, endpoint) -> dict | None:
        tags = route.doc.all("bodyParam")
        if tags:
            params = [parse_param_tag(tag) for tag in tags]
        else:
            model = signature.body_model(route.handler)
            params = signature.model_parameters(model) if model else []

        params = apply_defaults(params, route.rule.apply.body)
        if not params:
            return None
        return {"body_parameters": [self.with_example(p) for p in params]}
