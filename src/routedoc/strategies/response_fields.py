"""Descriptions of response body fields from @responseField tags."""

from routedoc.parser.tags import parse_response_field_tag
from routedoc.strategies.base import RouteContext, Strategy


class ResponseFieldsStrategy(Strategy):
    owns = frozenset({"response_fields"})

    def contribute(self, route: RouteContext, endpoint) -> dict | None:
        tags = route.doc.all("responseField")
        if not tags:
            return None
        return {"response_fields": [parse_response_field_tag(tag) for tag in tags]}
