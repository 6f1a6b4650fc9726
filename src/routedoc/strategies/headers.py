"""Request headers: the matching rule's apply.headers, then @header tags."""

from routedoc.parser.tags import parse_header_tag
from routedoc.strategies.base import RouteContext, Strategy


class HeadersStrategy(Strategy):
    owns = frozenset({"headers"})

    def contribute(self, route: RouteContext, endpoint) -> dict | None:
        headers = dict(route.rule.apply.headers)
        for tag in route.doc.all("header"):
            name, value = parse_header_tag(tag)
            if name:
                headers[name] = value
        if not headers:
            return None
        return {"headers": headers}
