"""Title, description, group and authentication flag."""

from routedoc.parser.docblock import DocBlock
from routedoc.strategies.base import RouteContext, Strategy


class MetadataStrategy(Strategy):
    owns = frozenset({"title", "description", "group_name", "group_description", "authenticated"})

    def contribute(self, route: RouteContext, endpoint) -> dict:
        group_name, group_description = (
            _group(route.doc) or _group(route.group_doc) or (self.config.default_group, "")
        )
        return {
            "title": route.doc.title,
            "description": route.doc.description,
            "group_name": group_name,
            "group_description": group_description,
            "authenticated": self._authenticated(route),
        }

    def _authenticated(self, route: RouteContext) -> bool:
        # the handler's own tags take precedence over the controller's
        for doc in (route.doc, route.group_doc):
            if doc.has("authenticated"):
                return True
            if doc.has("unauthenticated"):
                return False
        return self.config.auth.default


def _group(doc: DocBlock) -> tuple[str, str] | None:
    value = doc.first("group")
    if not value:
        return None
    name, _, description = value.partition("\n")
    return name.strip(), description.strip()
