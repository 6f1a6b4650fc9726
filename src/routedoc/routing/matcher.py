"""Narrows the host's route table down to the routes to document.

A route is kept iff it satisfies every predicate of at least one rule.
The first satisfying rule (declaration order) supplies the apply payload.
Registration order is preserved; nothing is sorted here.
"""

import logging
from dataclasses import dataclass
from fnmatch import fnmatchcase

from routedoc.config import MatchRule
from routedoc.routing.base import RouteDescriptor, RouteTable

logger = logging.getLogger("routedoc.routing.matcher")


@dataclass(frozen=True)
class MatchedRoute:
    route: RouteDescriptor
    rule: MatchRule


def rule_matches(rule: MatchRule, route: RouteDescriptor) -> bool:
    """Conjunction of the rule's predicates for one route."""
    return (
        _matches_prefix(rule, route)
        and _matches_methods(rule, route)
        and _matches_versions(rule, route)
        and not _is_excluded(rule, route)
    )


def first_matching_rule(rules: list[MatchRule], route: RouteDescriptor) -> MatchRule | None:
    for rule in rules:
        if rule_matches(rule, route):
            return rule
    return None


def match_routes(table: RouteTable, rules: list[MatchRule]) -> list[MatchedRoute]:
    """Return the documented routes, in registration order."""
    matched = []
    for route in table.list_routes():
        rule = first_matching_rule(rules, route)
        if rule is None:
            logger.debug("Route %s excluded by filter", route.label)
            continue
        matched.append(MatchedRoute(route=route, rule=rule))
    return matched


def _matches_prefix(rule: MatchRule, route: RouteDescriptor) -> bool:
    return any(fnmatchcase(route.uri, pattern.strip("/") or "/") for pattern in rule.match.prefixes)


def _matches_methods(rule: MatchRule, route: RouteDescriptor) -> bool:
    methods = rule.match.methods
    if "*" in methods:
        return True
    return bool(set(methods) & set(route.methods))


def _matches_versions(rule: MatchRule, route: RouteDescriptor) -> bool:
    if not rule.match.versions:
        return True
    return bool(set(rule.match.versions) & set(route.versions))


def _is_excluded(rule: MatchRule, route: RouteDescriptor) -> bool:
    for pattern in rule.exclude:
        if fnmatchcase(route.uri, pattern.strip("/") or "/"):
            return True
        if route.name and fnmatchcase(route.name, pattern):
            return True
    return False
