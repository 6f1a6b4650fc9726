"""Groups endpoints and puts the groups in order."""

import re

from routedoc.models import EndpointGroup, EndpointMetadata

DIGITS = re.compile(r"(\d+)")


def natural_key(label: str) -> tuple:
    """Sort key comparing digit runs by value: "Group 2" < "Group 10"."""
    key = []
    for part in DIGITS.split(label):
        if not part:
            continue
        if part.isdigit():
            key.append((0, int(part), part))
        else:
            key.append((1, 0, part))
    return tuple(key)


def natural_sorted(labels) -> list[str]:
    return sorted(labels, key=natural_key)


def group_endpoints(endpoints: list[EndpointMetadata], sort: str = "natural") -> list[EndpointGroup]:
    """Bucket endpoints by group name.

    Endpoints keep their match order inside a group, and endpoints sharing a
    method and path stay separate entries. Groups come out in first-seen
    order ("declaration") or by natural sort of their names ("natural").
    """
    buckets: dict[str, list[EndpointMetadata]] = {}
    descriptions: dict[str, str] = {}
    for endpoint in endpoints:
        buckets.setdefault(endpoint.group_name, []).append(endpoint)
        if endpoint.group_description and not descriptions.get(endpoint.group_name):
            descriptions[endpoint.group_name] = endpoint.group_description

    names = list(buckets)
    if sort == "natural":
        names = natural_sorted(names)

    return [
        EndpointGroup(
            sort_index=index,
            name=name,
            description=descriptions.get(name, ""),
            endpoints=buckets[name],
        )
        for index, name in enumerate(names)
    ]


def build_model(endpoints: list[EndpointMetadata], sort: str = "natural") -> tuple[list[EndpointGroup], list[EndpointMetadata]]:
    """Return the ordered groups plus the flat list in original match order."""
    return group_endpoints(endpoints, sort), list(endpoints)
