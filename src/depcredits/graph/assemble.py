"""Join resolved flags back onto package records."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from depcredits.graph.loader import Graph
from depcredits.model import Dependency, EdgeFlag, PackageRecord
from depcredits.sanitize import nice_authors, nice_license, nice_url

logger = logging.getLogger(__name__)


def to_dependency(record: PackageRecord, flags: EdgeFlag) -> Dependency:
    return Dependency(
        name=record.name,
        version=record.version,
        license=nice_license(record.license),
        authors=nice_authors(record.authors),
        url=nice_url(record.repository),
        flags=flags,
    )


def assemble(graph: Graph, flags: dict[str, EdgeFlag]) -> list[Dependency]:
    """Build the sorted dependency list for one resolved graph.

    The seeds (the root, or every workspace member of a virtual workspace)
    are never part of the result, nor is anything the resolver left out of
    *flags*.
    """
    seeds = set(graph.seeds())
    deps = [
        to_dependency(record, flags[pkg_id])
        for pkg_id, record in graph.packages.items()
        if pkg_id not in seeds and pkg_id in flags
    ]
    missing = len(set(flags) - set(graph.packages))
    if missing:
        logger.debug("%d used node(s) have no package record", missing)
    return dedupe(deps)


def dedupe(deps: Iterable[Dependency]) -> list[Dependency]:
    """Drop repeats (first one wins) and sort by name, then version."""
    seen: dict[tuple[str, str], Dependency] = {}
    for dep in deps:
        seen.setdefault(dep.key, dep)
    return sorted(seen.values(), key=lambda d: d.sort_key)
