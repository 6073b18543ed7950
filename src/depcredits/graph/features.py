"""Run the resolver with and without optional features and merge the results."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from depcredits.errors import DepCreditsError
from depcredits.graph.assemble import assemble, dedupe
from depcredits.graph.base import FeaturesMode, GraphSource
from depcredits.graph.loader import Graph, load_graph
from depcredits.graph.reachability import resolve, tree_ids
from depcredits.model import Dependency, EdgeFlag, PackageRecord

logger = logging.getLogger(__name__)


@dataclass
class Resolved:
    """Final result: the root package and its used dependencies."""

    root: PackageRecord | None
    dependencies: list[Dependency] = field(default_factory=list)


def resolve_pass(
    source: GraphSource,
    manifest_path: Path,
    mode: FeaturesMode,
    target: str | None = None,
) -> tuple[Graph, list[Dependency]]:
    """Fetch, load, resolve and assemble a single feature mode."""
    graph = load_graph(source.fetch_graph(manifest_path, mode, target))
    hint = tree_ids(graph, source.fetch_tree(manifest_path, mode, target))
    flags = resolve(graph, used_hint=hint, targeted=target is not None)
    deps = assemble(graph, flags)
    logger.debug("%s: %d dependencies", mode.value, len(deps))
    return graph, deps


def resolve_dependencies(
    source: GraphSource,
    manifest_path: Path,
    target: str | None = None,
) -> Resolved:
    """Resolve used dependencies, marking feature-gated ones optional.

    The all-features pass only runs when the root declares features, and a
    failure there is logged and otherwise ignored: the default-features
    result is still correct, just less detailed.
    """
    graph, deps = resolve_pass(source, manifest_path, FeaturesMode.NO_DEFAULT, target)
    root = graph.root_package

    if root is not None and root.has_features:
        try:
            _, featured = resolve_pass(source, manifest_path, FeaturesMode.ALL, target)
        except DepCreditsError as e:
            logger.warning("Skipping optional dependency detection: %s", e)
        else:
            deps = merge_optional(deps, featured)

    return Resolved(root=root, dependencies=deps)


def merge_optional(default: list[Dependency], featured: list[Dependency]) -> list[Dependency]:
    """Union *featured* into *default*, flagging the differences optional.

    Entries are matched by name and version, never by payload id.  Where
    both sides have a package, the default-features entry is kept.
    """
    known = {dep.key for dep in default}
    extra = [
        dep.with_flags(dep.flags | EdgeFlag.OPTIONAL)
        for dep in featured
        if dep.key not in known
    ]
    if extra:
        logger.debug("%d feature-gated dependencies", len(extra))
    return dedupe([*default, *extra])
