"""Decide which nodes are used and what context each is used in."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from depcredits.graph.loader import Graph
from depcredits.model import MASK_CTX, MASK_TARGET, EdgeFlag, name_key

logger = logging.getLogger(__name__)

Edges = dict[str, list[tuple[str, EdgeFlag]]]


def resolve(
    graph: Graph,
    *,
    used_hint: set[str] | None = None,
    targeted: bool = False,
) -> dict[str, EdgeFlag]:
    """Return merged flags for every used node of *graph*, keyed by id.

    The seeds (root or workspace members) are included, usually with empty
    flags.  *used_hint* is an id set from an independent source (cargo
    tree); when it covers every seed the used set is narrowed to its
    intersection with what the traversal found.  With *targeted* the
    metadata was already filtered to one platform, so ``TARGET_CFG`` is
    cleared everywhere.
    """
    seeds = graph.seeds()
    used, flags = _walk(graph.edges, seeds)

    if used_hint and all(s in used_hint for s in seeds):
        narrowed = used & used_hint
        logger.debug("cargo tree narrowed used set from %d to %d", len(used), len(narrowed))
        used, flags = _walk(graph.edges, seeds, within=narrowed)

    node_flags = {node: flags.get(node, EdgeFlag.NONE) for node in used}

    # Anything not reachable along runtime edges is only ever needed to
    # build, whatever its own incoming edges claim.
    runtime, _ = _walk(graph.edges, seeds, follow=EdgeFlag.CTX_NORMAL, within=used)
    for node in used - runtime:
        node_flags[node] = (node_flags[node] & ~MASK_CTX) | EdgeFlag.CTX_BUILD

    # Likewise, anything not reachable along unconditional edges is
    # target-specific.
    anywhere, _ = _walk(graph.edges, seeds, follow=EdgeFlag.TARGET_ANY, within=used)
    for node in used - anywhere:
        node_flags[node] = (node_flags[node] & ~MASK_TARGET) | EdgeFlag.TARGET_CFG

    for member in graph.workspace_members:
        if member not in used:
            continue
        for child, _ in graph.edges.get(member, ()):
            if child in node_flags:
                node_flags[child] |= EdgeFlag.DIRECT

    if targeted:
        for node in node_flags:
            node_flags[node] &= ~EdgeFlag.TARGET_CFG

    logger.debug(
        "Resolved %d used nodes (%d build-only paths, %d target-specific paths)",
        len(used),
        len(used - runtime),
        len(used - anywhere),
    )
    return node_flags


def tree_ids(graph: Graph, pairs: Iterable[tuple[str, str]] | None) -> set[str] | None:
    """Map cargo tree ``(name, version)`` pairs onto this graph's ids."""
    if not pairs:
        return None
    wanted = {(name_key(name), version) for name, version in pairs}
    ids = {
        pkg_id
        for pkg_id, pkg in graph.packages.items()
        if (name_key(pkg.name), pkg.version) in wanted
    }
    return ids or None


def _walk(
    edges: Edges,
    seeds: Iterable[str],
    *,
    follow: EdgeFlag | None = None,
    within: set[str] | None = None,
) -> tuple[set[str], dict[str, EdgeFlag]]:
    """Depth-first walk from *seeds*, OR-ing each edge's flag into its child.

    Only edges carrying a bit of *follow* are taken (all, if None), and only
    into nodes in *within* (all, if None).
    """
    visited: set[str] = set()
    flags: dict[str, EdgeFlag] = {}
    stack = list(seeds)
    while stack:
        node = stack.pop()
        if node in visited:
            continue
        visited.add(node)
        for child, flag in edges.get(node, ()):
            if within is not None and child not in within:
                continue
            if follow is not None and not flag & follow:
                continue
            flags[child] = flags.get(child, EdgeFlag.NONE) | flag
            stack.append(child)
    return visited, flags
