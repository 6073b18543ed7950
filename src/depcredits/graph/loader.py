"""Load a cargo metadata payload into a package table and edge table."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from depcredits.errors import ParseCargoMetadataError, RootNotFoundError
from depcredits.graph.classify import classify_dep_kinds
from depcredits.model import MASK_CTX, MASK_TARGET, EdgeFlag, PackageRecord
from depcredits.sanitize import package_name

logger = logging.getLogger(__name__)


@dataclass
class Graph:
    """Packages and retained edges from one metadata payload."""

    packages: dict[str, PackageRecord]
    edges: dict[str, list[tuple[str, EdgeFlag]]] = field(default_factory=dict)
    root: str | None = None
    workspace_members: list[str] = field(default_factory=list)

    @property
    def root_package(self) -> PackageRecord | None:
        if self.root is None:
            return None
        return self.packages.get(self.root)

    def seeds(self) -> list[str]:
        """Traversal starting points: the root, else every workspace member."""
        if self.root is not None:
            return [self.root]
        return list(self.workspace_members)


def load_graph_json(raw: str | bytes) -> Graph:
    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseCargoMetadataError(str(e)) from e
    return load_graph(payload)


def load_graph(payload: Mapping[str, Any]) -> Graph:
    """Parse *payload* (the JSON shape ``cargo metadata`` prints).

    Dev-only edges and edges whose target can never match are dropped here,
    so nothing downstream can mistake them for a reason to keep a package.
    """
    if not isinstance(payload, Mapping):
        raise ParseCargoMetadataError("expected a JSON object")

    resolve = _require(payload, "resolve", Mapping, "metadata")
    root = resolve.get("root")
    if root is not None and not isinstance(root, str):
        raise ParseCargoMetadataError("resolve.root must be a string or null")

    members = payload.get("workspace_members", [])
    if not isinstance(members, list) or not all(isinstance(m, str) for m in members):
        raise ParseCargoMetadataError("workspace_members must be a list of ids")

    packages: dict[str, PackageRecord] = {}
    for raw in _require(payload, "packages", list, "metadata"):
        record = _load_package(raw, root)
        packages[record.id] = record

    if root is not None and root not in packages:
        raise RootNotFoundError(root)

    edges: dict[str, list[tuple[str, EdgeFlag]]] = {}
    dropped = 0
    for raw in _require(resolve, "nodes", list, "resolve"):
        if not isinstance(raw, Mapping):
            raise ParseCargoMetadataError("resolve node must be an object")
        node_id = _require(raw, "id", str, "resolve node")
        deps = raw.get("deps") or []
        if not isinstance(deps, list):
            raise ParseCargoMetadataError("resolve node deps must be a list")
        kept: list[tuple[str, EdgeFlag]] = []
        for dep in deps:
            child, flag = _load_edge(dep)
            if flag & MASK_CTX and flag & MASK_TARGET:
                kept.append((child, flag))
            else:
                dropped += 1
        edges[node_id] = kept

    logger.debug(
        "Loaded %d packages, %d nodes, %d edges (%d dropped)",
        len(packages),
        len(edges),
        sum(len(v) for v in edges.values()),
        dropped,
    )
    return Graph(packages=packages, edges=edges, root=root, workspace_members=members)


def _load_package(raw: Any, root: str | None) -> PackageRecord:
    if not isinstance(raw, Mapping):
        raise ParseCargoMetadataError("package entry must be an object")

    pkg_id = _require(raw, "id", str, "package")
    try:
        name = package_name(_require(raw, "name", str, "package"))
    except ValueError as e:
        raise ParseCargoMetadataError(str(e)) from e
    version = _require(raw, "version", str, "package")

    license_text = raw.get("license")
    if license_text is not None and not isinstance(license_text, str):
        raise ParseCargoMetadataError(f"license of {name} must be a string")
    authors = raw.get("authors") or []
    if not isinstance(authors, list):
        raise ParseCargoMetadataError(f"authors of {name} must be a list")
    repository = raw.get("repository")
    if repository is not None and not isinstance(repository, str):
        raise ParseCargoMetadataError(f"repository of {name} must be a string")

    return PackageRecord(
        id=pkg_id,
        name=name,
        version=version,
        license=license_text,
        authors=tuple(a for a in authors if isinstance(a, str)),
        repository=repository,
        has_features=pkg_id == root and declares_features(raw.get("features")),
    )


def _load_edge(raw: Any) -> tuple[str, EdgeFlag]:
    if not isinstance(raw, Mapping):
        raise ParseCargoMetadataError("node dependency must be an object")
    child = _require(raw, "pkg", str, "node dependency")
    dep_kinds = raw.get("dep_kinds") or []
    if not isinstance(dep_kinds, list) or not all(isinstance(dk, Mapping) for dk in dep_kinds):
        raise ParseCargoMetadataError(f"dep_kinds of {child} must be a list of objects")
    return child, classify_dep_kinds(dep_kinds)


def declares_features(features: Any) -> bool:
    """True if a ``features`` map has anything besides ``default``."""
    if not isinstance(features, Mapping):
        return False
    if len(features) > 1:
        return True
    return len(features) == 1 and "default" not in features


def _require(obj: Mapping[str, Any], key: str, kind: type, where: str) -> Any:
    value = obj.get(key)
    if not isinstance(value, kind):
        raise ParseCargoMetadataError(f"{where}: missing or invalid field {key!r}")
    return value
