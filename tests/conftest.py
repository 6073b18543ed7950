"""Shared fixtures: in-memory metadata payloads and a fake graph source."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from depcredits.errors import CargoError
from depcredits.graph.base import FeaturesMode, GraphPayload

NORMAL = {"kind": None, "target": None}
BUILD = {"kind": "build", "target": None}
DEV = {"kind": "dev", "target": None}
CFG_WINDOWS = {"kind": None, "target": "cfg(windows)"}


def pkg_id(name: str, version: str = "1.0.0") -> str:
    return f"registry+https://github.com/rust-lang/crates.io-index#{name}@{version}"


def make_payload(
    packages: list[tuple[str, str] | dict[str, Any]],
    edges: dict[str, list[tuple[str, list[dict[str, Any]]]]],
    *,
    root: str | None = "root",
    members: list[str] | None = None,
    features: dict[str, list[str]] | None = None,
) -> GraphPayload:
    """Build a ``cargo metadata``-shaped payload.

    *packages* are ``(name, version)`` pairs or full package dicts; *edges*
    map a parent name to ``(child name, dep_kinds)`` pairs.  Every package
    gets a resolve node, and names are assumed unique.
    """
    entries: list[dict[str, Any]] = []
    ids: dict[str, str] = {}
    for item in packages:
        if isinstance(item, tuple):
            item = {"name": item[0], "version": item[1]}
        entry = {
            "id": pkg_id(item["name"], item["version"]),
            "license": "MIT",
            "authors": [],
            "repository": None,
            "features": {},
            **item,
        }
        if item["name"] == root and features is not None:
            entry["features"] = features
        ids[item["name"]] = entry["id"]
        entries.append(entry)

    nodes = [
        {
            "id": ids[name],
            "deps": [
                {"name": child, "pkg": ids[child], "dep_kinds": kinds}
                for child, kinds in edges.get(name, [])
            ],
        }
        for name in ids
    ]
    if members is None:
        members = [root] if root is not None else []
    return {
        "packages": entries,
        "workspace_members": [ids[m] for m in members],
        "resolve": {"nodes": nodes, "root": ids[root] if root is not None else None},
    }


class FakeSource:
    """A GraphSource serving canned payloads per feature mode."""

    def __init__(
        self,
        payloads: dict[FeaturesMode, GraphPayload],
        tree: dict[FeaturesMode, set[tuple[str, str]]] | None = None,
    ) -> None:
        self.payloads = payloads
        self.tree = tree or {}
        self.calls: list[tuple[FeaturesMode, str | None]] = []

    def fetch_graph(
        self, manifest_path: Path, features_mode: FeaturesMode, target: str | None = None
    ) -> GraphPayload:
        self.calls.append((features_mode, target))
        if features_mode not in self.payloads:
            raise CargoError(f"no payload for {features_mode.value}")
        return self.payloads[features_mode]

    def fetch_tree(
        self, manifest_path: Path, features_mode: FeaturesMode, target: str | None = None
    ) -> set[tuple[str, str]] | None:
        return self.tree.get(features_mode)


@pytest.fixture
def scenario_payload() -> GraphPayload:
    """root -> a (normal); a -> b (build); a -> c (cfg(windows))."""
    return make_payload(
        [("root", "0.1.0"), ("a", "1.0.0"), ("b", "2.0.0"), ("c", "3.0.0")],
        {
            "root": [("a", [NORMAL])],
            "a": [("b", [BUILD]), ("c", [CFG_WINDOWS])],
        },
    )


@pytest.fixture
def manifest(tmp_path: Path) -> Path:
    path = tmp_path / "Cargo.toml"
    path.write_text('[package]\nname = "root"\nversion = "0.1.0"\n', encoding="utf-8")
    return path
