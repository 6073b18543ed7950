"""Dependency graph resolution: load, classify, traverse, assemble."""

from __future__ import annotations

from depcredits.graph.assemble import assemble, dedupe
from depcredits.graph.base import FeaturesMode, GraphPayload, GraphSource
from depcredits.graph.cargo import CargoMetadataSource
from depcredits.graph.features import Resolved, resolve_dependencies
from depcredits.graph.loader import Graph, load_graph
from depcredits.graph.reachability import resolve

__all__ = [
    "CargoMetadataSource",
    "FeaturesMode",
    "Graph",
    "GraphPayload",
    "GraphSource",
    "Resolved",
    "assemble",
    "dedupe",
    "load_graph",
    "resolve",
    "resolve_dependencies",
]
