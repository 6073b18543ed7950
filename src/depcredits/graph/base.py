"""Graph source protocol: where metadata payloads come from."""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Any, Protocol

GraphPayload = dict[str, Any]


class FeaturesMode(str, enum.Enum):
    """Which feature set the metadata command resolves with."""

    NO_DEFAULT = "no-default-features"
    ALL = "all-features"

    @property
    def flag(self) -> str:
        return f"--{self.value}"


class GraphSource(Protocol):
    """Protocol for metadata providers.

    The resolver only ever talks to this, so tests can hand it in-memory
    payloads while the CLI wires in the cargo-backed implementation.
    """

    def fetch_graph(
        self, manifest_path: Path, features_mode: FeaturesMode, target: str | None = None
    ) -> GraphPayload:
        """Return the parsed metadata payload for *manifest_path*."""
        ...

    def fetch_tree(
        self, manifest_path: Path, features_mode: FeaturesMode, target: str | None = None
    ) -> set[tuple[str, str]] | None:
        """Return ``(name, version)`` pairs the tree command lists, or None."""
        ...
