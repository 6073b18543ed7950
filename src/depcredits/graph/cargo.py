"""Graph source backed by the ``cargo metadata`` and ``cargo tree`` commands."""

from __future__ import annotations

import json
import logging
import os
import subprocess
from pathlib import Path

from depcredits.errors import CargoError, ParseCargoMetadataError
from depcredits.graph.base import FeaturesMode, GraphPayload

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 300.0

# Anything else on stdout means cargo printed something we can't use.
_METADATA_PREFIX = '{"packages":['


def cargo_executable() -> str:
    """Return ``$CARGO`` if set (as it is under ``cargo <plugin>``), else cargo."""
    return os.environ.get("CARGO") or "cargo"


class CargoMetadataSource:
    """Run cargo as a subprocess to produce metadata payloads."""

    def __init__(self, timeout: float | None = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout

    def fetch_graph(
        self, manifest_path: Path, features_mode: FeaturesMode, target: str | None = None
    ) -> GraphPayload:
        cmd = [
            cargo_executable(),
            "metadata",
            "--quiet",
            "--color",
            "never",
            "--format-version",
            "1",
            features_mode.flag,
            "--manifest-path",
            str(manifest_path),
        ]
        if target:
            cmd.extend(["--filter-platform", target])

        try:
            result = self._run(cmd)
        except (OSError, subprocess.TimeoutExpired) as e:
            raise CargoError(f"could not run cargo metadata: {e}") from e

        if result.returncode != 0:
            raise CargoError(
                "cargo metadata failed: "
                + (result.stderr.strip() if result.stderr else "unknown error")
            )
        if not result.stdout.startswith(_METADATA_PREFIX):
            raise CargoError("cargo metadata returned unexpected output")

        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise ParseCargoMetadataError(str(e)) from e

    def fetch_tree(
        self, manifest_path: Path, features_mode: FeaturesMode, target: str | None = None
    ) -> set[tuple[str, str]] | None:
        """Return the ``(name, version)`` pairs cargo tree lists, or None."""
        cmd = [
            cargo_executable(),
            "tree",
            "--quiet",
            "--color",
            "never",
            "--edges",
            "normal,build",
            "--prefix",
            "none",
            features_mode.flag,
            "--target",
            target or "all",
            "--manifest-path",
            str(manifest_path),
        ]
        try:
            result = self._run(cmd)
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug("Could not run cargo tree: %s", e)
            return None

        if result.returncode != 0:
            logger.debug(
                "cargo tree failed: %s",
                result.stderr.strip() if result.stderr else "unknown error",
            )
            return None

        pairs = parse_tree(result.stdout)
        return pairs or None

    def _run(self, cmd: list[str]) -> subprocess.CompletedProcess[str]:
        logger.debug("Running: %s", " ".join(cmd))
        return subprocess.run(
            cmd,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            timeout=self.timeout,
        )


def parse_tree(output: str) -> set[tuple[str, str]]:
    """Parse ``name vX.Y.Z ...`` lines from ``cargo tree --prefix none``."""
    pairs: set[tuple[str, str]] = set()
    for line in output.splitlines():
        parts = line.split()
        if len(parts) < 2 or not parts[1].startswith("v") or len(parts[1]) < 2:
            continue
        pairs.add((parts[0], parts[1][1:]))
    return pairs
