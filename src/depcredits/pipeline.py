"""Orchestrator: locate manifest → resolve → render → write."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from depcredits.config import read_config
from depcredits.errors import ManifestNotFoundError, RootNotFoundError
from depcredits.graph.assemble import dedupe
from depcredits.graph.base import GraphSource
from depcredits.graph.cargo import DEFAULT_TIMEOUT, CargoMetadataSource
from depcredits.graph.features import resolve_dependencies
from depcredits.renderer.credits import render_credits, write_credits

logger = logging.getLogger(__name__)


def find_manifest(manifest_path: Path | None = None) -> Path:
    """Resolve *manifest_path* (a file, a directory, or None for cwd)."""
    path = (manifest_path or Path.cwd()).expanduser()
    if path.is_dir():
        path = path / "Cargo.toml"
    if not path.is_file():
        raise ManifestNotFoundError(path)
    return path.resolve()


def run(
    manifest_path: Path | None = None,
    *,
    target: str | None = None,
    output: Path | None = None,
    print_only: bool = False,
    timeout: float | None = DEFAULT_TIMEOUT,
    source: GraphSource | None = None,
) -> Path | None:
    """Run the full pipeline and return the output path (None with print_only)."""
    manifest = find_manifest(manifest_path)
    config = read_config(manifest)
    logger.debug("Manifest: %s, target: %s", manifest, target or "all")

    if source is None:
        source = CargoMetadataSource(timeout=timeout)
    resolved = resolve_dependencies(source, manifest, target)
    if resolved.root is None:
        raise RootNotFoundError()

    # Resolved entries come first so they win over manual credits.
    deps = dedupe([*resolved.dependencies, *config.extra_credits])
    logger.debug(
        "Dependencies: %d total, %d direct, %d optional",
        len(deps),
        sum(d.direct for d in deps),
        sum(d.optional for d in deps),
    )

    text = render_credits(resolved.root.name, resolved.root.version, deps)
    if print_only:
        sys.stdout.write(text)
        return None

    out_path = output or (config.credits_dir / "CREDITS.md")
    write_credits(text, out_path)
    logger.info("Generated %s", out_path)
    return out_path
