"""Read depcredits settings from the manifest's package metadata."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from depcredits.errors import ConfigError
from depcredits.model import Dependency, EdgeFlag
from depcredits.sanitize import nice_authors, nice_license, nice_url, package_name

logger = logging.getLogger(__name__)

# [package.metadata.depcredits] wins; [package.metadata.bashman] is read for
# manifests that were set up for the older tool.
_TABLES = ("depcredits", "bashman")


@dataclass
class CreditsConfig:
    """Settings for one manifest."""

    credits_dir: Path
    extra_credits: list[Dependency] = field(default_factory=list)


def read_config(manifest_path: Path) -> CreditsConfig:
    """Return the settings declared in *manifest_path*, or defaults."""
    defaults = CreditsConfig(credits_dir=manifest_path.parent)
    if not manifest_path.exists():
        return defaults

    try:
        with open(manifest_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Cargo.toml parsing error: {e}") from e
    except OSError as e:
        raise ConfigError(f"unable to read {manifest_path}: {e}") from e

    package = data.get("package", {})
    if not isinstance(package, dict):
        raise ConfigError("package must be a table")
    metadata = package.get("metadata", {})
    section: dict | None = None
    for name in _TABLES:
        candidate = metadata.get(name) if isinstance(metadata, dict) else None
        if isinstance(candidate, dict):
            section = candidate
            logger.debug("Using [package.metadata.%s] from %s", name, manifest_path)
            break
    if section is None:
        return defaults

    credits_dir = defaults.credits_dir
    raw_dir = section.get("credits-dir")
    if isinstance(raw_dir, str) and raw_dir.strip():
        credits_dir = manifest_path.parent / raw_dir.strip()

    raw_credits = section.get("credits", [])
    if not isinstance(raw_credits, list):
        raise ConfigError("credits must be an array of tables")

    return CreditsConfig(
        credits_dir=credits_dir,
        extra_credits=[_parse_credit(entry) for entry in raw_credits],
    )


def _parse_credit(entry: object) -> Dependency:
    """Turn one manually declared credit into a direct dependency."""
    if not isinstance(entry, dict):
        raise ConfigError("credits entries must be tables")

    name = entry.get("name")
    version = entry.get("version")
    if not isinstance(name, str) or not isinstance(version, str) or not version.strip():
        raise ConfigError("credits entries require a name and version")
    try:
        name = package_name(name)
    except ValueError as e:
        raise ConfigError(str(e)) from e

    authors = entry.get("authors", [])
    flags = EdgeFlag.DIRECT
    if entry.get("optional", False):
        flags |= EdgeFlag.OPTIONAL

    return Dependency(
        name=name,
        version=version.strip(),
        license=nice_license(entry.get("license")),
        authors=nice_authors(authors if isinstance(authors, list) else []),
        url=nice_url(entry.get("repository")),
        flags=flags,
    )
