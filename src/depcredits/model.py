"""Data model for resolved dependency graphs."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field, replace

from packaging.version import InvalidVersion, Version


class EdgeFlag(enum.IntFlag):
    """Context bits for a parent → child edge (and, OR-ed together, a node)."""

    NONE = 0
    DIRECT = 0b0000_0001
    OPTIONAL = 0b0000_0010
    TARGET_ANY = 0b0000_0100
    TARGET_CFG = 0b0000_1000
    CTX_NORMAL = 0b0001_0000
    CTX_BUILD = 0b0010_0000


MASK_TARGET = EdgeFlag.TARGET_ANY | EdgeFlag.TARGET_CFG
MASK_CTX = EdgeFlag.CTX_NORMAL | EdgeFlag.CTX_BUILD

_LEADING_NUMBERS = re.compile(r"\d+(?:\.\d+)*")


def name_key(name: str) -> str:
    """Comparison form of a package name: case-folded, ``-`` same as ``_``."""
    return name.lower().replace("-", "_")


def version_key(version: str) -> tuple[Version, bool, str]:
    """Sortable form of a version string.

    Cargo versions are semver; most of them parse as PEP 440 too.  Anything
    that doesn't is ordered by its leading numeric release, semver
    pre-releases (a ``-`` suffix) ahead of the release itself, with the raw
    string as tie-breaker so ordering stays total.
    """
    try:
        return Version(version), True, version
    except InvalidVersion:
        m = _LEADING_NUMBERS.match(version)
        return Version(m.group(0) if m else "0"), "-" not in version, version


@dataclass(frozen=True)
class PackageRecord:
    """One package from a single metadata payload."""

    id: str  # opaque, only meaningful within its own payload
    name: str
    version: str
    license: str | None = None
    authors: tuple[str, ...] = ()
    repository: str | None = None
    has_features: bool = False  # only computed for the root


@dataclass(frozen=True, eq=False)
class Dependency:
    """A used dependency together with its resolved context flags.

    Two dependencies are equal when their names (``-``/``_`` and case
    insensitive) and versions match, regardless of flags.
    """

    name: str
    version: str
    license: str | None = None
    authors: tuple[str, ...] = field(default=())
    url: str | None = None
    flags: EdgeFlag = EdgeFlag.NONE

    @property
    def key(self) -> tuple[str, str]:
        return name_key(self.name), self.version

    @property
    def sort_key(self) -> tuple[str, tuple[Version, bool, str]]:
        return name_key(self.name), version_key(self.version)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Dependency):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __lt__(self, other: Dependency) -> bool:
        return self.sort_key < other.sort_key

    @property
    def direct(self) -> bool:
        return bool(self.flags & EdgeFlag.DIRECT)

    @property
    def optional(self) -> bool:
        return bool(self.flags & EdgeFlag.OPTIONAL)

    @property
    def build_only(self) -> bool:
        return (self.flags & MASK_CTX) == EdgeFlag.CTX_BUILD

    @property
    def target_specific(self) -> bool:
        return (self.flags & MASK_TARGET) == EdgeFlag.TARGET_CFG

    @property
    def conditional(self) -> bool:
        """True if the dependency is not always pulled in."""
        return self.optional or self.target_specific

    @property
    def context(self) -> str:
        words = []
        if self.optional:
            words.append("optional")
        if self.build_only:
            words.append("build")
        if self.target_specific:
            words.append("target-specific")
        return ", ".join(words)

    def with_flags(self, flags: EdgeFlag) -> Dependency:
        return replace(self, flags=flags)
