"""Classify raw (kind, target) edge descriptors into edge flags."""

from __future__ import annotations

import enum
from typing import Any

from depcredits.model import EdgeFlag

# cargo's spellings for "applies nowhere" and "applies everywhere"
NEVER_TARGET = "cfg(any())"
ALWAYS_TARGET = "cfg(all())"


class DepKind(enum.Enum):
    NORMAL = "normal"
    BUILD = "build"
    DEV = "dev"


class TargetCondition(enum.Enum):
    ALWAYS = "always"
    NEVER = "never"
    CONDITIONAL = "conditional"


def parse_kind(raw: Any) -> DepKind:
    """Map a raw ``kind`` value; anything but build/dev is a normal dep."""
    if raw == "build":
        return DepKind.BUILD
    if raw == "dev":
        return DepKind.DEV
    return DepKind.NORMAL


def parse_target(raw: Any) -> TargetCondition:
    """Map a raw ``target`` value; only the exact cfg spellings are special."""
    if raw is None or raw == ALWAYS_TARGET:
        return TargetCondition.ALWAYS
    if raw == NEVER_TARGET:
        return TargetCondition.NEVER
    return TargetCondition.CONDITIONAL


def classify(kind: DepKind, target: TargetCondition) -> EdgeFlag:
    """Return the edge flag for one descriptor.

    Dev kinds and unsatisfiable targets contribute nothing.  Otherwise the
    result is one context bit (normal or build) plus one target bit (any or
    cfg).
    """
    if kind is DepKind.DEV or target is TargetCondition.NEVER:
        return EdgeFlag.NONE

    flag = EdgeFlag.CTX_BUILD if kind is DepKind.BUILD else EdgeFlag.CTX_NORMAL
    if target is TargetCondition.CONDITIONAL:
        return flag | EdgeFlag.TARGET_CFG
    return flag | EdgeFlag.TARGET_ANY


def classify_dep_kinds(dep_kinds: list[dict[str, Any]]) -> EdgeFlag:
    """OR together the flags of every descriptor on an edge."""
    flag = EdgeFlag.NONE
    for dk in dep_kinds:
        flag |= classify(parse_kind(dk.get("kind")), parse_target(dk.get("target")))
    return flag
