from __future__ import annotations

import logging
from pathlib import Path

import pytest
from conftest import NORMAL, FakeSource, make_payload

from depcredits.graph.base import FeaturesMode
from depcredits.graph.features import merge_optional, resolve_dependencies
from depcredits.model import Dependency, EdgeFlag

MANIFEST = Path("Cargo.toml")
FEATURES = {"default": [], "fancy": ["dep:d"]}


def _payloads(features=FEATURES):
    default = make_payload(
        [("root", "0.1.0"), ("a", "1.0.0"), ("d", "4.0.0")],
        {"root": [("a", [NORMAL])]},
        features=features,
    )
    featured = make_payload(
        [("root", "0.1.0"), ("a", "1.0.0"), ("d", "4.0.0")],
        {"root": [("a", [NORMAL]), ("d", [NORMAL])]},
        features=features,
    )
    return default, featured


def test_feature_gated_dependency_is_optional() -> None:
    default, featured = _payloads()
    source = FakeSource({FeaturesMode.NO_DEFAULT: default, FeaturesMode.ALL: featured})

    resolved = resolve_dependencies(source, MANIFEST)

    deps = {d.name: d for d in resolved.dependencies}
    assert resolved.root.name == "root"
    assert set(deps) == {"a", "d"}
    assert deps["d"].optional
    assert deps["d"].direct
    assert not deps["a"].optional
    assert [mode for mode, _ in source.calls] == [FeaturesMode.NO_DEFAULT, FeaturesMode.ALL]


def test_no_features_means_single_pass() -> None:
    default, featured = _payloads(features={"default": ["x"]})
    source = FakeSource({FeaturesMode.NO_DEFAULT: default, FeaturesMode.ALL: featured})

    resolved = resolve_dependencies(source, MANIFEST)

    assert [d.name for d in resolved.dependencies] == ["a"]
    assert source.calls == [(FeaturesMode.NO_DEFAULT, None)]


def test_all_features_failure_falls_back(caplog: pytest.LogCaptureFixture) -> None:
    default, _ = _payloads()
    source = FakeSource({FeaturesMode.NO_DEFAULT: default})

    with caplog.at_level(logging.WARNING, logger="depcredits"):
        resolved = resolve_dependencies(source, MANIFEST)

    assert [d.name for d in resolved.dependencies] == ["a"]
    assert not resolved.dependencies[0].optional
    assert "Skipping optional dependency detection" in caplog.text


def test_malformed_all_features_payload_falls_back(caplog: pytest.LogCaptureFixture) -> None:
    default, featured = _payloads()
    featured["resolve"]["nodes"][0]["deps"] = 5
    source = FakeSource({FeaturesMode.NO_DEFAULT: default, FeaturesMode.ALL: featured})

    with caplog.at_level(logging.WARNING, logger="depcredits"):
        resolved = resolve_dependencies(source, MANIFEST)

    assert [d.name for d in resolved.dependencies] == ["a"]
    assert "resolve node deps must be a list" in caplog.text


def test_target_is_passed_through() -> None:
    default, featured = _payloads()
    source = FakeSource({FeaturesMode.NO_DEFAULT: default, FeaturesMode.ALL: featured})

    resolve_dependencies(source, MANIFEST, "x86_64-pc-windows-msvc")

    assert {target for _, target in source.calls} == {"x86_64-pc-windows-msvc"}


def test_merge_keeps_default_entry_on_collision() -> None:
    base = EdgeFlag.CTX_NORMAL | EdgeFlag.TARGET_ANY
    default = [Dependency("a", "1.0.0", flags=base | EdgeFlag.DIRECT)]
    featured = [
        Dependency("a", "1.0.0", flags=base),
        Dependency("a", "1.1.0", flags=base),
    ]

    merged = merge_optional(default, featured)

    assert [(d.version, d.optional) for d in merged] == [("1.0.0", False), ("1.1.0", True)]
    assert merged[0].direct


def test_merge_matches_by_name_and_version_not_id() -> None:
    default = [Dependency("foo-bar", "1.0.0")]
    featured = [Dependency("Foo_Bar", "1.0.0")]
    assert merge_optional(default, featured) == default
