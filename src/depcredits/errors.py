"""Exception hierarchy for depcredits.

Library code raises these and lets them propagate; only the CLI turns them
into a message and an exit status.
"""

from __future__ import annotations


class DepCreditsError(Exception):
    """Base class for all depcredits errors."""


class CargoError(DepCreditsError):
    """The cargo executable could not be run, or it reported a failure."""

    def __init__(self, message: str = "unable to run cargo metadata") -> None:
        super().__init__(message)


class ParseCargoMetadataError(DepCreditsError):
    """The metadata payload is not shaped the way we expect."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"unable to parse cargo metadata: {detail}")
        self.detail = detail


class RootNotFoundError(ParseCargoMetadataError):
    """The resolve root is missing from the package array."""

    def __init__(self, root: str | None = None) -> None:
        DepCreditsError.__init__(self, "root package not found")
        self.detail = "root package not found"
        self.root = root


class ConfigError(DepCreditsError):
    """The manifest's depcredits table could not be read."""


class ManifestNotFoundError(DepCreditsError):
    """No Cargo.toml exists at the requested location."""

    def __init__(self, path: object) -> None:
        super().__init__(f"manifest not found: {path}")
        self.path = path


class WriteError(DepCreditsError):
    """An output file could not be written."""

    def __init__(self, path: object, reason: str = "") -> None:
        message = f"unable to write: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.path = path
