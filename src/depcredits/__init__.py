"""depcredits: work out which crate dependencies are really used, and how."""

from __future__ import annotations

__version__ = "0.1.0"
