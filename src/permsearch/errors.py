from __future__ import annotations

from typing import Any, Optional


class ConfigurationError(ValueError):
    """Raised when search parameters are structurally invalid."""


class StalledSearch(RuntimeError):
    """Raised when a neighbourhood yields no candidate for a permutation."""

    def __init__(self, permutation: Any, neighbourhood: Optional[str] = None) -> None:
        self.permutation = permutation
        self.neighbourhood = neighbourhood
        where = f" in neighbourhood '{neighbourhood}'" if neighbourhood else ""
        super().__init__(f"No candidate reachable from permutation{where}")


__all__ = ["ConfigurationError", "StalledSearch"]
