from __future__ import annotations

import numbers
import os
from dataclasses import dataclass, fields

from ..errors import ConfigurationError


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "on", "y"}


@dataclass
class TabuConfig:
    # Starting capacity of the tabu queue
    tenure: int = 7

    # Adaptive tenure: iterations without a tenure change before it shrinks
    tt_iterations_wo_modification: int = 20
    # Occurrences after which a solution counts as frequently encountered
    max_occurrences_frequently_encountered: int = 3

    # Escape: fires once more than this many solutions are frequent
    max_candidate_trigger_escape: int = 5
    # Escape: upper bound on the number of random moves applied
    random_steps_escape: int = 10

    # Identify solutions by full content instead of score (no collisions, more memory)
    full_content_keys: bool = False

    # Step-level logging at INFO instead of DEBUG; TABU_VERBOSE=1 also enables it
    verbose: bool = False

    def validate(self) -> "TabuConfig":
        for f in fields(self):
            if f.type not in ("int", int):
                continue
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise ConfigurationError(f"{f.name} must be an integer, got {value!r}")
            if value < 1:
                raise ConfigurationError(f"{f.name} must be >= 1, got {value}")
            # numpy integers are accepted and stored as plain ints
            setattr(self, f.name, int(value))
        return self

    @property
    def is_verbose(self) -> bool:
        return bool(self.verbose) or _env_flag("TABU_VERBOSE")


__all__ = ["TabuConfig"]
