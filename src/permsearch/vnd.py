"""
Variable Neighbourhood Descent driver.

The driver owns the iteration/time budget and the neighbourhood sequence;
the `Improvement` strategy decides what happens inside one neighbourhood.
After a step that beats the best solution so far the descent restarts from
the first neighbourhood, otherwise it moves on to the next one.

  - Monotone strategies (pivoting rules) stop once no neighbourhood improves:
    the current solution is a local optimum for all of them.
  - Non-monotone strategies (tabu search) keep cycling through the
    neighbourhoods until the budget is spent.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from .errors import ConfigurationError, StalledSearch
from .improvement import Improvement
from .logging import SearchLogger
from .neighbourhood import Neighbourhood, build_neighbourhood
from .problem import Instance, Permutation

logger = logging.getLogger(__name__)


@dataclass
class VNDConfig:
    neighbourhoods: Tuple[str, ...] = ("transpose", "exchange", "insert")
    max_iterations: int = 1000
    # None disables the wall-clock budget
    max_time_s: Optional[float] = None

    def validate(self) -> "VNDConfig":
        if not self.neighbourhoods:
            raise ConfigurationError("At least one neighbourhood is required")
        if isinstance(self.max_iterations, bool) or int(self.max_iterations) < 1:
            raise ConfigurationError(f"max_iterations must be >= 1, got {self.max_iterations!r}")
        if self.max_time_s is not None and float(self.max_time_s) <= 0:
            raise ConfigurationError(f"max_time_s must be positive, got {self.max_time_s!r}")
        return self


@dataclass
class SearchResult:
    best: Permutation
    iterations: int
    elapsed_s: float
    stop_reason: str
    history: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.int64))

    @property
    def best_score(self) -> int:
        return self.best.score


class VariableNeighbourhoodDescent:
    def __init__(
        self,
        instance: Instance,
        improvement: Improvement,
        config: Optional[VNDConfig] = None,
        *,
        neighbourhoods: Optional[Sequence[Neighbourhood]] = None,
        search_logger: Optional[SearchLogger] = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.instance = instance
        self.improvement = improvement
        self.cfg = (config or VNDConfig()).validate()
        if neighbourhoods is not None:
            self.neighbourhoods: List[Neighbourhood] = list(neighbourhoods)
        else:
            self.neighbourhoods = [build_neighbourhood(name, instance) for name in self.cfg.neighbourhoods]
        if not self.neighbourhoods:
            raise ConfigurationError("At least one neighbourhood is required")
        self.search_logger = search_logger
        self._clock = clock

    def run(self, initial: Optional[Permutation] = None) -> SearchResult:
        current = initial or self.instance.identity()
        best = current
        history: List[int] = [current.score]
        n_nb = len(self.neighbourhoods)
        monotone = bool(getattr(self.improvement, "monotone", True))

        k = 0
        iterations = 0
        stalled: set = set()
        stop_reason = "max_iterations"
        start = self._clock()

        if self.search_logger is not None:
            self.search_logger.run_start(
                type(self.improvement).__name__,
                [nb.name for nb in self.neighbourhoods],
                current,
                max_iterations=int(self.cfg.max_iterations),
                max_time_s=self.cfg.max_time_s,
            )
        logger.info(
            "VND start: strategy=%s neighbourhoods=%s initial=%d",
            type(self.improvement).__name__,
            ",".join(nb.name for nb in self.neighbourhoods),
            current.score,
        )

        while iterations < int(self.cfg.max_iterations):
            if self.cfg.max_time_s is not None and self._clock() - start >= float(self.cfg.max_time_s):
                stop_reason = "time_budget"
                break

            nb = self.neighbourhoods[k]
            try:
                candidate = self.improvement.improve(current, nb)
            except StalledSearch as exc:
                logger.warning("Neighbourhood %s stalled at score %d", nb.name, exc.permutation.score)
                stalled.add(k)
                if len(stalled) == n_nb:
                    stop_reason = "stalled"
                    break
                k += 1
                if k == n_nb:
                    if monotone:
                        stop_reason = "stalled"
                        break
                    k = 0
                continue

            iterations += 1
            stalled.discard(k)
            history.append(candidate.score)

            reference = current if monotone else best
            improved = self.instance.is_better(candidate.score, reference.score)
            current = candidate
            if self.instance.is_better(candidate.score, best.score):
                best = candidate

            if improved:
                k = 0
                continue

            k += 1
            if k == n_nb:
                if monotone:
                    stop_reason = "local_optimum"
                    break
                k = 0

        # An escape can replace a new elite before the step returns it
        elite = getattr(self.improvement, "elite", None)
        if elite is not None and self.instance.is_better(elite.score, best.score):
            best = elite

        elapsed = self._clock() - start
        logger.info(
            "VND end: best=%d iterations=%d elapsed=%.3fs reason=%s",
            best.score,
            iterations,
            elapsed,
            stop_reason,
        )
        if self.search_logger is not None:
            self.search_logger.run_end(best, iterations, elapsed, stop_reason)
        return SearchResult(
            best=best,
            iterations=iterations,
            elapsed_s=float(elapsed),
            stop_reason=stop_reason,
            history=np.asarray(history, dtype=np.int64),
        )


__all__ = ["VNDConfig", "SearchResult", "VariableNeighbourhoodDescent"]
