"""
Tabu Search improvement with adaptive tenure and frequency-based escape.

Each call to `TabuImprovement.improve` performs one step:

  - pick the best neighbour that is not tabu (aspiration when all are tabu),
  - update the elite solution,
  - count how often the picked solution was seen and adapt the tenure:
      * a solution reaching the occurrence threshold becomes "frequently
        encountered" and the tenure grows by TT_INC,
      * after `tt_iterations_wo_modification` steps without growth the
        tenure shrinks by TT_DEC (never below 1),
  - push the picked solution into the tabu queue,
  - when too many solutions are frequently encountered, escape with a burst
    of random moves and forget the occurrence statistics.

Solutions are identified by their score in the occurrence table. Distinct
permutations with equal scores share a counter; this trades accuracy for
speed and memory. `TabuConfig.full_content_keys` switches to full content.
The tabu queue always compares full content.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Hashable, List, Optional, Set

import numpy as np

from ..errors import StalledSearch
from ..improvement import Improvement
from ..logging import SearchLogger
from ..neighbourhood import Neighbourhood
from ..problem import Instance, Permutation
from .config import TabuConfig
from .memory import TabuQueue

logger = logging.getLogger(__name__)


class TabuImprovement(Improvement):
    """Memory-guided improvement step usable by the VND driver."""

    # Tenure growth when a solution becomes frequently encountered
    TT_INC = 1
    # Tenure shrink after a stable period
    TT_DEC = 1

    monotone = False

    def __init__(
        self,
        instance: Instance,
        config: Optional[TabuConfig] = None,
        *,
        rng: Optional[np.random.Generator] = None,
        initial: Optional[Permutation] = None,
        search_logger: Optional[SearchLogger] = None,
    ) -> None:
        self.instance = instance
        self.cfg = (config or TabuConfig()).validate()
        self.rng = rng or np.random.default_rng(instance.seed)
        self.search_logger = search_logger

        self._tenure = int(self.cfg.tenure)
        self._queue = TabuQueue(self._tenure)
        self._occurrences: Dict[Hashable, int] = {}
        self._frequent: Set[Hashable] = set()
        self.tt_iterations_no_modif = 0
        self._elite: Optional[Permutation] = initial

        self.iterations = 0
        self.escapes = 0
        self.aspirations = 0
        self._step_level = logging.INFO if self.cfg.is_verbose else logging.DEBUG

    # ------------------------------ Accessors ------------------------------
    @property
    def elite(self) -> Optional[Permutation]:
        return self._elite

    @property
    def tenure(self) -> int:
        return self._tenure

    @property
    def tabu_queue(self) -> TabuQueue:
        return self._queue

    @property
    def frequently_encountered(self) -> frozenset:
        return frozenset(self._frequent)

    @property
    def permutation_occurrences(self) -> Dict[Hashable, int]:
        return dict(self._occurrences)

    def stats(self) -> Dict[str, Any]:
        return {
            "iterations": self.iterations,
            "escapes": self.escapes,
            "aspirations": self.aspirations,
            "tenure": self._tenure,
            "queue_size": len(self._queue),
            "frequent": len(self._frequent),
            "distinct_seen": len(self._occurrences),
            "elite_score": None if self._elite is None else self._elite.score,
        }

    # --------------------------------- API --------------------------------
    def improve(self, p: Permutation, n: Neighbourhood) -> Permutation:
        if self._elite is None:
            self._elite = p
        return self.step_tabu_search(p, n)

    def step_tabu_search(self, p: Permutation, n: Neighbourhood) -> Permutation:
        candidates = list(n.neighbours(p))
        if not candidates:
            raise StalledSearch(p, getattr(n, "name", None))

        selected = self._select(candidates)
        self.iterations += 1

        self.update_elite(selected)
        trigger_escape = self.check_repetitions(selected)
        self.update_tabu_queue(selected)

        if trigger_escape:
            selected = self.escape(selected, n)
            self.update_elite(selected)
            self.update_tabu_queue(selected)

        logger.log(
            self._step_level,
            "Tabu it=%d score=%d elite=%d tenure=%d queue=%d frequent=%d",
            self.iterations,
            selected.score,
            self._elite.score if self._elite is not None else selected.score,
            self._tenure,
            len(self._queue),
            len(self._frequent),
        )
        return selected

    # ------------------------------ Internals ------------------------------
    def _best(self, candidates: List[Permutation]) -> Optional[Permutation]:
        best: Optional[Permutation] = None
        for cand in candidates:
            if best is None or self.instance.is_better(cand.score, best.score):
                best = cand
        return best

    def _select(self, candidates: List[Permutation]) -> Permutation:
        allowed = [c for c in candidates if c not in self._queue]
        chosen = self._best(allowed)
        if chosen is not None:
            return chosen

        # Every candidate is tabu: aspiration on the elite, else least bad tabu move
        best_tabu = self._best(candidates)
        assert best_tabu is not None
        if self._elite is not None and self.instance.is_better(best_tabu.score, self._elite.score):
            self.aspirations += 1
            logger.log(self._step_level, "Aspiration: tabu candidate %d beats elite %d", best_tabu.score, self._elite.score)
        return best_tabu

    def _key(self, p: Permutation) -> Hashable:
        return p.order if self.cfg.full_content_keys else p.score

    def _set_tenure(self, value: int, reason: str) -> None:
        old = self._tenure
        self._tenure = max(1, int(value))
        self._queue.resize(self._tenure)
        if self._tenure != old:
            logger.log(self._step_level, "Tenure %d -> %d (%s)", old, self._tenure, reason)
            if self.search_logger is not None:
                self.search_logger.tenure(self.iterations, old, self._tenure, reason)

    def check_repetitions(self, new_p: Permutation) -> bool:
        """Update occurrence statistics and the tenure; True when escape is due."""
        key = self._key(new_p)
        count = self._occurrences.get(key, 0) + 1
        self._occurrences[key] = count

        if count >= self.cfg.max_occurrences_frequently_encountered and key not in self._frequent:
            self._frequent.add(key)
            self._set_tenure(self._tenure + self.TT_INC, "cycling")
            self.tt_iterations_no_modif = 0
        else:
            self.tt_iterations_no_modif += 1
            if self.tt_iterations_no_modif >= self.cfg.tt_iterations_wo_modification:
                self._set_tenure(self._tenure - self.TT_DEC, "stable")
                self.tt_iterations_no_modif = 0

        return len(self._frequent) > self.cfg.max_candidate_trigger_escape

    def escape(self, p: Permutation, n: Neighbourhood) -> Permutation:
        """Apply between 1 and `random_steps_escape` random moves to `p`."""
        steps = int(self.rng.integers(1, self.cfg.random_steps_escape, endpoint=True))
        current = p
        applied = 0
        for _ in range(steps):
            neighbours = list(n.neighbours(current))
            if not neighbours:
                break
            current = neighbours[int(self.rng.integers(len(neighbours)))]
            applied += 1

        frequent_before = len(self._frequent)
        self._frequent.clear()
        self._occurrences.clear()
        self.escapes += 1

        logger.info(
            "Escape #%d after %d iterations: %d random moves, %d frequent solutions, score %d -> %d",
            self.escapes,
            self.iterations,
            applied,
            frequent_before,
            p.score,
            current.score,
        )
        if self.search_logger is not None:
            self.search_logger.escape(self.iterations, applied, p, current)
        return current

    def update_tabu_queue(self, p: Permutation) -> None:
        self._queue.push(p)

    def update_elite(self, new_p: Permutation) -> None:
        if self._elite is None or self.instance.is_better(new_p.score, self._elite.score):
            old = None if self._elite is None else self._elite.score
            self._elite = new_p
            logger.log(self._step_level, "New elite %d (was %s)", new_p.score, old)
            if self.search_logger is not None:
                self.search_logger.elite(self.iterations, new_p)


__all__ = ["TabuImprovement"]
