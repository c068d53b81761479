"""
Improvement strategies: given the current permutation and a neighbourhood,
decide which permutation becomes the next current solution.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from .errors import StalledSearch
from .neighbourhood import Neighbourhood
from .problem import Instance, Permutation


class Improvement(ABC):
    # Monotone strategies never return a worse permutation than they receive,
    # so the descent can stop at a local optimum.
    monotone: bool = True

    @abstractmethod
    def improve(self, p: Permutation, n: Neighbourhood) -> Permutation:
        ...


class BestImprovement(Improvement):
    """Scan the whole neighbourhood and keep the best strictly improving neighbour."""

    def __init__(self, instance: Instance) -> None:
        self.instance = instance

    def improve(self, p: Permutation, n: Neighbourhood) -> Permutation:
        best = p
        seen = False
        for cand in n.neighbours(p):
            seen = True
            if self.instance.is_better(cand.score, best.score):
                best = cand
        if not seen:
            raise StalledSearch(p, n.name)
        return best


class FirstImprovement(Improvement):
    """Return the first neighbour that strictly improves on `p`."""

    def __init__(self, instance: Instance) -> None:
        self.instance = instance

    def improve(self, p: Permutation, n: Neighbourhood) -> Permutation:
        seen = False
        for cand in n.neighbours(p):
            seen = True
            if self.instance.is_better(cand.score, p.score):
                return cand
        if not seen:
            raise StalledSearch(p, n.name)
        return p


__all__ = ["Improvement", "BestImprovement", "FirstImprovement"]
