"""
Solution encoding and problem contract for permutation search.

A `Permutation` is an immutable ordering of ``0..n-1`` together with its
cached objective score. An `Instance` knows how to score an ordering and in
which direction scores improve; concrete problems subclass it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence, Tuple

import numpy as np


@dataclass(frozen=True, order=True)
class Permutation:
    """Ordered candidate solution. Equality, hashing and ordering use `order` only."""

    order: Tuple[int, ...]
    score: int = field(compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "order", tuple(int(x) for x in self.order))
        object.__setattr__(self, "score", int(self.score))

    def __len__(self) -> int:
        return len(self.order)

    def __iter__(self) -> Iterator[int]:
        return iter(self.order)

    def __getitem__(self, idx: int) -> int:
        return self.order[idx]

    # Moves return a new ordering; the caller scores it through the instance.
    def swapped(self, i: int, j: int) -> Tuple[int, ...]:
        seq = list(self.order)
        seq[i], seq[j] = seq[j], seq[i]
        return tuple(seq)

    def moved(self, i: int, j: int) -> Tuple[int, ...]:
        """Remove the element at position `i` and reinsert it at position `j`."""
        seq = list(self.order)
        item = seq.pop(i)
        seq.insert(j, item)
        return tuple(seq)


class Instance(ABC):
    """Static problem data able to score permutations.

    Subclasses provide `size`, `total_sum` and `evaluate`. `minimize` fixes the
    comparison direction used everywhere a "better" score is needed.
    """

    minimize: bool = True

    @property
    @abstractmethod
    def size(self) -> int:
        ...

    @property
    @abstractmethod
    def total_sum(self) -> int:
        ...

    @abstractmethod
    def evaluate(self, order: Sequence[int]) -> int:
        ...

    @property
    def seed(self) -> int:
        # numpy seeds must be non-negative
        return abs(int(self.total_sum))

    def is_better(self, a: int, b: int) -> bool:
        """True when score `a` is strictly better than score `b`."""
        return a < b if self.minimize else a > b

    def permutation(self, order: Sequence[int]) -> Permutation:
        order_t = tuple(int(x) for x in order)
        if sorted(order_t) != list(range(self.size)):
            raise ValueError(f"Order is not a permutation of 0..{self.size - 1}: {order_t}")
        return Permutation(order=order_t, score=self.evaluate(order_t))

    def identity(self) -> Permutation:
        return self.permutation(range(self.size))

    def random_permutation(self, rng: Optional[np.random.Generator] = None) -> Permutation:
        rng = rng or np.random.default_rng(self.seed)
        return self.permutation(rng.permutation(self.size).tolist())


class MatrixInstance(Instance):
    """Instance backed by a square integer matrix (costs, weights, distances)."""

    def __init__(self, matrix, *, minimize: bool = True) -> None:
        arr = np.asarray(matrix, dtype=np.int64)
        if arr.ndim != 2 or arr.shape[0] != arr.shape[1]:
            raise ValueError(f"Expected a square matrix, got shape {arr.shape}")
        self.matrix = arr
        self.minimize = bool(minimize)

    @property
    def size(self) -> int:
        return int(self.matrix.shape[0])

    @property
    def total_sum(self) -> int:
        return int(self.matrix.sum())


__all__ = ["Permutation", "Instance", "MatrixInstance"]
