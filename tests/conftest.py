from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, Iterator, List, Sequence

import numpy as np
import pytest

# Ensure we can import from src/
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from permsearch.problem import Instance, MatrixInstance, Permutation  # noqa: E402
from permsearch.neighbourhood import Neighbourhood  # noqa: E402


class OrderingCostInstance(MatrixInstance):
    """Pays matrix[a, b] whenever `a` is placed before `b`."""

    def evaluate(self, order: Sequence[int]) -> int:
        idx = np.asarray(order, dtype=np.int64)
        sub = self.matrix[np.ix_(idx, idx)]
        return int(np.triu(sub, k=1).sum())


class ScoreOnlyInstance(Instance):
    """Instance for hand-built permutations; scores are given, never computed."""

    def __init__(self, size: int = 4, total_sum: int = 123, minimize: bool = True) -> None:
        self._size = size
        self._total = total_sum
        self.minimize = minimize

    @property
    def size(self) -> int:
        return self._size

    @property
    def total_sum(self) -> int:
        return self._total

    def evaluate(self, order: Sequence[int]) -> int:
        return int(sum(i * int(x) for i, x in enumerate(order)))


class ScriptedNeighbourhood(Neighbourhood):
    """Returns the next batch of candidates on every call, whatever the input."""

    name = "scripted"

    def __init__(self, batches: List[List[Permutation]], instance: Instance | None = None) -> None:
        super().__init__(instance or ScoreOnlyInstance())
        self.batches = list(batches)
        self.calls = 0

    def neighbours(self, p: Permutation) -> Iterator[Permutation]:
        batch = self.batches[self.calls] if self.calls < len(self.batches) else []
        self.calls += 1
        return iter(batch)


class EmptyNeighbourhood(Neighbourhood):
    name = "empty"

    def neighbours(self, p: Permutation) -> Iterator[Permutation]:
        return iter(())


def perm(order: Sequence[int], score: int) -> Permutation:
    return Permutation(order=tuple(order), score=score)


def inversion_matrix(n: int) -> np.ndarray:
    a = np.arange(n)
    return (a[:, None] > a[None, :]).astype(np.int64)


@pytest.fixture
def inversion_instance() -> OrderingCostInstance:
    return OrderingCostInstance(inversion_matrix(6))


@pytest.fixture
def random_instance() -> OrderingCostInstance:
    rng = np.random.default_rng(7)
    return OrderingCostInstance(rng.integers(0, 20, size=(7, 7)))
