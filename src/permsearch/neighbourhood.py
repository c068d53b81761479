from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Iterator, List, Type

from .errors import ConfigurationError
from .problem import Instance, Permutation


class Neighbourhood(ABC):
    """Move-generation policy. Neighbours are yielded lazily, in a fixed order."""

    name: str = "abstract"

    def __init__(self, instance: Instance) -> None:
        self.instance = instance

    @abstractmethod
    def neighbours(self, p: Permutation) -> Iterator[Permutation]:
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(n={self.instance.size})"


class TransposeNeighbourhood(Neighbourhood):
    """Swap two adjacent elements: n - 1 neighbours."""

    name = "transpose"

    def neighbours(self, p: Permutation) -> Iterator[Permutation]:
        for i in range(len(p) - 1):
            yield self.instance.permutation(p.swapped(i, i + 1))


class ExchangeNeighbourhood(Neighbourhood):
    """Swap any two elements: n(n-1)/2 neighbours."""

    name = "exchange"

    def neighbours(self, p: Permutation) -> Iterator[Permutation]:
        n = len(p)
        for i in range(n - 1):
            for j in range(i + 1, n):
                yield self.instance.permutation(p.swapped(i, j))


class InsertNeighbourhood(Neighbourhood):
    """Move one element to another position: (n-1)^2 neighbours."""

    name = "insert"

    def neighbours(self, p: Permutation) -> Iterator[Permutation]:
        n = len(p)
        for i in range(n):
            for j in range(n):
                # moving i to i-1 equals moving i-1 to i
                if j == i or j == i - 1:
                    continue
                yield self.instance.permutation(p.moved(i, j))


NEIGHBOURHOODS: Dict[str, Type[Neighbourhood]] = {
    TransposeNeighbourhood.name: TransposeNeighbourhood,
    ExchangeNeighbourhood.name: ExchangeNeighbourhood,
    InsertNeighbourhood.name: InsertNeighbourhood,
}


def available_neighbourhoods() -> List[str]:
    return sorted(NEIGHBOURHOODS)


def build_neighbourhood(name: str, instance: Instance) -> Neighbourhood:
    key = str(name).strip().lower()
    cls = NEIGHBOURHOODS.get(key)
    if cls is None:
        raise ConfigurationError(
            f"Unknown neighbourhood '{name}'. Expected one of: {', '.join(available_neighbourhoods())}"
        )
    return cls(instance)


__all__ = [
    "Neighbourhood",
    "TransposeNeighbourhood",
    "ExchangeNeighbourhood",
    "InsertNeighbourhood",
    "NEIGHBOURHOODS",
    "available_neighbourhoods",
    "build_neighbourhood",
]
