"""Local search over permutations: VND driver, pivoting rules and tabu search."""

from .errors import ConfigurationError, StalledSearch
from .problem import Permutation, Instance, MatrixInstance
from .neighbourhood import (
    Neighbourhood,
    TransposeNeighbourhood,
    ExchangeNeighbourhood,
    InsertNeighbourhood,
    available_neighbourhoods,
    build_neighbourhood,
)
from .improvement import Improvement, BestImprovement, FirstImprovement
from .tabu import TabuConfig, TabuQueue, TabuImprovement
from .vnd import VNDConfig, SearchResult, VariableNeighbourhoodDescent
from .logging import SearchLogger
from .report import print_search_summary

__all__ = [
    "ConfigurationError",
    "StalledSearch",
    "Permutation",
    "Instance",
    "MatrixInstance",
    "Neighbourhood",
    "TransposeNeighbourhood",
    "ExchangeNeighbourhood",
    "InsertNeighbourhood",
    "available_neighbourhoods",
    "build_neighbourhood",
    "Improvement",
    "BestImprovement",
    "FirstImprovement",
    "TabuConfig",
    "TabuQueue",
    "TabuImprovement",
    "VNDConfig",
    "SearchResult",
    "VariableNeighbourhoodDescent",
    "SearchLogger",
    "print_search_summary",
]
