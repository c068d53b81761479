from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Sequence

import numpy as np

# Ensure 'src' is importable when running the example directly
REPO_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from permsearch import (
    MatrixInstance,
    SearchLogger,
    TabuConfig,
    TabuImprovement,
    VariableNeighbourhoodDescent,
    VNDConfig,
    print_search_summary,
)


class PrecedenceCostInstance(MatrixInstance):
    """Toy ordering problem: pays matrix[a, b] whenever a is placed before b."""

    def evaluate(self, order: Sequence[int]) -> int:
        idx = np.asarray(order, dtype=np.int64)
        return int(np.triu(self.matrix[np.ix_(idx, idx)], k=1).sum())


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    rng = np.random.default_rng(2024)
    instance = PrecedenceCostInstance(rng.integers(0, 100, size=(12, 12)))

    trace = SearchLogger.to_timestamped(str(REPO_ROOT / "output" / "tabu_runs"))
    engine = TabuImprovement(
        instance,
        TabuConfig(tenure=5, tt_iterations_wo_modification=15, max_candidate_trigger_escape=4),
        search_logger=trace,
    )
    vnd = VariableNeighbourhoodDescent(
        instance,
        engine,
        VNDConfig(neighbourhoods=("transpose", "insert"), max_iterations=500, max_time_s=30.0),
        search_logger=trace,
    )
    try:
        result = vnd.run(instance.random_permutation())
    finally:
        trace.close()

    print_search_summary(result, engine)
    print(f"Trace written to {trace.path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
