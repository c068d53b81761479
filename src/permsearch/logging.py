"""
JSONL trace of a permutation search run.

Each line is one event with a UTC timestamp and a ``type``:

  - ``run_start`` / ``run_end``: written by the VND driver,
  - ``elite``: a strictly better solution was found,
  - ``tenure``: the tabu tenure changed (``reason`` is "cycling" or "stable"),
  - ``escape``: a random walk replaced the current solution.

The typed helpers fix the payload of each kind; `event` stays available for
anything else a caller wants to record.
"""

from __future__ import annotations

import dataclasses
import json
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence

import numpy as np

from .problem import Permutation


def _utc_stamp(fmt: Optional[str] = None) -> str:
    now = datetime.now(timezone.utc).replace(microsecond=0)
    if fmt is not None:
        return now.strftime(fmt)
    return now.replace(tzinfo=None).isoformat() + "Z"


@dataclass
class SearchLogger:
    path: str
    _fh: Optional[Any] = None
    events_written: int = 0

    @classmethod
    def open(cls, path: str) -> "SearchLogger":
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        trace = cls(path=path)
        trace._fh = open(path, "w", encoding="utf-8")
        return trace

    @classmethod
    def to_timestamped(cls, base_dir: str, prefix: str = "run") -> "SearchLogger":
        return cls.open(os.path.join(base_dir, f"{prefix}_{_utc_stamp('%Y%m%d_%H%M%S')}.jsonl"))

    @property
    def closed(self) -> bool:
        return self._fh is None

    def event(self, kind: str, payload: Optional[Dict[str, Any]] = None) -> None:
        # Closed traces drop events silently so a finished run can be inspected safely
        if self._fh is None:
            return
        row = {"ts": _utc_stamp(), "type": str(kind)}
        row.update(payload or {})
        self._fh.write(json.dumps(row, ensure_ascii=False, separators=(",", ":"), default=_to_json) + "\n")
        self._fh.flush()
        self.events_written += 1

    # Search events
    def run_start(self, strategy: str, neighbourhoods: Sequence[str], initial: Permutation, **limits: Any) -> None:
        self.event(
            "run_start",
            {"strategy": strategy, "neighbourhoods": list(neighbourhoods), "initial_score": initial.score, **limits},
        )

    def run_end(self, best: Permutation, iterations: int, elapsed_s: float, stop_reason: str) -> None:
        self.event(
            "run_end",
            {
                "best_score": best.score,
                "best_order": best.order,
                "iterations": int(iterations),
                "elapsed_s": float(elapsed_s),
                "stop_reason": stop_reason,
            },
        )

    def elite(self, iteration: int, p: Permutation) -> None:
        self.event("elite", {"it": int(iteration), "score": p.score, "order": p.order})

    def tenure(self, iteration: int, old: int, new: int, reason: str) -> None:
        self.event("tenure", {"it": int(iteration), "old": int(old), "new": int(new), "reason": reason})

    def escape(self, iteration: int, steps: int, origin: Permutation, result: Permutation) -> None:
        self.event(
            "escape",
            {"it": int(iteration), "steps": int(steps), "from": origin.score, "to": result.score},
        )

    def close(self) -> None:
        if self._fh is not None:
            self._fh.flush()
            self._fh.close()
            self._fh = None

    def __enter__(self) -> "SearchLogger":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


def _to_json(obj: Any):
    if isinstance(obj, np.generic):
        return obj.item()
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, Permutation):
        return {"order": list(obj.order), "score": obj.score}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    return str(obj)


__all__ = ["SearchLogger"]
