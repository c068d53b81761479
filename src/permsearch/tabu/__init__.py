from .config import TabuConfig
from .memory import TabuQueue
from .engine import TabuImprovement

__all__ = [
    "TabuConfig",
    "TabuQueue",
    "TabuImprovement",
]
