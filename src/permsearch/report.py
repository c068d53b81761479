from __future__ import annotations

from typing import Any, Optional

from .vnd import SearchResult


def print_search_summary(result: SearchResult, engine: Optional[Any] = None, console: Optional[Any] = None) -> None:
    from rich.console import Console
    from rich.panel import Panel
    from rich.table import Table
    from rich import box

    console = console or Console()

    table = Table(box=box.SIMPLE)
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right")

    table.add_row("Best score", str(result.best_score))
    table.add_row("Iterations", str(result.iterations))
    table.add_row("Elapsed", f"{result.elapsed_s:.3f}s")
    table.add_row("Stop reason", result.stop_reason)
    if result.history.size:
        table.add_row("Initial score", str(int(result.history[0])))
        table.add_row("Last score", str(int(result.history[-1])))

    # Tabu engines expose their internal counters
    stats = engine.stats() if engine is not None and hasattr(engine, "stats") else {}
    for key in ("tenure", "queue_size", "escapes", "aspirations", "frequent", "distinct_seen"):
        if key in stats:
            table.add_row(key.replace("_", " ").capitalize(), str(stats[key]))

    order = " ".join(str(x) for x in result.best.order)
    console.print(Panel(table, title=f"[bold green]Search finished[/bold green] ({order})", border_style="green", padding=(1, 1)))


__all__ = ["print_search_summary"]
