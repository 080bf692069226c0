"""Live pool monitor: rich tables of pool fill levels and source health.

Shows, refreshed in place:
- Each pool's accumulated bytes and how often it is drained (every 2**k reseeds)
- Generator state: seeded, reseed count, next round-robin pool
- Per-source health from the accumulator
"""

from __future__ import annotations

import time

from rich.console import Console, Group
from rich.live import Live
from rich.table import Table
from rich.text import Text

from fortuna.accumulator import EntropyAccumulator
from fortuna.generator import Fortuna

BAR_WIDTH = 16


def _fill_bar(length: int, threshold: int) -> Text:
    ratio = min(length / threshold, 1.0) if threshold else 1.0
    filled = int(ratio * BAR_WIDTH)
    color = "green" if ratio >= 1.0 else "yellow" if ratio >= 0.5 else "bright_black"
    return Text("█" * filled + "░" * (BAR_WIDTH - filled), style=color)


def render_pool_table(generator: Fortuna) -> Table:
    """One row per pool: index, bytes held, fill bar, drain cadence."""
    threshold = generator.config.reseed_entropy_threshold
    table = Table(
        title=(
            f"Fortuna pools  seeded={'yes' if generator.can_generate() else 'no'}  "
            f"reseeds={generator.reseed_index}  next={generator.entropy_pool_index}"
        )
    )
    table.add_column("Pool", justify="right")
    table.add_column("Bytes", justify="right")
    table.add_column("Fill")
    table.add_column("Drained every", justify="right")
    for i, length in enumerate(generator.get_entropy_pool_lengths()):
        table.add_row(str(i), f"{length:,}", _fill_bar(length, threshold), f"{1 << i:,} reseeds")
    return table


def render_health_table(report: dict) -> Table:
    """Source health from ``EntropyAccumulator.health_report()``."""
    table = Table(title=f"Sources  {report['healthy']}/{report['total']} healthy")
    table.add_column("Source")
    table.add_column("OK", justify="center")
    table.add_column("Bytes", justify="right")
    table.add_column("Events", justify="right")
    table.add_column("H", justify="right")
    table.add_column("Time", justify="right")
    table.add_column("Fail", justify="right")
    for s in report["sources"]:
        table.add_row(
            s["name"],
            Text("✓", style="green") if s["healthy"] else Text("✗", style="red"),
            f"{s['bytes']:,}",
            f"{s['events']:,}",
            f"{s['entropy']:.2f}",
            f"{s['time']:.3f}s",
            str(s["failures"]),
        )
    return table


class PoolMonitor:
    """Collect continuously and redraw the pool and source tables.

    Each refresh collects one round from every source and then requests a
    zero-length output, which reseeds the generator whenever it is eligible.
    """

    def __init__(
        self,
        generator: Fortuna,
        accumulator: EntropyAccumulator,
        refresh_rate: float = 1.0,
        console: Console | None = None,
    ) -> None:
        self.generator = generator
        self.accumulator = accumulator
        self.refresh_rate = refresh_rate
        self.console = console or Console()

    def step(self) -> Group:
        self.accumulator.collect_all()
        if self.generator.can_reseed():
            self.generator.get_random_bytes(0)
        return Group(
            render_pool_table(self.generator),
            render_health_table(self.accumulator.health_report()),
        )

    def run(self, iterations: int | None = None) -> None:
        """Refresh until interrupted, or for *iterations* rounds."""
        count = 0
        with Live(self.step(), console=self.console, refresh_per_second=4) as live:
            try:
                while iterations is None or count < iterations:
                    time.sleep(self.refresh_rate)
                    live.update(self.step())
                    count += 1
            except KeyboardInterrupt:
                pass


__all__ = ["PoolMonitor", "render_health_table", "render_pool_table"]
