"""
Reporting interface between the engine and the outside world.

Once per generation the engine builds a GenerationReport and hands it to each
registered Reporter. Reporters only observe: they never touch engine state and
are the only place where blocking output (printing, pacing delays) happens.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Mapping, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from evosolve.core.population import NO_PARENT, Candidate
from evosolve.utils.logging import LogLevel, console as default_console, get_verbosity


PARAMETER_EXPLANATION = """\
[bold]x[/bold]: enters the constraint linearly with weight 6.
[bold]y[/bold]: enters the constraint linearly with weight -1.
[bold]z[/bold]: raised to the 200th power; any |z| much above 1 dominates the residual.

Fitness is |1 / (6x - y + z^200 - 25)|, so higher is better.
All three parameters start uniformly random and are evolved over generations
by truncation selection, 1% multiplicative mutation and coordinate crossover."""


@dataclass
class GenerationReport:
    """Everything the engine exposes about one finished generation."""

    generation: int
    population_size: int
    sample_size: int
    leaders: List[Candidate]
    survivor_means: Tuple[float, float, float]
    best_fitness: float
    mean_fitness: float
    degenerate: int = 0
    best: Candidate | None = None  # Fittest survivor, set even when leaders is empty
    lineage: Mapping[int, Tuple[int, int]] | None = None
    is_final: bool = False

    def to_dict(self) -> dict:
        """Per-generation statistics, without the lineage table."""
        mean_x, mean_y, mean_z = self.survivor_means
        return {
            "generation": self.generation,
            "best_fitness": self.best_fitness,
            "mean_fitness": self.mean_fitness,
            "mean_x": mean_x,
            "mean_y": mean_y,
            "mean_z": mean_z,
            "degenerate": self.degenerate,
            "population_size": self.population_size,
        }


class Reporter(ABC):
    """Receives one GenerationReport per generation."""

    @abstractmethod
    def report(self, report: GenerationReport) -> None:
        pass

    def close(self) -> None:
        """Called once when the run terminates."""


class HistoryReporter(Reporter):
    """Keeps every report in memory (handy for tests and notebooks)."""

    def __init__(self):
        self.reports: List[GenerationReport] = []

    def report(self, report: GenerationReport) -> None:
        self.reports.append(report)

    @property
    def last(self) -> GenerationReport | None:
        return self.reports[-1] if self.reports else None


class RichReporter(Reporter):
    """
    Console leaderboard for watching a run live.

    Prints, per generation, the top candidates, the mean coordinates of the
    survivor sample and, whenever the engine attaches one, the lineage table.
    After a lineage table it optionally pauses for ``pace`` seconds so the
    output can be followed live.
    """

    def __init__(
        self,
        console: Console | None = None,
        show_lineage: bool = True,
        lineage_rows: int | None = 20,
        pace: float = 0.0,
        min_level: LogLevel = LogLevel.NORMAL,
    ):
        self.console = console or default_console
        self.show_lineage = show_lineage
        self.lineage_rows = lineage_rows
        self.pace = pace
        self.min_level = min_level

    def report(self, report: GenerationReport) -> None:
        if get_verbosity() < self.min_level:
            return

        self.console.rule(f"[bold]Generation {report.generation}[/bold]")
        if report.leaders:
            self.console.print(self._leaderboard(report))

        mean_x, mean_y, mean_z = report.survivor_means
        self.console.print(
            f"[dim]Survivor means ({report.sample_size}):[/dim] "
            f"x={mean_x:.6f}  y={mean_y:.6f}  z={mean_z:.6f}"
        )
        if report.degenerate:
            self.console.print(f"[yellow]{report.degenerate} candidates overflowed[/yellow]")

        if self.show_lineage and report.lineage is not None:
            self.console.print(self._lineage_table(report))
            if self.pace > 0:
                time.sleep(self.pace)

    def _leaderboard(self, report: GenerationReport) -> Table:
        table = Table(title=f"Top {len(report.leaders)} candidates", title_justify="left")
        table.add_column("#", justify="right", style="dim")
        table.add_column("id", justify="right")
        table.add_column("fitness", justify="right", style="green")
        table.add_column("x", justify="right")
        table.add_column("y", justify="right")
        table.add_column("z", justify="right")

        for position, candidate in enumerate(report.leaders, start=1):
            table.add_row(
                str(position),
                str(candidate.id),
                f"{candidate.fitness:.6g}" if candidate.fitness is not None else "-",
                f"{candidate.x:.6f}",
                f"{candidate.y:.6f}",
                f"{candidate.z:.6f}",
            )
        return table

    def _lineage_table(self, report: GenerationReport) -> Table:
        lineage = report.lineage or {}
        table = Table(title="Lineage (child -> parents)", title_justify="left")
        table.add_column("child", justify="right")
        table.add_column("parent a (x)", justify="right")
        table.add_column("parent b (z)", justify="right")

        rows = sorted(lineage.items())
        shown = rows if self.lineage_rows is None else rows[: self.lineage_rows]
        for child, (parent_a, parent_b) in shown:
            table.add_row(str(child), _parent_label(parent_a), _parent_label(parent_b))

        hidden = len(rows) - len(shown)
        if hidden > 0:
            table.caption = f"... {hidden} more entries"
        return table


def _parent_label(parent: int) -> str:
    return "-" if parent == NO_PARENT else str(parent)


def print_explanation(console: Console | None = None) -> None:
    """Print what x, y and z mean before a run starts."""
    if get_verbosity() >= LogLevel.MINIMAL:
        (console or default_console).print(
            Panel(PARAMETER_EXPLANATION, title="[bold]Parameters[/bold]", border_style="blue")
        )
