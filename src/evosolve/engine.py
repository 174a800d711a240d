"""
Main Engine class for evosolve.

The Engine wires a Config into a GenerationalEngine, the console reporter and
a run budget. Use it when you need more control than ``solve()`` gives you:
custom operators, extra reporters, or cancelling an unbounded run from
another thread.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, List, Tuple

from evosolve.config import Config, get_default_config
from evosolve.core.population import Candidate, Population
from evosolve.evolution.loop import EngineState, GenerationalEngine
from evosolve.evolution.operators import CrossoverStrategy, MutationStrategy, SelectionStrategy
from evosolve.orchestrator.budget import CancellationToken, RunBudget
from evosolve.orchestrator.reporting import Reporter, RichReporter, print_explanation
from evosolve.utils.logging import LogLevel, print_header, set_verbosity


@dataclass
class RunResult:
    """
    Result of one optimization run.

    Attributes:
        best: Fittest candidate seen in any generation (None if no generation ran)
        generations: Number of generations completed
        evaluations: Total fitness evaluations performed
        stop_reason: "max_generations", "cancelled" or "max_time"
        history: Per-generation statistics
        lineage: Lineage table of the last generation
        elapsed: Wall-clock seconds spent in the run
    """

    best: Candidate | None
    generations: int = 0
    evaluations: int = 0
    stop_reason: str = ""
    history: List[dict] = field(default_factory=list)
    lineage: Dict[int, Tuple[int, int]] = field(default_factory=dict)
    elapsed: float = 0.0

    def to_dict(self, include_lineage: bool = False) -> dict:
        data = {
            "best": asdict(self.best) if self.best is not None else None,
            "generations": self.generations,
            "evaluations": self.evaluations,
            "stop_reason": self.stop_reason,
            "elapsed": self.elapsed,
            "history": self.history,
        }
        if include_lineage:
            data["lineage"] = {
                str(child): list(parents) for child, parents in sorted(self.lineage.items())
            }
        return data


class Engine:
    """
    High-level interface to the optimizer.

    Examples:
        Basic usage:
        >>> engine = Engine()
        >>> result = engine.run()
        >>> print(result.best)

        Custom configuration:
        >>> from evosolve.config import Config
        >>> config = Config()
        >>> config.evolution.population_size = 10_000
        >>> config.evolution.sample_size = 100
        >>> config.evolution.generations = 20
        >>> engine = Engine(config=config)

        Unbounded run, cancelled from elsewhere:
        >>> config.evolution.generations = None
        >>> engine = Engine(config=config)
        >>> threading.Timer(5.0, engine.cancel).start()
        >>> result = engine.run()   # stop_reason == "cancelled"
    """

    def __init__(
        self,
        config: Config | None = None,
        reporters: List[Reporter] | None = None,
        selection_strategy: SelectionStrategy | None = None,
        mutation_strategy: MutationStrategy | None = None,
        crossover_strategy: CrossoverStrategy | None = None,
        population: Population | None = None,
        verbosity: str | LogLevel | None = None,
    ):
        """
        Initialize the engine.

        Args:
            config: Complete configuration object (uses defaults if None). It is
                copied, so later changes to it do not affect this engine.
            reporters: Reporters to attach. None attaches the console
                reporter configured by ``config.output``; pass [] for none.
            selection_strategy: Custom selection algorithm
            mutation_strategy: Custom mutation algorithm
            crossover_strategy: Custom crossover algorithm
            population: Explicit founding population
            verbosity: Overrides ``config.output.verbosity``

        Raises:
            ConfigurationError: If the evolution settings cannot be run
        """
        # Overrides below must not leak into the caller's config
        self.config = config.model_copy(deep=True) if config is not None else get_default_config()

        if verbosity is not None:
            if isinstance(verbosity, LogLevel):
                verbosity = verbosity.name.lower()
            self.config.output.verbosity = verbosity
        set_verbosity(self.config.output.verbosity)

        output = self.config.output
        if reporters is None:
            reporters = [
                RichReporter(
                    show_lineage=output.show_lineage,
                    lineage_rows=output.lineage_rows,
                    pace=output.pace,
                )
            ]

        self.token = CancellationToken()
        self._founders = population
        self.loop = GenerationalEngine(
            self.config.evolution,
            selection=selection_strategy,
            mutation=mutation_strategy,
            crossover=crossover_strategy,
            reporters=reporters,
            population=population,
            top=output.top,
            lineage_every=output.lineage_every,
        )

    def cancel(self) -> None:
        """Ask a running engine to stop after the current generation."""
        self.token.cancel()

    def run(self) -> RunResult:
        """
        Run the optimizer until its generation budget, time budget or
        cancellation ends it.

        Returns:
            RunResult with the best candidate and run statistics
        """
        evolution = self.config.evolution
        if self.loop.state is EngineState.TERMINATED:
            # Fresh run: new founders, same random stream
            self.loop.initialize(self._founders)
            self.token.reset()

        if self.config.output.explain:
            print_explanation()

        bound = "unbounded" if evolution.generations is None else f"{evolution.generations} generations"
        print_header(
            f"evosolve | N={evolution.population_size} K={evolution.sample_size} | {bound}"
        )

        budget = RunBudget(
            max_generations=evolution.generations,
            max_time=self.config.budget.max_time,
            token=self.token,
        )
        result = self.loop.run(budget)

        return RunResult(
            best=result.best,
            generations=result.generations,
            evaluations=result.total_evaluations,
            stop_reason=result.stop_reason,
            history=result.history,
            lineage=result.lineage,
            elapsed=result.elapsed,
        )
