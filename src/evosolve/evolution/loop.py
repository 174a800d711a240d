"""Generational evolution engine."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Tuple

import torch

from evosolve.config import EvolutionConfig
from evosolve.core.fitness import FitnessEvaluator
from evosolve.core.lineage import LineageTracker
from evosolve.core.population import Candidate, IdAllocator, Population
from evosolve.errors import ConfigurationError
from evosolve.evolution.crossover import get_crossover_strategy
from evosolve.evolution.mutation import get_mutation_strategy
from evosolve.evolution.operators import CrossoverStrategy, MutationStrategy, SelectionStrategy
from evosolve.evolution.selection import get_selection_strategy, validate_sample_size
from evosolve.orchestrator.budget import RunBudget
from evosolve.orchestrator.reporting import GenerationReport, Reporter
from evosolve.utils.device import get_device, make_generator
from evosolve.utils.logging import LogLevel, log_event, log_generation, log_phase


class EngineState(Enum):
    """Phases of the engine; one generation walks EVALUATING through REPORTING."""

    INITIALIZED = "initialized"
    EVALUATING = "evaluating"
    RANKING = "ranking"
    MUTATING = "mutating"
    RECOMBINING = "recombining"
    REPORTING = "reporting"
    TERMINATED = "terminated"


@dataclass
class EvolutionResult:
    """Result of a run."""

    best: Candidate | None
    generations: int
    total_evaluations: int
    stop_reason: str
    history: List[dict] = field(default_factory=list)
    lineage: Dict[int, Tuple[int, int]] = field(default_factory=dict)
    elapsed: float = 0.0


def validate_config(config: EvolutionConfig) -> None:
    """
    Reject configurations the engine cannot run.

    Raises:
        ConfigurationError: On a sample size outside [1, population_size], a
            negative generation count, or an empty initialization range
    """
    if config.population_size < 1:
        raise ConfigurationError(
            f"population_size must be at least 1, got {config.population_size}"
        )
    validate_sample_size(config.sample_size, config.population_size)
    if config.generations is not None and config.generations < 0:
        raise ConfigurationError(f"generations must be non-negative, got {config.generations}")
    if not (math.isfinite(config.init_low) and math.isfinite(config.init_high)):
        raise ConfigurationError("init_low and init_high must be finite")
    if config.init_low >= config.init_high:
        raise ConfigurationError(
            f"init_low must be below init_high, got [{config.init_low}, {config.init_high})"
        )


class GenerationalEngine:
    """
    Owns the population and runs it through generations.

    Every generation walks the same fixed sequence of phases, each one
    finishing for the whole population before the next starts:

    1. **Evaluating**: score every candidate
    2. **Ranking**: keep the K fittest as the survivor sample
    3. **Mutating**: perturb the survivors in place
    4. **Recombining**: breed offspring, replace the population, record lineage
    5. **Reporting**: hand a GenerationReport to every reporter

    Each phase is a single vectorized torch operation over the population,
    drawing randomness only from ``self.generator``. A fixed seed therefore
    reproduces the whole run.

    Example:
        >>> from evosolve.config import EvolutionConfig
        >>> config = EvolutionConfig(population_size=1_000, sample_size=20, generations=5, seed=1)
        >>> engine = GenerationalEngine(config)
        >>> result = engine.run()
        >>> print(result.best.fitness, result.stop_reason)
    """

    def __init__(
        self,
        config: EvolutionConfig,
        selection: SelectionStrategy | None = None,
        mutation: MutationStrategy | None = None,
        crossover: CrossoverStrategy | None = None,
        evaluator: FitnessEvaluator | None = None,
        reporters: Iterable[Reporter] | None = None,
        population: Population | None = None,
        generator: torch.Generator | None = None,
        top: int = 10,
        lineage_every: int = 5,
    ):
        """
        Initialize the engine and seed the founding population.

        Args:
            config: Evolution configuration (N, K, generations, seed, ...)
            selection: Custom selection strategy (default: the one named in
                ``config.selection``)
            mutation: Custom mutation strategy (default: the one named in
                ``config.mutation``, with its bounds)
            crossover: Custom crossover strategy (default: the one named in
                ``config.crossover``)
            evaluator: Custom fitness evaluator
            reporters: Observers receiving one GenerationReport per generation
            population: Explicit founding population of exactly
                ``population_size`` candidates instead of a random one
            generator: Random stream to use instead of one built from the seed
            top: Number of leaders included in each report
            lineage_every: Attach the lineage table every this many generations

        Raises:
            ConfigurationError: If the configuration cannot be run
        """
        validate_config(config)
        if top < 0:
            raise ConfigurationError(f"top must be non-negative, got {top}")
        if lineage_every < 1:
            raise ConfigurationError(f"lineage_every must be at least 1, got {lineage_every}")

        self.config = config
        if selection is not None:
            self.selection = selection
        else:
            self.selection = get_selection_strategy(config.selection.strategy)

        if mutation is not None:
            self.mutation = mutation
        else:
            self.mutation = get_mutation_strategy(
                config.mutation.strategy,
                low=config.mutation.low,
                high=config.mutation.high,
            )

        if crossover is not None:
            self.crossover = crossover
        else:
            self.crossover = get_crossover_strategy(config.crossover.strategy)
        self.evaluator = evaluator or FitnessEvaluator()
        self.reporters: List[Reporter] = list(reporters or [])
        self.top = top
        self.lineage_every = lineage_every

        self.device = get_device(config.device)
        self.generator = generator or make_generator(config.seed, self.device)
        self.allocator = IdAllocator()
        self.lineage = LineageTracker()

        self._population: Population | None = None
        self._generation = 0
        self._evaluations = 0
        self._state = EngineState.INITIALIZED

        self.initialize(population)

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def population(self) -> Population:
        return self._population

    @property
    def generation(self) -> int:
        """Number of completed generations."""
        return self._generation

    @property
    def total_evaluations(self) -> int:
        return self._evaluations

    def add_reporter(self, reporter: Reporter) -> None:
        self.reporters.append(reporter)

    def initialize(self, population: Population | None = None) -> None:
        """Seed the founding population and reset all run state."""
        n = self.config.population_size

        if population is None:
            self.allocator = IdAllocator()
            population = Population.random(
                n,
                self.config.init_low,
                self.config.init_high,
                self.allocator,
                self.generator,
                device=self.device,
            )
        else:
            if len(population) != n:
                raise ConfigurationError(
                    f"founding population has {len(population)} candidates, "
                    f"expected population_size={n}"
                )
            if torch.unique(population.ids).numel() != n:
                raise ConfigurationError("founding population has duplicate candidate ids")
            population = population.clone()
            population.clear_fitness()
            population = _to_device(population, self.device)
            start = int(population.ids.max().item()) + 1 if n else 0
            self.allocator = IdAllocator(start=start)

        self._population = population
        self._generation = 0
        self._evaluations = 0
        self.lineage.clear()
        self._state = EngineState.INITIALIZED

        log_event(
            "INITIALIZED",
            level=LogLevel.VERBOSE,
            population=n,
            sample=self.config.sample_size,
            device=str(self.device),
        )

    def step(self, is_final: bool = False) -> GenerationReport:
        """
        Run one full generation.

        Args:
            is_final: Whether this is the last generation of a bounded run
                (forces the lineage table into the report)

        Returns:
            The report handed to the reporters

        Raises:
            ConfigurationError: If the survivor sample size became invalid;
                the engine is TERMINATED afterwards
            RuntimeError: If the engine has already terminated
        """
        if self._state is EngineState.TERMINATED:
            raise RuntimeError("Engine has terminated; call initialize() to start a new run")

        generation = self._generation + 1
        population = self._population
        n = self.config.population_size
        k = self.config.sample_size

        # Evaluate
        self._state = EngineState.EVALUATING
        degenerate = self.evaluator.evaluate_population(population)
        self._evaluations += len(population)
        log_phase("evaluated", generation=generation, degenerate=degenerate)

        # Rank + truncate
        self._state = EngineState.RANKING
        try:
            sample = self.selection.select(population, k)
        except ConfigurationError as e:
            self._state = EngineState.TERMINATED
            log_event("CONFIGURATION_ERROR", level=LogLevel.MINIMAL, error=str(e))
            raise

        if self.top <= len(sample):
            leaders = sample.to_candidates(self.top)
        else:
            order = self.selection.rank(population)
            leaders = population.subset(order[: self.top]).to_candidates()

        best = sample.candidate(0)
        survivor_means = sample.means()
        best_fitness = sample.fitness[0].item()
        finite = population.fitness[torch.isfinite(population.fitness)]
        mean_fitness = finite.mean().item() if finite.numel() else math.nan
        log_phase("ranked", generation=generation, survivors=len(sample))

        # Mutate survivors in place
        self._state = EngineState.MUTATING
        self.mutation.mutate(sample, self.generator)
        log_phase("mutated", generation=generation)

        # Recombine
        self._state = EngineState.RECOMBINING
        self.lineage.clear(generation)
        n_offspring = n - len(sample) if self.config.retain_survivors else n
        offspring = self.crossover.crossover(sample, n_offspring, self.allocator, self.generator)
        self.lineage.record(offspring.ids, offspring.parent_a, offspring.parent_b)

        if self.config.retain_survivors:
            sample.clear_fitness()
            next_population = sample.concat(offspring)
        else:
            next_population = offspring

        if len(next_population) != n:
            raise RuntimeError(
                f"Population size drifted to {len(next_population)}, expected {n}"
            )
        self._population = next_population
        self._generation = generation
        log_phase("recombined", generation=generation, offspring=len(offspring))

        # Report
        self._state = EngineState.REPORTING
        include_lineage = is_final or generation % self.lineage_every == 0
        report = GenerationReport(
            generation=generation,
            population_size=n,
            sample_size=len(sample),
            leaders=leaders,
            best=best,
            survivor_means=survivor_means,
            best_fitness=best_fitness,
            mean_fitness=mean_fitness,
            degenerate=degenerate,
            lineage=self.lineage.snapshot() if include_lineage else None,
            is_final=is_final,
        )

        log_generation(
            gen=generation,
            population=n,
            best_fitness=best_fitness,
            mean_fitness=mean_fitness,
        )
        for reporter in self.reporters:
            reporter.report(report)

        return report

    def run(self, budget: RunBudget | None = None) -> EvolutionResult:
        """
        Run generations until the budget says stop.

        The budget (and its cancellation token) is only consulted between
        generations, so a cancelled run always finishes the generation it is
        in.

        Args:
            budget: Termination condition. Defaults to a bounded budget of
                ``config.generations`` (unbounded when that is None).

        Returns:
            EvolutionResult with the best candidate seen and per-generation
            history
        """
        if budget is None:
            budget = RunBudget(max_generations=self.config.generations)
        if budget.max_generations is not None and budget.max_generations < 0:
            raise ConfigurationError(
                f"generations must be non-negative, got {budget.max_generations}"
            )

        budget.start()
        history: List[dict] = []
        best: Candidate | None = None

        while budget.can_continue():
            report = self.step(is_final=budget.is_last_generation())
            budget.record_generation(num_evaluations=self.config.population_size)
            history.append(report.to_dict())

            leader = report.best
            if leader is not None and (best is None or leader.fitness > best.fitness):
                best = leader

        stop_reason = budget.get_stop_reason() or "max_generations"
        self.terminate(stop_reason)

        return EvolutionResult(
            best=best,
            generations=self._generation,
            total_evaluations=self._evaluations,
            stop_reason=stop_reason,
            history=history,
            lineage=self.lineage.snapshot(),
            elapsed=budget.elapsed(),
        )

    def terminate(self, reason: str = "terminated") -> None:
        """Move to TERMINATED and let reporters flush."""
        self._state = EngineState.TERMINATED
        for reporter in self.reporters:
            reporter.close()
        log_event("TERMINATED", level=LogLevel.NORMAL, reason=reason, generations=self._generation)

    def lineage_table(self) -> Mapping[int, Tuple[int, int]]:
        """Lineage of the most recent generation."""
        return self.lineage.table()


def _to_device(population: Population, device: torch.device) -> Population:
    if population.device == device:
        return population
    return Population(
        params=population.params.to(device),
        ids=population.ids.to(device),
        parent_a=population.parent_a.to(device),
        parent_b=population.parent_b.to(device),
        fitness=population.fitness.to(device),
    )
