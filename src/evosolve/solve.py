"""
Simple interface for evosolve.

The easiest way to run the optimizer with minimal setup:

    >>> from evosolve import solve
    >>> result = solve(generations=20, sample_size=500, seed=42)
    >>> print(result.best)
"""

from __future__ import annotations

from evosolve.config import Config, get_default_config
from evosolve.engine import Engine, RunResult


def solve(
    generations: int | None = None,
    sample_size: int | None = None,
    population_size: int | None = None,
    seed: int | None = None,
    config: Config | None = None,
    verbosity: str | None = None,
) -> RunResult:
    """
    Search for (x, y, z) with ``6x - y + z^200 - 25`` close to zero.

    Args:
        generations: Generations to run (default from config)
        sample_size: Survivors kept per generation, K
        population_size: Candidates per generation, N
        seed: Seed for a reproducible run
        config: Base configuration (defaults if None); explicit arguments
            override its evolution settings
        verbosity: "silent", "minimal", "normal", "verbose" or "debug"
            (default: the config's own setting)

    Returns:
        RunResult with the best candidate found

    Raises:
        ConfigurationError: If the resulting settings cannot be run

    Examples:
        >>> result = solve(generations=10, population_size=10_000, sample_size=100)
        >>> best = result.best
        >>> print(f"x={best.x:.4f} y={best.y:.4f} z={best.z:.4f} fitness={best.fitness:.3g}")
    """
    cfg = config.model_copy(deep=True) if config is not None else get_default_config()

    if generations is not None:
        cfg.evolution.generations = generations
    if sample_size is not None:
        cfg.evolution.sample_size = sample_size
    if population_size is not None:
        cfg.evolution.population_size = population_size
    if seed is not None:
        cfg.evolution.seed = seed

    engine = Engine(config=cfg, verbosity=verbosity)
    return engine.run()
