"""
Configuration schema for evosolve.

This module defines all configuration classes using Pydantic for validation
and type safety. The main Config class combines all settings and can be
loaded from YAML files for easy customization.

Key configuration areas:
- EvolutionConfig: Population, survivor sample, generation budget, seeding
- BudgetConfig: Wall-clock limit for a run
- OutputConfig: Logging, leaderboard size, lineage cadence, display pacing

The survivor sample size and the generation count are not
range-checked here: the engine validates them and raises ConfigurationError,
so a bad value fails the same way whether it came from YAML, the CLI or code.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field


class SelectionConfig(BaseModel):
    """Which selection strategy ranks and truncates the population."""
    strategy: Literal["truncation"] = "truncation"

    class Config:
        extra = "forbid"


class MutationConfig(BaseModel):
    """
    Mutation strategy and the bounds of its multiplicative factor.

    Each coordinate of each survivor is multiplied by a factor drawn uniformly
    from ``[low, high)``. The defaults perturb a coordinate by at most 1%.
    """

    strategy: Literal["scaling"] = "scaling"
    low: float = 0.99
    high: float = 1.01

    class Config:
        extra = "forbid"


class CrossoverConfig(BaseModel):
    """Which crossover strategy breeds offspring from the survivors."""
    strategy: Literal["coordinate"] = "coordinate"

    class Config:
        extra = "forbid"


class EvolutionConfig(BaseModel):
    """
    Configuration for the generational engine.

    Key Parameters:

    **Population Settings**:
    - population_size: N, number of candidates alive in every generation
    - sample_size: K, survivors kept by truncation selection (1 <= K <= N)
    - init_low / init_high: Range the founding coordinates are drawn from

    **Run Length**:
    - generations: Number of generations to run. None runs until cancelled.

    **Variation**:
    - selection / mutation / crossover: Strategy names resolved by the
      engine (mutation also carries the factor bounds)
    - retain_survivors: Keep the mutated survivors in the next generation and
      only breed N - K offspring (False: N offspring replace everything)

    **Reproducibility**:
    - seed: Seed for the shared random stream (None = fresh entropy)
    - device: Where population tensors live ("cpu", "cuda", "auto")

    Tuning Guidelines:
    - **Fast experiments**: population_size=10_000, sample_size=100
    - **Default**: population_size=100_000, sample_size=1_000
    """

    population_size: int = Field(default=100_000, ge=1)
    sample_size: int = 1_000
    generations: int | None = 50
    seed: int | None = None
    init_low: float = -10_000.0
    init_high: float = 10_000.0
    selection: SelectionConfig = Field(default_factory=SelectionConfig)
    mutation: MutationConfig = Field(default_factory=MutationConfig)
    crossover: CrossoverConfig = Field(default_factory=CrossoverConfig)
    retain_survivors: bool = True
    device: str = "cpu"

    class Config:
        extra = "forbid"


class BudgetConfig(BaseModel):
    """Configuration for the run budget."""
    max_time: float | None = Field(default=None, gt=0)  # Seconds, None = unlimited

    class Config:
        extra = "forbid"


class OutputConfig(BaseModel):
    """Configuration for output settings."""
    verbosity: Literal["silent", "minimal", "normal", "verbose", "debug"] = "normal"
    top: int = Field(default=10, ge=0)              # Leaderboard size per generation
    lineage_every: int = Field(default=5, ge=1)     # Attach the lineage table every N generations
    show_lineage: bool = True
    lineage_rows: int | None = Field(default=20, ge=1)  # Rows printed per lineage table, None = all
    pace: float = Field(default=0.0, ge=0)          # Seconds to pause after a lineage display
    explain: bool = True                            # Print the parameter explanation before a run

    class Config:
        extra = "forbid"


class Config(BaseModel):
    """
    Main configuration for evosolve.

    Configuration Sections:
    - **evolution**: Population, selection and variation parameters
    - **budget**: Wall-clock limits
    - **output**: Logging and reporting

    Usage Patterns:

    **Default Configuration**:
    >>> config = Config()
    >>> engine = Engine(config=config)

    **Programmatic Customization**:
    >>> config = Config()
    >>> config.evolution.generations = 20
    >>> config.evolution.sample_size = 500
    >>> config.output.verbosity = "verbose"

    **YAML Configuration**:
    >>> config = Config.from_yaml("my_config.yaml")
    >>> config.evolution.seed = 7
    >>> config.to_yaml("updated_config.yaml")
    """

    evolution: EvolutionConfig = Field(default_factory=EvolutionConfig)
    budget: BudgetConfig = Field(default_factory=BudgetConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    class Config:
        extra = "forbid"

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Load configuration from a dictionary."""
        return cls(**data)

    def to_yaml(self, path: str | Path) -> None:
        """Save configuration to a YAML file."""
        with open(path, "w") as f:
            yaml.safe_dump(self.model_dump(), f, default_flow_style=False, sort_keys=False)

    def to_dict(self) -> dict:
        """Convert configuration to a dictionary."""
        return self.model_dump()


def get_default_config() -> Config:
    """Get the default configuration (100k candidates, 1k survivors)."""
    return Config()


def get_quick_config(seed: int | None = 0) -> Config:
    """Get a small, seeded configuration for experiments and tests."""
    return Config(
        evolution=EvolutionConfig(
            population_size=2_000,
            sample_size=50,
            generations=10,
            seed=seed,
        ),
        output=OutputConfig(verbosity="minimal", explain=False),
    )
