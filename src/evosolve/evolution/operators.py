"""
Base classes for the evolutionary operators.

These operators form the core of the generational engine:

- SelectionStrategy: Chooses which candidates survive to the next generation
- MutationStrategy: Perturbs the survivors
- CrossoverStrategy: Breeds a fresh population from the survivors

Operators receive the population for a single phase and must not keep a
reference to it afterwards. Anything random is drawn from the generator passed
in by the engine, never from torch's global state.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import torch
from torch import Tensor

from evosolve.core.population import IdAllocator, Population


class SelectionStrategy(ABC):
    """
    Abstract base class for selection strategies.

    Selection reduces an evaluated population of size N to a survivor sample
    of size K. Implementations must be deterministic for a given population:
    equal fitness values are ordered by candidate id.
    """

    @abstractmethod
    def select(self, population: Population, sample_size: int) -> Population:
        """
        Select the survivor sample.

        Args:
            population: Population whose fitness column is up to date
            sample_size: Number of survivors K, with 1 <= K <= len(population)

        Returns:
            A new Population of exactly ``sample_size`` rows

        Raises:
            ConfigurationError: If ``sample_size`` is outside [1, len(population)]
        """
        pass

    @abstractmethod
    def rank(self, population: Population) -> Tensor:
        """
        Order the whole population from fittest to least fit.

        Returns:
            int64 tensor of row indices
        """
        pass


class MutationStrategy(ABC):
    """
    Abstract base class for mutation strategies.

    Mutation perturbs the survivor sample in place. Fitness values become
    stale and are recomputed by the next evaluation pass.
    """

    @abstractmethod
    def mutate(self, sample: Population, generator: torch.Generator) -> None:
        """
        Perturb every survivor in place.

        Args:
            sample: Survivor sample to mutate
            generator: Random stream for the run
        """
        pass


class CrossoverStrategy(ABC):
    """
    Abstract base class for crossover strategies.

    Crossover synthesizes brand new candidates from the survivor sample and
    assigns them fresh ids.
    """

    @abstractmethod
    def crossover(
        self,
        sample: Population,
        n_offspring: int,
        allocator: IdAllocator,
        generator: torch.Generator,
    ) -> Population:
        """
        Breed offspring from the survivors.

        Args:
            sample: Mutated survivor sample (at least one row)
            n_offspring: Exact number of offspring to produce
            allocator: Source of ids for the offspring
            generator: Random stream for the run

        Returns:
            A Population of exactly ``n_offspring`` rows with unset fitness
        """
        pass
