"""
Selection strategies for the generational engine.

Only truncation selection is provided: the K fittest candidates survive,
everybody else is discarded. Ordering is fully deterministic, ties in fitness
go to the lower candidate id.
"""

from __future__ import annotations

import torch
from torch import Tensor

from evosolve.core.population import Population
from evosolve.errors import ConfigurationError
from evosolve.evolution.operators import SelectionStrategy


def validate_sample_size(sample_size: int, population_size: int) -> int:
    """
    Check that a survivor sample of ``sample_size`` can be drawn.

    Raises:
        ConfigurationError: Unless ``1 <= sample_size <= population_size``
    """
    if isinstance(sample_size, bool) or not isinstance(sample_size, int):
        raise ConfigurationError(
            f"sample_size must be an integer, got {type(sample_size).__name__}"
        )
    if sample_size < 1 or sample_size > population_size:
        raise ConfigurationError(
            f"sample_size must be between 1 and population_size ({population_size}), "
            f"got {sample_size}"
        )
    return sample_size


class TruncationSelection(SelectionStrategy):
    """
    Truncation selection: keep exactly the top K by fitness.

    Algorithm:
    1. Sort rows by candidate id (ascending)
    2. Stable-sort that order by fitness (descending)
    3. Keep the first K rows

    The two-pass stable sort gives a lexicographic (-fitness, id) order, so
    the result does not depend on where a candidate sits in the population.
    """

    def rank(self, population: Population) -> Tensor:
        by_id = torch.argsort(population.ids, stable=True)
        fitness = population.fitness.index_select(0, by_id)
        by_fitness = torch.argsort(fitness, descending=True, stable=True)
        return by_id.index_select(0, by_fitness)

    def select(self, population: Population, sample_size: int) -> Population:
        validate_sample_size(sample_size, len(population))
        order = self.rank(population)
        return population.subset(order[:sample_size])


def get_selection_strategy(name: str, **kwargs) -> SelectionStrategy:
    """Factory function to get a selection strategy by name."""
    strategies = {
        "truncation": TruncationSelection,
    }

    if name not in strategies:
        raise ValueError(f"Unknown selection strategy: {name}")

    return strategies[name](**kwargs)
