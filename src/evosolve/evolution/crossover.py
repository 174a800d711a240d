"""Crossover strategies for the generational engine."""

from __future__ import annotations

import math

import torch

from evosolve.core.population import IdAllocator, Population, X, Y, Z
from evosolve.errors import ConfigurationError
from evosolve.evolution.operators import CrossoverStrategy


class CoordinateCrossover(CrossoverStrategy):
    """
    Coordinate-wise recombination without blending.

    Every offspring draws three independent survivor indices, one per
    coordinate, and copies that survivor's x, y or z verbatim. An offspring can
    therefore combine coordinates from up to three different survivors.

    Only two contributors are recorded: ``parent_a`` is the survivor that gave
    x and ``parent_b`` the one that gave z. The y contributor is not tracked.
    """

    def crossover(
        self,
        sample: Population,
        n_offspring: int,
        allocator: IdAllocator,
        generator: torch.Generator,
    ) -> Population:
        if len(sample) == 0:
            raise ConfigurationError("crossover needs at least one survivor")
        if n_offspring < 0:
            raise ConfigurationError(f"n_offspring must be non-negative, got {n_offspring}")

        device = sample.device
        picks = torch.randint(
            0,
            len(sample),
            (n_offspring, 3),
            generator=generator,
            device=device,
        )

        params = torch.stack(
            [
                sample.params[:, X].index_select(0, picks[:, X]),
                sample.params[:, Y].index_select(0, picks[:, Y]),
                sample.params[:, Z].index_select(0, picks[:, Z]),
            ],
            dim=1,
        )

        return Population(
            params=params,
            ids=allocator.allocate(n_offspring, device=device),
            parent_a=sample.ids.index_select(0, picks[:, X]),
            parent_b=sample.ids.index_select(0, picks[:, Z]),
            fitness=torch.full((n_offspring,), math.nan, dtype=torch.float64, device=device),
        )


def get_crossover_strategy(name: str, **kwargs) -> CrossoverStrategy:
    """Factory function to get a crossover strategy by name."""
    strategies = {
        "coordinate": CoordinateCrossover,
    }

    if name not in strategies:
        raise ValueError(f"Unknown crossover strategy: {name}")

    return strategies[name](**kwargs)
