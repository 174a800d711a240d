"""
Mutation strategies for the generational engine.

Survivors are perturbed multiplicatively, so the size of a step scales with
the magnitude of the coordinate it is applied to. With the default bounds
[0.99, 1.01) no coordinate moves by more than 1% of its value.
"""

from __future__ import annotations

import torch

from evosolve.core.population import Population
from evosolve.errors import ConfigurationError
from evosolve.evolution.operators import MutationStrategy


class ScalingMutation(MutationStrategy):
    """
    Multiply every coordinate by an independent factor drawn from [low, high).

    Each survivor gets three fresh factors, one per coordinate. Fitness is
    not touched and is stale until the next evaluation pass.

    Example:
        >>> strategy = ScalingMutation(low=0.99, high=1.01)
        >>> strategy.mutate(survivors, generator)
    """

    def __init__(self, low: float = 0.99, high: float = 1.01):
        """
        Initialize the mutation bounds.

        Args:
            low: Smallest factor (inclusive), must be positive
            high: Largest factor (exclusive), must be >= low

        Raises:
            ConfigurationError: If the bounds are not ``0 < low <= high``
        """
        if not (0 < low <= high):
            raise ConfigurationError(
                f"mutation bounds must satisfy 0 < low <= high, got low={low}, high={high}"
            )
        self.low = low
        self.high = high

    @property
    def max_relative_step(self) -> float:
        """Largest relative change a coordinate can undergo."""
        return max(1 - self.low, self.high - 1)

    def mutate(self, sample: Population, generator: torch.Generator) -> None:
        if self.low == self.high:
            sample.params.mul_(self.low)
            return
        factors = torch.empty_like(sample.params)
        factors.uniform_(self.low, self.high, generator=generator)
        sample.params.mul_(factors)


def get_mutation_strategy(name: str, **kwargs) -> MutationStrategy:
    """Factory function to get a mutation strategy by name."""
    strategies = {
        "scaling": ScalingMutation,
    }

    if name not in strategies:
        raise ValueError(f"Unknown mutation strategy: {name}")

    return strategies[name](**kwargs)
