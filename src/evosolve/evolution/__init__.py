"""Evolution module: selection, mutation, crossover and the generational engine."""

from evosolve.evolution.operators import (
    SelectionStrategy,
    MutationStrategy,
    CrossoverStrategy,
)
from evosolve.evolution.selection import TruncationSelection, validate_sample_size
from evosolve.evolution.mutation import ScalingMutation
from evosolve.evolution.crossover import CoordinateCrossover
from evosolve.evolution.loop import (
    EngineState,
    EvolutionResult,
    GenerationalEngine,
    validate_config,
)

__all__ = [
    "SelectionStrategy",
    "MutationStrategy",
    "CrossoverStrategy",
    "TruncationSelection",
    "validate_sample_size",
    "ScalingMutation",
    "CoordinateCrossover",
    "EngineState",
    "EvolutionResult",
    "GenerationalEngine",
    "validate_config",
]
