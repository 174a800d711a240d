"""Core data model: candidates, populations, fitness and lineage."""

from evosolve.core.population import Candidate, IdAllocator, Population, NO_PARENT
from evosolve.core.fitness import FitnessEvaluator, PERFECT_FITNESS, evaluate, residual, score
from evosolve.core.lineage import LineageEntry, LineageTracker

__all__ = [
    "Candidate",
    "IdAllocator",
    "Population",
    "NO_PARENT",
    "FitnessEvaluator",
    "PERFECT_FITNESS",
    "evaluate",
    "residual",
    "score",
    "LineageEntry",
    "LineageTracker",
]
