"""
Fitness scoring for candidate triples.

The target constraint is ``6x - y + z^200 - 25 = 0``. A candidate's fitness is
the absolute reciprocal of its residual, so higher is better and an exact
solution is capped at PERFECT_FITNESS.

``z^200`` leaves the float64 range once |z| exceeds roughly 34.8, and a NaN
coordinate poisons the whole residual. Neither case is allowed to leak into
ranking as-is:

- infinite residual -> fitness 0.0 (worst finite score, never best)
- NaN residual      -> fitness -inf (sorts strictly last)
"""

from __future__ import annotations

import math

import torch
from torch import Tensor

from evosolve.core.population import Population, X, Y, Z
from evosolve.utils.logging import LogLevel, log_event

# Fitness assigned to an exact solution
PERFECT_FITNESS = 9999.0

# Fitness assigned when z^200 (or the whole residual) overflows
OVERFLOW_FITNESS = 0.0

# Fitness assigned when the residual is not a number
NAN_FITNESS = -math.inf

EXPONENT = 200


def residual(params: Tensor) -> Tensor:
    """Compute ``6x - y + z^200 - 25`` row-wise for a (N, 3) float64 tensor."""
    x = params[:, X]
    y = params[:, Y]
    z = params[:, Z]
    return 6 * x - y + torch.pow(z, EXPONENT) - 25


def evaluate(params: Tensor) -> Tensor:
    """
    Score every row of ``params``.

    Args:
        params: (N, 3) float64 tensor of x, y, z

    Returns:
        (N,) float64 tensor of fitness values, free of NaN
    """
    return fitness_from_residual(residual(params))


def fitness_from_residual(res: Tensor) -> Tensor:
    """Map residuals to fitness, classifying overflow and NaN explicitly."""
    fitness = torch.abs(1.0 / res)
    fitness = torch.where(res == 0, torch.full_like(res, PERFECT_FITNESS), fitness)
    fitness = torch.where(torch.isinf(res), torch.full_like(res, OVERFLOW_FITNESS), fitness)
    fitness = torch.where(torch.isnan(res), torch.full_like(res, NAN_FITNESS), fitness)
    return fitness


def score(x: float, y: float, z: float) -> float:
    """Score a single candidate with the same rules as ``evaluate``."""
    params = torch.tensor([[x, y, z]], dtype=torch.float64)
    return evaluate(params).item()


class FitnessEvaluator:
    """Applies the fitness function to a whole population in one pass."""

    def evaluate_population(self, population: Population) -> int:
        """
        Overwrite ``population.fitness`` with freshly computed scores.

        Returns:
            Number of numerically degenerate candidates (overflow or NaN)
        """
        res = residual(population.params)
        population.fitness = fitness_from_residual(res)

        degenerate = int((~torch.isfinite(res)).sum().item())
        if degenerate:
            log_event(
                "DEGENERATE_FITNESS",
                level=LogLevel.DEBUG,
                count=degenerate,
                overflow=int(torch.isinf(res).sum().item()),
                nan=int(torch.isnan(res).sum().item()),
            )
        return degenerate
