"""Candidate and population state for the generational engine."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List

import torch
from torch import Tensor

# Parent id recorded for founding-generation candidates
NO_PARENT = -1

# Column of each coordinate inside Population.params
X, Y, Z = 0, 1, 2


@dataclass
class Candidate:
    """A single point (x, y, z) of the search space with its bookkeeping."""

    id: int
    x: float
    y: float
    z: float
    fitness: float | None = None
    parent_a: int | None = None
    parent_b: int | None = None

    @property
    def coordinates(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    @property
    def is_founder(self) -> bool:
        return self.parent_a is None and self.parent_b is None


class IdAllocator:
    """Hands out synthetic, monotonically increasing candidate ids."""

    def __init__(self, start: int = 0):
        self.next_id = start

    def allocate(self, count: int, device: torch.device | str = "cpu") -> Tensor:
        """Reserve ``count`` consecutive ids and return them as an int64 tensor."""
        ids = torch.arange(
            self.next_id,
            self.next_id + count,
            dtype=torch.int64,
            device=device,
        )
        self.next_id += count
        return ids


@dataclass
class Population:
    """
    Column-oriented storage for a population of candidates.

    Each phase of the engine works on whole columns at once, so candidates
    are not stored as objects. Use ``candidate(i)`` or ``to_candidates()``
    to get Candidate views for reporting.

    Attributes:
        params: float64 tensor of shape (N, 3) holding x, y, z per row
        ids: int64 tensor of shape (N,) with unique candidate ids
        parent_a: int64 tensor (N,), id of the x contributor or NO_PARENT
        parent_b: int64 tensor (N,), id of the z contributor or NO_PARENT
        fitness: float64 tensor (N,), NaN until evaluated
    """

    params: Tensor
    ids: Tensor
    parent_a: Tensor
    parent_b: Tensor
    fitness: Tensor

    def __post_init__(self):
        n = self.params.shape[0]
        if self.params.dim() != 2 or self.params.shape[1] != 3:
            raise ValueError(f"params must have shape (N, 3), got {tuple(self.params.shape)}")
        for name in ("ids", "parent_a", "parent_b", "fitness"):
            column = getattr(self, name)
            if column.shape != (n,):
                raise ValueError(f"{name} must have shape ({n},), got {tuple(column.shape)}")

    def __len__(self) -> int:
        return self.params.shape[0]

    @property
    def device(self) -> torch.device:
        return self.params.device

    @classmethod
    def random(
        cls,
        size: int,
        low: float,
        high: float,
        allocator: IdAllocator,
        generator: torch.Generator,
        device: torch.device | str = "cpu",
    ) -> "Population":
        """Seed a founding population with coordinates drawn uniformly from [low, high)."""
        params = torch.empty((size, 3), dtype=torch.float64, device=device)
        params.uniform_(low, high, generator=generator)
        return cls(
            params=params,
            ids=allocator.allocate(size, device=device),
            parent_a=torch.full((size,), NO_PARENT, dtype=torch.int64, device=device),
            parent_b=torch.full((size,), NO_PARENT, dtype=torch.int64, device=device),
            fitness=torch.full((size,), math.nan, dtype=torch.float64, device=device),
        )

    @classmethod
    def from_candidates(
        cls,
        candidates: Iterable[Candidate],
        device: torch.device | str = "cpu",
    ) -> "Population":
        """Build a population from explicit candidates (fitness is discarded)."""
        candidates = list(candidates)
        if candidates:
            params = torch.tensor(
                [c.coordinates for c in candidates], dtype=torch.float64, device=device
            )
        else:
            params = torch.empty((0, 3), dtype=torch.float64, device=device)
        return cls(
            params=params,
            ids=torch.tensor([c.id for c in candidates], dtype=torch.int64, device=device),
            parent_a=torch.tensor(
                [NO_PARENT if c.parent_a is None else c.parent_a for c in candidates],
                dtype=torch.int64,
                device=device,
            ),
            parent_b=torch.tensor(
                [NO_PARENT if c.parent_b is None else c.parent_b for c in candidates],
                dtype=torch.int64,
                device=device,
            ),
            fitness=torch.full((len(candidates),), math.nan, dtype=torch.float64, device=device),
        )

    def subset(self, indices: Tensor) -> "Population":
        """Copy the rows at ``indices`` (in that order) into a new population."""
        indices = indices.to(device=self.device, dtype=torch.int64)
        return Population(
            params=self.params.index_select(0, indices),
            ids=self.ids.index_select(0, indices),
            parent_a=self.parent_a.index_select(0, indices),
            parent_b=self.parent_b.index_select(0, indices),
            fitness=self.fitness.index_select(0, indices),
        )

    def concat(self, other: "Population") -> "Population":
        """Return a new population with ``other``'s rows appended."""
        return Population(
            params=torch.cat([self.params, other.params]),
            ids=torch.cat([self.ids, other.ids]),
            parent_a=torch.cat([self.parent_a, other.parent_a]),
            parent_b=torch.cat([self.parent_b, other.parent_b]),
            fitness=torch.cat([self.fitness, other.fitness]),
        )

    def clone(self) -> "Population":
        return Population(
            params=self.params.clone(),
            ids=self.ids.clone(),
            parent_a=self.parent_a.clone(),
            parent_b=self.parent_b.clone(),
            fitness=self.fitness.clone(),
        )

    def clear_fitness(self) -> None:
        """Mark every fitness value as unset."""
        self.fitness.fill_(math.nan)

    def means(self) -> tuple[float, float, float]:
        """Mean of x, y and z over the population."""
        if len(self) == 0:
            return (math.nan, math.nan, math.nan)
        mean = self.params.mean(dim=0)
        return (mean[X].item(), mean[Y].item(), mean[Z].item())

    def candidate(self, index: int) -> Candidate:
        """Materialize row ``index`` as a Candidate."""
        x, y, z = self.params[index].tolist()
        fitness = self.fitness[index].item()
        parent_a = int(self.parent_a[index].item())
        parent_b = int(self.parent_b[index].item())
        return Candidate(
            id=int(self.ids[index].item()),
            x=x,
            y=y,
            z=z,
            fitness=None if math.isnan(fitness) else fitness,
            parent_a=None if parent_a == NO_PARENT else parent_a,
            parent_b=None if parent_b == NO_PARENT else parent_b,
        )

    def to_candidates(self, limit: int | None = None) -> List[Candidate]:
        """Materialize the first ``limit`` rows (all rows if None) as Candidates."""
        count = len(self) if limit is None else min(limit, len(self))
        params = self.params[:count].tolist()
        ids = self.ids[:count].tolist()
        fitness = self.fitness[:count].tolist()
        parent_a = self.parent_a[:count].tolist()
        parent_b = self.parent_b[:count].tolist()

        return [
            Candidate(
                id=ids[i],
                x=params[i][X],
                y=params[i][Y],
                z=params[i][Z],
                fitness=None if math.isnan(fitness[i]) else fitness[i],
                parent_a=None if parent_a[i] == NO_PARENT else parent_a[i],
                parent_b=None if parent_b[i] == NO_PARENT else parent_b[i],
            )
            for i in range(count)
        ]
