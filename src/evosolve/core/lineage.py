"""Parent/child bookkeeping for one generation of offspring."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Tuple

from torch import Tensor

from evosolve.core.population import NO_PARENT


@dataclass(frozen=True)
class LineageEntry:
    """One row of the lineage table."""

    child: int
    parent_a: int
    parent_b: int

    @property
    def parents(self) -> Tuple[int, int]:
        return (self.parent_a, self.parent_b)

    @property
    def is_founder(self) -> bool:
        return self.parent_a == NO_PARENT and self.parent_b == NO_PARENT


class LineageTracker:
    """
    Records which survivors contributed to which offspring.

    The tracker only ever holds the current generation: the engine clears it
    at the start of every recombination phase and then records one entry per
    offspring. Entries are keyed by the synthetic candidate id, never by
    fitness, and are never overwritten once inserted.
    """

    def __init__(self):
        self._table: Dict[int, Tuple[int, int]] = {}
        self.generation: int | None = None

    def clear(self, generation: int | None = None) -> None:
        """Drop all entries and start the table for ``generation``."""
        self._table.clear()
        self.generation = generation

    def record(self, child_ids: Tensor, parent_a: Tensor, parent_b: Tensor) -> None:
        """
        Add one entry per child.

        Args:
            child_ids: int64 tensor of offspring ids
            parent_a: int64 tensor, id of the survivor that contributed x
            parent_b: int64 tensor, id of the survivor that contributed z

        Raises:
            ValueError: If the tensors differ in length or a child id is
                already in the table
        """
        if not (len(child_ids) == len(parent_a) == len(parent_b)):
            raise ValueError(
                f"Lineage columns differ in length: "
                f"{len(child_ids)}, {len(parent_a)}, {len(parent_b)}"
            )

        children = child_ids.tolist()
        for child, a, b in zip(children, parent_a.tolist(), parent_b.tolist()):
            if child in self._table:
                raise ValueError(f"Lineage entry for candidate {child} already recorded")
            self._table[child] = (a, b)

    def table(self) -> Mapping[int, Tuple[int, int]]:
        """Read-only view of ``child id -> (parent_a, parent_b)``."""
        return MappingProxyType(self._table)

    def snapshot(self) -> Dict[int, Tuple[int, int]]:
        """Copy of the table that stays valid after the next ``clear()``."""
        return dict(self._table)

    def entries(self) -> List[LineageEntry]:
        """Entries ordered by child id."""
        return [
            LineageEntry(child=child, parent_a=a, parent_b=b)
            for child, (a, b) in sorted(self._table.items())
        ]

    def parents_of(self, child_id: int) -> Tuple[int, int]:
        return self._table[child_id]

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, child_id: object) -> bool:
        return child_id in self._table
