"""Tests for candidates, populations and lineage tracking."""

import math

import pytest
import torch

from evosolve.core.lineage import LineageEntry, LineageTracker
from evosolve.core.population import NO_PARENT, Candidate, IdAllocator, Population


class TestIdAllocator:
    def test_monotonic(self):
        allocator = IdAllocator()
        first = allocator.allocate(3)
        second = allocator.allocate(2)

        assert first.tolist() == [0, 1, 2]
        assert second.tolist() == [3, 4]
        assert allocator.next_id == 5


class TestPopulation:
    def test_random_founders(self, generator):
        population = Population.random(100, -10.0, 10.0, IdAllocator(), generator)

        assert len(population) == 100
        assert population.params.dtype == torch.float64
        assert population.params.min() >= -10.0
        assert population.params.max() < 10.0
        assert torch.isnan(population.fitness).all()
        assert (population.parent_a == NO_PARENT).all()
        assert population.ids.tolist() == list(range(100))

    def test_candidate_roundtrip(self, hand_picked):
        population = Population.from_candidates(hand_picked)
        candidates = population.to_candidates()

        assert [c.id for c in candidates] == [0, 1, 2, 3]
        assert candidates[3].coordinates == (4.0, 0.5, 0.0)
        assert all(c.is_founder for c in candidates)
        assert all(c.fitness is None for c in candidates)
        assert population.candidate(2) == candidates[2]

    def test_subset_copies(self, hand_picked_population):
        subset = hand_picked_population.subset(torch.tensor([2, 0]))
        subset.params.mul_(2)

        assert subset.ids.tolist() == [2, 0]
        assert hand_picked_population.params[2, 0].item() == 10.0

    def test_concat(self, hand_picked_population):
        combined = hand_picked_population.concat(hand_picked_population.subset(torch.tensor([1])))
        assert len(combined) == 5
        assert combined.ids.tolist() == [0, 1, 2, 3, 1]

    def test_means(self, hand_picked_population):
        mean_x, mean_y, mean_z = hand_picked_population.means()
        assert mean_x == pytest.approx(6.0)
        assert mean_y == pytest.approx(2.375)
        assert mean_z == 0.0

    def test_empty_means(self):
        assert all(math.isnan(v) for v in Population.from_candidates([]).means())

    def test_shape_validation(self):
        with pytest.raises(ValueError):
            Population(
                params=torch.zeros(3, 2, dtype=torch.float64),
                ids=torch.arange(3),
                parent_a=torch.arange(3),
                parent_b=torch.arange(3),
                fitness=torch.zeros(3, dtype=torch.float64),
            )

    def test_parent_ids_survive_roundtrip(self):
        population = Population.from_candidates([
            Candidate(id=10, x=1.0, y=2.0, z=3.0, parent_a=4, parent_b=6),
        ])
        child = population.candidate(0)
        assert (child.parent_a, child.parent_b) == (4, 6)
        assert not child.is_founder


class TestLineageTracker:
    def test_record_and_read(self):
        tracker = LineageTracker()
        tracker.record(torch.tensor([10, 11]), torch.tensor([1, 2]), torch.tensor([3, 1]))

        assert len(tracker) == 2
        assert 10 in tracker
        assert tracker.parents_of(11) == (2, 1)
        assert dict(tracker.table()) == {10: (1, 3), 11: (2, 1)}

    def test_table_is_read_only(self):
        tracker = LineageTracker()
        tracker.record(torch.tensor([1]), torch.tensor([0]), torch.tensor([0]))

        with pytest.raises(TypeError):
            tracker.table()[1] = (5, 5)

    def test_duplicate_child_rejected(self):
        tracker = LineageTracker()
        tracker.record(torch.tensor([1]), torch.tensor([0]), torch.tensor([0]))

        with pytest.raises(ValueError):
            tracker.record(torch.tensor([1]), torch.tensor([2]), torch.tensor([2]))
        assert tracker.parents_of(1) == (0, 0)

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            LineageTracker().record(torch.tensor([1, 2]), torch.tensor([0]), torch.tensor([0, 0]))

    def test_clear(self):
        tracker = LineageTracker()
        tracker.record(torch.tensor([1]), torch.tensor([0]), torch.tensor([0]))
        snapshot = tracker.snapshot()

        tracker.clear(generation=2)

        assert len(tracker) == 0
        assert tracker.generation == 2
        assert snapshot == {1: (0, 0)}

    def test_entries_sorted(self):
        tracker = LineageTracker()
        tracker.record(torch.tensor([5, 3]), torch.tensor([1, NO_PARENT]), torch.tensor([2, NO_PARENT]))

        entries = tracker.entries()
        assert entries == [
            LineageEntry(child=3, parent_a=NO_PARENT, parent_b=NO_PARENT),
            LineageEntry(child=5, parent_a=1, parent_b=2),
        ]
        assert entries[0].is_founder
        assert entries[1].parents == (1, 2)
