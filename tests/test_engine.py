"""Tests for the generational engine."""

import time

import pytest
import torch

from evosolve.config import EvolutionConfig
from evosolve.core.population import Candidate, Population
from evosolve.errors import ConfigurationError
from evosolve.evolution.crossover import CoordinateCrossover
from evosolve.evolution.loop import EngineState, GenerationalEngine
from evosolve.evolution.mutation import ScalingMutation
from evosolve.evolution.selection import TruncationSelection
from evosolve.orchestrator.budget import CancellationToken, RunBudget
from evosolve.orchestrator.reporting import HistoryReporter, Reporter


class StateRecorder(Reporter):
    def __init__(self, engine_ref):
        self.engine_ref = engine_ref
        self.states = []
        self.closed = False

    def report(self, report):
        self.states.append(self.engine_ref().state)

    def close(self):
        self.closed = True


class CancelAfter(Reporter):
    def __init__(self, token, generations):
        self.token = token
        self.generations = generations

    def report(self, report):
        if report.generation >= self.generations:
            self.token.cancel()


class SlowReporter(Reporter):
    def report(self, report):
        time.sleep(0.02)


class TestConstruction:
    @pytest.mark.parametrize("sample_size", [0, 201, -3])
    def test_sample_size_out_of_bounds(self, small_config, sample_size):
        small_config.sample_size = sample_size
        with pytest.raises(ConfigurationError):
            GenerationalEngine(small_config)

    def test_sample_size_equal_to_population(self, small_config):
        small_config.sample_size = small_config.population_size
        engine = GenerationalEngine(small_config)
        assert engine.state is EngineState.INITIALIZED

    def test_negative_generations(self, small_config):
        small_config.generations = -1
        with pytest.raises(ConfigurationError):
            GenerationalEngine(small_config)

    def test_empty_init_range(self, small_config):
        small_config.init_low = 5.0
        small_config.init_high = 5.0
        with pytest.raises(ConfigurationError):
            GenerationalEngine(small_config)

    def test_bad_mutation_bounds(self, small_config):
        small_config.mutation.low = 0.0
        with pytest.raises(ConfigurationError):
            GenerationalEngine(small_config)

    def test_operators_from_config(self, small_config):
        small_config.mutation.low = 0.9
        small_config.mutation.high = 1.2
        engine = GenerationalEngine(small_config)

        assert isinstance(engine.selection, TruncationSelection)
        assert isinstance(engine.crossover, CoordinateCrossover)
        assert isinstance(engine.mutation, ScalingMutation)
        assert (engine.mutation.low, engine.mutation.high) == (0.9, 1.2)

    def test_configuration_error_is_value_error(self, small_config):
        small_config.sample_size = 0
        with pytest.raises(ValueError):
            GenerationalEngine(small_config)

    def test_founders(self, small_config):
        engine = GenerationalEngine(small_config)
        population = engine.population

        assert len(population) == 200
        assert population.ids.tolist() == list(range(200))
        assert population.params.abs().max() <= 10_000.0
        assert engine.generation == 0

    def test_explicit_population_wrong_size(self, small_config, hand_picked_population):
        with pytest.raises(ConfigurationError):
            GenerationalEngine(small_config, population=hand_picked_population)

    def test_explicit_population_duplicate_ids(self):
        config = EvolutionConfig(population_size=2, sample_size=1, generations=1, seed=0)
        population = Population.from_candidates([
            Candidate(id=4, x=1.0, y=1.0, z=0.0),
            Candidate(id=4, x=2.0, y=1.0, z=0.0),
        ])
        with pytest.raises(ConfigurationError):
            GenerationalEngine(config, population=population)


class TestStep:
    def test_lineage_parents_are_survivors(self, hand_picked_population):
        config = EvolutionConfig(population_size=4, sample_size=2, generations=1, seed=3)
        engine = GenerationalEngine(config, population=hand_picked_population, top=2)

        report = engine.step()

        # ids 1 (exact solution) and 0 (fitness 1) survive
        assert [c.id for c in report.leaders] == [1, 0]
        table = engine.lineage_table()
        assert sorted(table) == [4, 5]
        assert sorted(engine.population.ids.tolist()) == [0, 1, 4, 5]
        for parent_a, parent_b in table.values():
            assert parent_a in (0, 1)
            assert parent_b in (0, 1)

    def test_founding_population_not_modified(self, hand_picked_population):
        config = EvolutionConfig(population_size=4, sample_size=2, generations=1, seed=3)
        engine = GenerationalEngine(config, population=hand_picked_population)
        engine.step()

        assert torch.isnan(hand_picked_population.fitness).all()
        assert hand_picked_population.params[0].tolist() == [5.0, 4.0, 0.0]

    def test_report_contents(self, small_config):
        engine = GenerationalEngine(small_config, top=5)
        report = engine.step()

        assert report.generation == 1
        assert report.population_size == 200
        assert report.sample_size == 10
        assert len(report.leaders) == 5
        fitnesses = [c.fitness for c in report.leaders]
        assert fitnesses == sorted(fitnesses, reverse=True)
        assert report.best_fitness == fitnesses[0]
        assert engine.total_evaluations == 200

    def test_survivor_means_before_mutation(self, hand_picked_population):
        config = EvolutionConfig(population_size=4, sample_size=2, generations=1, seed=3)
        engine = GenerationalEngine(config, population=hand_picked_population)

        report = engine.step()

        assert report.survivor_means == (5.0, 4.5, 0.0)

    def test_replace_all(self, small_config):
        small_config.retain_survivors = False
        engine = GenerationalEngine(small_config)
        engine.step()
        population = engine.population

        assert len(population) == 200
        assert population.ids.min().item() >= 200
        assert torch.unique(population.ids).numel() == 200
        assert torch.isnan(population.fitness).all()
        assert len(engine.lineage) == 200

    def test_survivors_kept_by_default(self, small_config):
        engine = GenerationalEngine(small_config, top=10)

        report = engine.step()
        population = engine.population

        survivor_ids = {c.id for c in report.leaders}
        assert survivor_ids <= set(population.ids.tolist())
        assert len(population) == 200
        assert population.ids[:10].tolist() == [c.id for c in report.leaders]
        assert len(engine.lineage) == 190
        assert torch.isnan(population.fitness).all()

    def test_size_constant_across_generations(self, small_config):
        for retain in (False, True):
            small_config.retain_survivors = retain
            engine = GenerationalEngine(small_config)
            for _ in range(4):
                engine.step()
                assert len(engine.population) == 200

    def test_best_reported_without_leaders(self, small_config):
        engine = GenerationalEngine(small_config, top=0)
        report = engine.step()

        assert report.leaders == []
        assert report.best is not None
        assert report.best.fitness == report.best_fitness

    def test_best_survivor_carried_forward(self, small_config):
        engine = GenerationalEngine(small_config)
        report = engine.step()

        assert report.best.id in engine.population.ids.tolist()

    def test_leaders_beyond_sample(self, small_config):
        engine = GenerationalEngine(small_config, top=15)
        report = engine.step()

        assert len(report.leaders) == 15
        fitnesses = [c.fitness for c in report.leaders]
        assert fitnesses == sorted(fitnesses, reverse=True)

    def test_invalid_sample_size_at_ranking(self, small_config):
        engine = GenerationalEngine(small_config)
        engine.config.sample_size = 0

        with pytest.raises(ConfigurationError):
            engine.step()
        assert engine.state is EngineState.TERMINATED

    def test_step_after_terminate(self, small_config):
        engine = GenerationalEngine(small_config)
        engine.terminate()

        with pytest.raises(RuntimeError):
            engine.step()

    def test_initialize_restarts(self, small_config):
        engine = GenerationalEngine(small_config)
        engine.run()
        assert engine.state is EngineState.TERMINATED

        engine.initialize()
        assert engine.state is EngineState.INITIALIZED
        assert engine.generation == 0
        assert len(engine.lineage) == 0


class TestRun:
    def test_bounded_run(self, small_config):
        history = HistoryReporter()
        engine = GenerationalEngine(small_config, reporters=[history])

        result = engine.run()

        assert result.generations == 3
        assert result.total_evaluations == 600
        assert result.stop_reason == "max_generations"
        assert len(result.history) == 3
        assert len(history.reports) == 3
        assert history.last.is_final
        assert result.best.fitness == max(h["best_fitness"] for h in result.history)
        assert len(result.lineage) == 190
        assert engine.state is EngineState.TERMINATED

    def test_states(self, small_config):
        engine = None
        recorder = StateRecorder(lambda: engine)
        engine = GenerationalEngine(small_config, reporters=[recorder])
        assert engine.state is EngineState.INITIALIZED

        engine.run()

        assert recorder.states == [EngineState.REPORTING] * 3
        assert recorder.closed
        assert engine.state is EngineState.TERMINATED

    def test_best_without_leaderboard(self, small_config):
        history = HistoryReporter()
        engine = GenerationalEngine(small_config, reporters=[history], top=0)

        result = engine.run()

        assert result.generations == 3
        assert result.best is not None
        assert result.best.fitness == max(r.best_fitness for r in history.reports)

    def test_zero_generations(self, small_config):
        small_config.generations = 0
        engine = GenerationalEngine(small_config)

        result = engine.run()

        assert result.generations == 0
        assert result.total_evaluations == 0
        assert result.best is None
        assert result.history == []
        assert engine.state is EngineState.TERMINATED

    def test_seeded_runs_reproduce(self, small_config):
        first = GenerationalEngine(small_config)
        second = GenerationalEngine(small_config)

        result_a = first.run()
        result_b = second.run()

        assert torch.equal(first.population.params, second.population.params)
        assert result_a.lineage == result_b.lineage
        assert result_a.history == result_b.history

    def test_different_seeds_differ(self, small_config):
        first = GenerationalEngine(small_config)
        small_config.seed = 8
        second = GenerationalEngine(small_config)

        assert not torch.equal(first.population.params, second.population.params)

    def test_cancelled_between_generations(self, small_config):
        small_config.generations = None
        token = CancellationToken()
        engine = GenerationalEngine(small_config, reporters=[CancelAfter(token, 3)])

        result = engine.run(RunBudget(max_generations=None, token=token))

        assert result.stop_reason == "cancelled"
        assert result.generations == 3
        assert len(result.history) == 3

    def test_max_time(self, small_config):
        small_config.generations = None
        engine = GenerationalEngine(small_config, reporters=[SlowReporter()])

        result = engine.run(RunBudget(max_generations=None, max_time=0.05))

        assert result.stop_reason == "max_time"
        assert result.generations >= 1

    def test_lineage_cadence(self, small_config):
        small_config.generations = 5
        history = HistoryReporter()
        engine = GenerationalEngine(small_config, reporters=[history], lineage_every=2)

        engine.run()

        with_lineage = [r.generation for r in history.reports if r.lineage is not None]
        assert with_lineage == [2, 4, 5]
        assert all(len(r.lineage) == 190 for r in history.reports if r.lineage is not None)

    def test_negative_budget(self, small_config):
        engine = GenerationalEngine(small_config)
        with pytest.raises(ConfigurationError):
            engine.run(RunBudget(max_generations=-2))
