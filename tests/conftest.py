"""Pytest configuration and fixtures."""

import pytest
import torch

from evosolve.config import EvolutionConfig
from evosolve.core.population import Candidate, Population
from evosolve.utils.logging import set_verbosity


@pytest.fixture(autouse=True)
def quiet():
    """Keep engine logging out of test output."""
    set_verbosity("silent")
    yield
    set_verbosity("silent")


@pytest.fixture
def generator():
    """Seeded random stream."""
    g = torch.Generator()
    g.manual_seed(1234)
    return g


@pytest.fixture
def hand_picked():
    """
    Four candidates with z = 0, so z^200 vanishes and residuals are exact:

    id 0: 6*5  - 4   - 25 =  1.0  -> fitness 1.0
    id 1: 6*5  - 5   - 25 =  0.0  -> fitness 9999 (exact solution)
    id 2: 6*10 - 0   - 25 = 35.0  -> fitness 1/35
    id 3: 6*4  - 0.5 - 25 = -1.5  -> fitness 2/3
    """
    return [
        Candidate(id=0, x=5.0, y=4.0, z=0.0),
        Candidate(id=1, x=5.0, y=5.0, z=0.0),
        Candidate(id=2, x=10.0, y=0.0, z=0.0),
        Candidate(id=3, x=4.0, y=0.5, z=0.0),
    ]


@pytest.fixture
def hand_picked_population(hand_picked):
    return Population.from_candidates(hand_picked)


@pytest.fixture
def small_config():
    """Small seeded evolution configuration."""
    return EvolutionConfig(
        population_size=200,
        sample_size=10,
        generations=3,
        seed=7,
    )
