"""
evosolve: a generational evolutionary optimizer

Searches for real triples (x, y, z) that approximately satisfy

    6x - y + z^200 - 25 = 0

by repeatedly scoring, ranking, selecting, mutating and recombining a large
population of candidates.

## Core Concept

Each generation:
1. **Evaluates** every candidate: fitness = |1 / residual|
2. **Selects** the K fittest as survivors (truncation selection)
3. **Mutates** survivors by up to 1% per coordinate
4. **Recombines** survivors coordinate by coordinate into a new population
5. **Records** which survivors contributed to which offspring

## API Reference

### Simple Interface
```python
from evosolve import solve

result = solve(generations=20, sample_size=500, seed=7)
print(result.best)
```

### Advanced Interface
```python
from evosolve import Engine, Config

config = Config()
config.evolution.population_size = 50_000
config.evolution.generations = None   # run until cancelled
engine = Engine(config=config)
result = engine.run()
```

### CLI Usage
```bash
evosolve run --generations 20 --sample-size 1000
evosolve run --unbounded --seed 3
evosolve explain
```
"""

from evosolve.config import (
    Config,
    EvolutionConfig,
    MutationConfig,
    BudgetConfig,
    OutputConfig,
)
from evosolve.core.population import Candidate, Population
from evosolve.engine import Engine, RunResult
from evosolve.errors import ConfigurationError, EvosolveError
from evosolve.solve import solve

__version__ = "0.1.0"

__all__ = [
    # Main interfaces
    "solve",            # Simple one-liner function
    "Engine",           # Full-featured engine class
    "RunResult",        # Result dataclass

    # Data model
    "Candidate",
    "Population",

    # Errors
    "ConfigurationError",
    "EvosolveError",

    # Configuration classes
    "Config",
    "EvolutionConfig",
    "MutationConfig",
    "BudgetConfig",
    "OutputConfig",
]
