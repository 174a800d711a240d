#!/usr/bin/env python3
"""
Quick Start Examples for evosolve

This script shows the most common usage patterns to help you get started quickly.
Run this file directly or copy the examples into your own code.

Usage: python examples/quick_start.py
"""

def example_1_simple_usage():
    """Example 1: Simplest possible usage - one function call"""
    print("=" * 60)
    print("EXAMPLE 1: Simple Usage")
    print("=" * 60)

    from evosolve import solve

    result = solve(generations=10, population_size=10_000, sample_size=100, seed=1, verbosity="silent")

    best = result.best
    print(f"Best candidate: #{best.id}")
    print(f"x={best.x:.6f}  y={best.y:.6f}  z={best.z:.6f}")
    print(f"Fitness: {best.fitness:.6g}")
    print()


def example_2_custom_config():
    """Example 2: Tuning the run through a Config"""
    print("=" * 60)
    print("EXAMPLE 2: Custom Configuration")
    print("=" * 60)

    from evosolve import Config, Engine

    config = Config()
    config.evolution.population_size = 20_000
    config.evolution.sample_size = 200
    config.evolution.generations = 15
    config.evolution.retain_survivors = False  # replace everyone with offspring
    config.evolution.seed = 7
    config.output.lineage_every = 5
    config.output.top = 5

    engine = Engine(config=config, verbosity="minimal")
    result = engine.run()

    print(f"Generations: {result.generations}")
    print(f"Evaluations: {result.evaluations}")
    print(f"Best fitness: {result.best.fitness:.6g}")
    print()


def example_3_history():
    """Example 3: Inspecting per-generation statistics"""
    print("=" * 60)
    print("EXAMPLE 3: Generation History")
    print("=" * 60)

    from evosolve import solve

    result = solve(generations=8, population_size=5_000, sample_size=50, seed=3, verbosity="silent")

    for row in result.history:
        print(
            f"gen {row['generation']:2d}  best={row['best_fitness']:.4g}  "
            f"mean z={row['mean_z']:.6f}"
        )
    print()


def example_4_unbounded():
    """Example 4: Unbounded run stopped from another thread"""
    print("=" * 60)
    print("EXAMPLE 4: Unbounded Run")
    print("=" * 60)

    import threading

    from evosolve import Engine
    from evosolve.config import get_quick_config

    config = get_quick_config(seed=11)
    config.evolution.generations = None

    engine = Engine(config=config, reporters=[], verbosity="silent")
    threading.Timer(2.0, engine.cancel).start()
    result = engine.run()

    print(f"Stopped after {result.generations} generations ({result.stop_reason})")
    print(f"Lineage entries in the last generation: {len(result.lineage)}")
    print()


def example_5_error_handling():
    """Example 5: Proper error handling"""
    print("=" * 60)
    print("EXAMPLE 5: Error Handling")
    print("=" * 60)

    from evosolve import ConfigurationError, solve

    try:
        solve(generations=5, population_size=100, sample_size=500, verbosity="silent")
    except ConfigurationError as e:
        print(f"Rejected as expected: {e}")
    print()


if __name__ == "__main__":
    print("evosolve - Quick Start Examples")
    print("=" * 60)
    print()

    try:
        example_1_simple_usage()
        example_2_custom_config()
        example_3_history()
        example_4_unbounded()
        example_5_error_handling()

        print("=" * 60)
        print("All examples completed!")
        print("\nNext steps:")
        print("   - Try the CLI: evosolve run --generations 20 --seed 1")
        print("   - Read the README.md for full documentation")

    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
