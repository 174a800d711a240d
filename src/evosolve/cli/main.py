"""
Main CLI application for evosolve.

Commands:
- run: Evolve a population towards 6x - y + z^200 - 25 = 0
- explain: Explain what the parameters x, y and z mean
- config: Print or save the default configuration as YAML
- check-device: Show torch and device information
- version: Show version information
"""

from __future__ import annotations

import json
import signal
from pathlib import Path
from typing import Optional

import typer
import yaml
from pydantic import ValidationError
from rich.table import Table

from evosolve.utils.logging import console

app = typer.Typer(
    name="evosolve",
    help="""
evosolve: generational evolutionary search

Looks for real (x, y, z) with 6x - y + z^200 - 25 close to zero by
evaluating, ranking, mutating and recombining a population every generation.

Quick start:
  evosolve run --generations 20 --sample-size 1000
  evosolve run --unbounded --seed 7      (Ctrl+C stops after the current generation)

For help with any command: evosolve COMMAND --help
""",
    add_completion=False,
    no_args_is_help=True,
)


# ============================================================================
# Main Commands
# ============================================================================


@app.command()
def run(
    # Run length
    generations: Optional[int] = typer.Option(
        None,
        "--generations", "-g",
        help="Number of generations to run (default 50, or the value from --config)",
    ),
    unbounded: bool = typer.Option(
        False,
        "--unbounded",
        help="Run until interrupted. Ctrl+C stops cleanly after the current generation",
    ),
    interactive: bool = typer.Option(
        False,
        "--interactive", "-i",
        help="Prompt for the generation count and sample size",
    ),

    # Population
    sample_size: Optional[int] = typer.Option(
        None,
        "--sample-size", "-k",
        help="Survivors kept each generation, 1 <= K <= population (default 1000)",
    ),
    population: Optional[int] = typer.Option(
        None,
        "--population", "-n",
        help="Candidates per generation (default 100000)",
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="Random seed for a reproducible run",
    ),
    retain_survivors: Optional[bool] = typer.Option(
        None,
        "--retain-survivors/--replace-all",
        help="Keep mutated survivors in the next generation (default) or replace everyone with offspring",
    ),
    device: Optional[str] = typer.Option(
        None,
        "--device",
        help="Where to run: cpu, cuda, cuda:0 or auto",
    ),

    # Reporting
    top: Optional[int] = typer.Option(
        None,
        "--top",
        help="Leaderboard size per generation (default 10)",
        min=0,
    ),
    lineage_every: Optional[int] = typer.Option(
        None,
        "--lineage-every",
        help="Show the lineage table every N generations (default 5)",
        min=1,
    ),
    pace: Optional[float] = typer.Option(
        None,
        "--pace",
        help="Seconds to pause after each lineage table",
        min=0.0,
    ),
    max_time: Optional[float] = typer.Option(
        None,
        "--max-time",
        help="Stop after this many seconds (checked between generations), must be positive",
    ),

    # Config and output
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        help="YAML configuration file; command-line options override it",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Save the run summary as JSON",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Print the run summary as JSON",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Log every engine phase",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Log everything, including numeric degeneracy counts",
    ),
    silent: bool = typer.Option(
        False,
        "--silent", "-q",
        help="Only print the final result",
    ),
):
    """
    Evolve a population towards a solution of 6x - y + z^200 - 25 = 0.

    Examples:
        evosolve run -g 20 -k 1000
        evosolve run --population 10000 --sample-size 100 --seed 1 --json
        evosolve run --unbounded --lineage-every 10 --pace 0.5
        evosolve run --config my_run.yaml --output result.json
    """
    from evosolve.config import Config
    from evosolve.engine import Engine
    from evosolve.errors import ConfigurationError

    try:
        cfg = Config.from_yaml(config) if config else Config()
    except FileNotFoundError as e:
        console.print(f"[red]Config file not found: {e.filename}[/red]")
        raise typer.Exit(1)
    except (ValidationError, yaml.YAMLError) as e:
        console.print(f"[red]Invalid configuration in {config}:[/red]")
        console.print(str(e), markup=False)
        raise typer.Exit(1)

    if interactive:
        generations = typer.prompt("Enter the number of generations to run", type=int)
        sample_size = typer.prompt("Enter the sample size for selection (e.g., 1000)", type=int)

    evolution = cfg.evolution
    if unbounded:
        evolution.generations = None
    elif generations is not None:
        evolution.generations = generations
    if sample_size is not None:
        evolution.sample_size = sample_size
    if population is not None:
        evolution.population_size = population
    if seed is not None:
        evolution.seed = seed
    if retain_survivors is not None:
        evolution.retain_survivors = retain_survivors
    if device is not None:
        evolution.device = device
    if max_time is not None:
        cfg.budget.max_time = max_time

    if top is not None:
        cfg.output.top = top
    if lineage_every is not None:
        cfg.output.lineage_every = lineage_every
    if pace is not None:
        cfg.output.pace = pace

    if debug:
        cfg.output.verbosity = "debug"
    elif verbose:
        cfg.output.verbosity = "verbose"
    elif silent or json_output:
        cfg.output.verbosity = "silent"

    # Attribute assignment skips field constraints; check the overrides too
    try:
        cfg = Config.model_validate(cfg.model_dump())
    except ValidationError as e:
        console.print("[red]Invalid option values:[/red]")
        console.print(str(e), markup=False)
        raise typer.Exit(1)
    evolution = cfg.evolution

    try:
        engine = Engine(config=cfg)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)

    previous_handler = None
    if evolution.generations is None:
        # Unbounded: first Ctrl+C finishes the current generation, then stops
        def _cancel(signum, frame):
            console.print("\n[yellow]Stopping after the current generation...[/yellow]")
            engine.cancel()

        previous_handler = signal.signal(signal.SIGINT, _cancel)

    try:
        result = engine.run()

    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        raise typer.Exit(130)

    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)

    except RuntimeError as e:
        error_msg = str(e)
        if "cuda" in error_msg.lower() or "memory" in error_msg.lower():
            console.print(f"[red]Device error: {error_msg}[/red]")
            console.print("[dim]Try: --device cpu or a smaller --population[/dim]")
        else:
            console.print(f"[red]Runtime error: {error_msg}[/red]")
        raise typer.Exit(1)

    finally:
        if previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)

    summary = result.to_dict()
    if json_output:
        console.print_json(data=summary)
    else:
        _print_summary(result)

    if output:
        with open(output, "w", encoding="utf-8") as f:
            json.dump(result.to_dict(include_lineage=True), f, indent=2)
        if not json_output:
            console.print(f"\n[dim]Results saved to {output}[/dim]")


def _print_summary(result) -> None:
    console.print()
    if result.best is None:
        console.print("[yellow]No generation was run[/yellow]")
    else:
        best = result.best
        table = Table(show_header=False, box=None)
        table.add_column("Key", style="dim")
        table.add_column("Value")
        table.add_row("Best candidate", f"#{best.id}")
        table.add_row("x", f"{best.x:.10f}")
        table.add_row("y", f"{best.y:.10f}")
        table.add_row("z", f"{best.z:.10f}")
        table.add_row("Fitness", f"{best.fitness:.6g}")
        console.print(table)

    console.print(
        f"[dim]Generations: {result.generations} | Evaluations: {result.evaluations} | "
        f"Stopped: {result.stop_reason} | {result.elapsed:.2f}s[/dim]"
    )


@app.command()
def explain():
    """Explain the parameters x, y and z and how they are scored."""
    from evosolve.orchestrator.reporting import print_explanation

    print_explanation(console)


@app.command("config")
def show_config(
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Write the default configuration to this YAML file",
    ),
):
    """
    Print the default configuration as YAML.

    Edit the file and pass it back with `evosolve run --config FILE`.
    """
    from evosolve.config import get_default_config

    cfg = get_default_config()
    if output:
        cfg.to_yaml(output)
        console.print(f"[dim]Default configuration written to {output}[/dim]")
    else:
        console.print(
            yaml.safe_dump(cfg.to_dict(), default_flow_style=False, sort_keys=False),
            markup=False,
        )


# ============================================================================
# Utility Commands
# ============================================================================


@app.command("check-device")
def check_device():
    """Check device availability and display system info."""
    import sys

    import torch

    from evosolve.utils.device import get_device_info

    console.print("\n[bold]System Information[/bold]\n")
    console.print(f"Python: {sys.version.split()[0]}")
    console.print(f"PyTorch: {torch.__version__}")

    cpu = get_device_info("cpu")
    console.print(f"CPU threads: {cpu.threads}")

    if torch.cuda.is_available():
        console.print("\n[green][+] CUDA Available[/green]")
        for i in range(torch.cuda.device_count()):
            info = get_device_info(f"cuda:{i}")
            console.print(f"  GPU {i}: {info.name}")
            console.print(f"    Memory: {info.total_memory:.1f} GB")
    else:
        console.print("\n[yellow][-] CUDA Not Available[/yellow]")
        console.print("  Running on CPU")


@app.command()
def version():
    """Show version information."""
    from evosolve import __version__

    console.print(f"evosolve {__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
