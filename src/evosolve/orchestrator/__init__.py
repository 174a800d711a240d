"""Run control and reporting around the generational engine."""

from evosolve.orchestrator.budget import CancellationToken, RunBudget
from evosolve.orchestrator.reporting import (
    GenerationReport,
    HistoryReporter,
    Reporter,
    RichReporter,
    print_explanation,
)

__all__ = [
    "CancellationToken",
    "RunBudget",
    "GenerationReport",
    "HistoryReporter",
    "Reporter",
    "RichReporter",
    "print_explanation",
]
