"""Run budget and cancellation for the generational engine."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field


class CancellationToken:
    """
    Thread-safe stop flag.

    The engine only looks at the token between generations, so setting it
    from a signal handler or another thread never interrupts a phase midway.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def reset(self) -> None:
        self._event.clear()


@dataclass
class RunBudget:
    """
    Tracks and enforces the termination condition of a run.

    A run is bounded when ``max_generations`` is set. With
    ``max_generations=None`` the run is unbounded and ends only through the
    cancellation token or ``max_time``.
    """

    max_generations: int | None = None
    max_time: float | None = None  # Seconds
    token: CancellationToken = field(default_factory=CancellationToken)

    # Tracking
    generations_used: int = 0
    evaluations_used: int = 0
    start_time: float | None = None

    @property
    def bounded(self) -> bool:
        return self.max_generations is not None

    def start(self) -> None:
        """Start the budget timer."""
        self.start_time = time.monotonic()

    def cancel(self) -> None:
        self.token.cancel()

    def can_continue(self) -> bool:
        """Check whether another generation may start."""
        return self.get_stop_reason() is None

    def record_generation(self, num_evaluations: int = 0) -> None:
        """Record completion of a generation."""
        self.generations_used += 1
        self.evaluations_used += num_evaluations

    def is_last_generation(self) -> bool:
        """True when the generation about to run is the final bounded one."""
        return self.bounded and self.generations_used + 1 >= self.max_generations

    def elapsed(self) -> float:
        if self.start_time is None:
            return 0.0
        return time.monotonic() - self.start_time

    def get_remaining(self) -> dict:
        """Get remaining budget."""
        remaining: dict = {}
        if self.max_generations is not None:
            remaining["generations"] = self.max_generations - self.generations_used
        if self.max_time is not None and self.start_time is not None:
            remaining["time"] = max(0.0, self.max_time - self.elapsed())
        return remaining

    def get_usage(self) -> dict:
        """Get current usage statistics."""
        usage = {
            "generations": self.generations_used,
            "evaluations": self.evaluations_used,
        }
        if self.max_generations:
            usage["generations_pct"] = self.generations_used / self.max_generations * 100
        if self.start_time is not None:
            usage["elapsed_time"] = self.elapsed()
        return usage

    def get_stop_reason(self) -> str | None:
        """Get the reason for stopping, if any."""
        if self.token.cancelled:
            return "cancelled"
        if self.max_generations is not None and self.generations_used >= self.max_generations:
            return "max_generations"
        if self.max_time is not None and self.start_time is not None:
            if self.elapsed() >= self.max_time:
                return "max_time"
        return None

    def reset(self) -> None:
        """Reset the budget tracking."""
        self.generations_used = 0
        self.evaluations_used = 0
        self.start_time = None
        self.token.reset()
