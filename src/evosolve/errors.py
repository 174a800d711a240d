"""Exception types raised by the evosolve engine."""

from __future__ import annotations


class EvosolveError(Exception):
    """Base class for all evosolve errors."""


class ConfigurationError(EvosolveError, ValueError):
    """
    Raised when a run is configured with values the engine cannot honour.

    Examples are a survivor sample size outside ``[1, population_size]``,
    a negative generation count, or inverted mutation bounds. This error is
    fatal: the run either never starts or terminates immediately.
    """
