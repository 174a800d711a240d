"""Command-line interface for evosolve."""
