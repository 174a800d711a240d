"""Utility modules for evosolve."""

from evosolve.utils.logging import get_logger, set_verbosity, LogLevel
from evosolve.utils.device import get_device, get_device_info, make_generator

__all__ = [
    "get_logger",
    "set_verbosity",
    "LogLevel",
    "get_device",
    "get_device_info",
    "make_generator",
]
