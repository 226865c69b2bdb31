"""Rotating log file writer with gzip compression and backup retention."""

from logroller.config import ConfigError, RollerConfig, RotateStrategy
from logroller.handler import RollerHandler
from logroller.writer import RollingWriter, WriteTooLongError

__all__ = [
    "ConfigError",
    "RollerConfig",
    "RollerHandler",
    "RotateStrategy",
    "RollingWriter",
    "WriteTooLongError",
]
