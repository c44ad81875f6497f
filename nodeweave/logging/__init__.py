"""Logging module for NodeWeave.

Provides structured logging with Rich console support.
"""

from nodeweave.logging.logger import LogLevel, NodeWeaveLogger
from nodeweave.logging.config import (
    configure_logging,
    disable_logging,
    enable_logging,
    get_logger,
)

__all__ = [
    "LogLevel",
    "NodeWeaveLogger",
    "configure_logging",
    "disable_logging",
    "enable_logging",
    "get_logger",
]
