"""Global logging configuration."""

from __future__ import annotations

from typing import Any

from nodeweave.logging.logger import LogLevel, NodeWeaveLogger


# Global logger instance
_logger: NodeWeaveLogger | None = None


def get_logger() -> NodeWeaveLogger:
    """Get the global logger instance.

    Creates a logger at the configured level if none exists.

    Returns:
        The global NodeWeaveLogger instance.
    """
    global _logger
    if _logger is None:
        from nodeweave.core.config import get_settings

        _logger = NodeWeaveLogger(level=LogLevel(get_settings().log_level.lower()))
    return _logger


def configure_logging(
    level: LogLevel | str = LogLevel.INFO,
    enabled: bool = True,
    show_timestamps: bool = True,
    show_level: bool = True,
    **kwargs: Any,
) -> NodeWeaveLogger:
    """Configure the global logger.

    Args:
        level: Minimum log level (LogLevel or string).
        enabled: Whether logging is enabled.
        show_timestamps: Whether to show timestamps.
        show_level: Whether to show log level.
        **kwargs: Additional arguments passed to NodeWeaveLogger.

    Returns:
        The configured logger instance.

    Example:
        >>> configure_logging(level="debug", show_timestamps=False)
        >>> logger = get_logger()
        >>> logger.info("Hello")
    """
    global _logger

    if isinstance(level, str):
        level = LogLevel(level.lower())

    _logger = NodeWeaveLogger(
        level=level,
        enabled=enabled,
        show_timestamps=show_timestamps,
        show_level=show_level,
        **kwargs,
    )

    return _logger


def disable_logging() -> None:
    """Disable all logging."""
    get_logger().enabled = False


def enable_logging() -> None:
    """Enable logging."""
    get_logger().enabled = True
