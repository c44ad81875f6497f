"""NodeWeave logger implementation."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from rich.console import Console
from rich.markup import escape


class LogLevel(str, Enum):
    """Log levels."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        """Get numeric rank for comparison."""
        ranks = {"debug": 0, "info": 1, "warning": 2, "error": 3}
        return ranks[self.value]


class NodeWeaveLogger:
    """Structured logger for node execution.

    Provides Rich-formatted logging for workflow node tracking.

    Example:
        >>> logger = NodeWeaveLogger(level=LogLevel.DEBUG)
        >>> logger.info("Resolving inputs", node="fetch-books")
        >>> logger.node_start("fetch-books", "http")
    """

    def __init__(
        self,
        level: LogLevel = LogLevel.INFO,
        console: Console | None = None,
        show_timestamps: bool = True,
        show_level: bool = True,
        enabled: bool = True,
    ) -> None:
        """Initialize logger.

        Args:
            level: Minimum log level to display.
            console: Rich console instance (stderr console if None).
            show_timestamps: Whether to show timestamps.
            show_level: Whether to show log level.
            enabled: Whether logging is enabled.
        """
        self._level = level
        self._console = console or Console(stderr=True)
        self._show_timestamps = show_timestamps
        self._show_level = show_level
        self._enabled = enabled

    @property
    def level(self) -> LogLevel:
        """Current log level."""
        return self._level

    @level.setter
    def level(self, value: LogLevel) -> None:
        self._level = value

    @property
    def enabled(self) -> bool:
        """Whether logging is enabled."""
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self._enabled = value

    def _should_log(self, level: LogLevel) -> bool:
        return self._enabled and level.rank >= self._level.rank

    def _format_prefix(self, level: LogLevel) -> str:
        parts = []

        if self._show_timestamps:
            timestamp = datetime.now().strftime("%H:%M:%S")
            parts.append(f"[dim]{timestamp}[/]")

        if self._show_level:
            level_colors = {
                LogLevel.DEBUG: "dim",
                LogLevel.INFO: "blue",
                LogLevel.WARNING: "yellow",
                LogLevel.ERROR: "red bold",
            }
            color = level_colors.get(level, "white")
            parts.append(f"[{color}]{level.value.upper():7}[/]")

        return " ".join(parts)

    def _emit(self, level: LogLevel, line: str) -> None:
        if not self._should_log(level):
            return
        self._console.print(f"{self._format_prefix(level)} {line}")

    def _log(self, level: LogLevel, message: str, **context: Any) -> None:
        if not self._should_log(level):
            return

        message = escape(message)
        # User data can contain brackets, so context values are escaped too
        if context:
            context_str = " ".join(
                f"[dim]{k}=[/]{escape(str(v))}" for k, v in context.items()
            )
            message = f"{message} {context_str}"

        self._emit(level, message)

    def debug(self, message: str, **context: Any) -> None:
        """Log debug message."""
        self._log(LogLevel.DEBUG, message, **context)

    def info(self, message: str, **context: Any) -> None:
        """Log info message."""
        self._log(LogLevel.INFO, message, **context)

    def warning(self, message: str, **context: Any) -> None:
        """Log warning message."""
        self._log(LogLevel.WARNING, message, **context)

    def error(self, message: str, **context: Any) -> None:
        """Log error message."""
        self._log(LogLevel.ERROR, message, **context)

    # Node-specific logging methods

    def node_start(self, node_name: str, node_type: str) -> None:
        """Log node start."""
        self._emit(
            LogLevel.INFO,
            f"[bold blue]▶ {escape(node_name)}[/] [dim]({node_type})[/] starting",
        )

    def node_end(self, node_name: str, duration_ms: int, status: str = "success") -> None:
        """Log node completion."""
        if status == "success":
            self._emit(
                LogLevel.INFO,
                f"[bold green]✓ {escape(node_name)}[/] completed ({duration_ms}ms)",
            )
        else:
            self._emit(
                LogLevel.WARNING,
                f"[bold yellow]● {escape(node_name)}[/] finished with status "
                f"{status} ({duration_ms}ms)",
            )

    def node_error(self, node_name: str, error: str) -> None:
        """Log node failure."""
        self._emit(
            LogLevel.ERROR,
            f"[bold red]✗ {escape(node_name)}[/] failed: {escape(error)}",
        )

    def http_attempt(
        self,
        method: str,
        url: str,
        attempt: int,
        status_code: int | None = None,
    ) -> None:
        """Log a single HTTP attempt."""
        status = f" -> {status_code}" if status_code is not None else ""
        self._emit(
            LogLevel.DEBUG,
            f"  [dim]HTTP:[/] {method} {escape(url)} attempt {attempt}{status}",
        )

    def loop_iteration(self, loop_name: str, index: int, success: bool) -> None:
        """Log a loop iteration."""
        status = "[green]✓[/]" if success else "[red]✗[/]"
        self._emit(
            LogLevel.DEBUG,
            f"  [dim]Iteration {index}:[/] {escape(loop_name)} {status}",
        )

    def security_block(self, node_name: str, reason: str) -> None:
        """Log code or path rejected by a security check."""
        self._emit(
            LogLevel.WARNING,
            f"[bold yellow]⚠ {escape(node_name)}[/] blocked: {escape(reason)}",
        )
