"""Unit tests for Logging module."""

from __future__ import annotations

from io import StringIO

from rich.console import Console

from nodeweave.logging.logger import LogLevel, NodeWeaveLogger
from nodeweave.logging.config import (
    get_logger,
    configure_logging,
    disable_logging,
    enable_logging,
)


def _capture(level: LogLevel = LogLevel.INFO) -> tuple[NodeWeaveLogger, StringIO]:
    output = StringIO()
    console = Console(file=output, force_terminal=True, width=200)
    return NodeWeaveLogger(level=level, console=console), output


class TestLogLevel:
    """Tests for LogLevel."""

    def test_level_ranking(self) -> None:
        """Levels should have correct rank order."""
        assert LogLevel.DEBUG.rank < LogLevel.INFO.rank
        assert LogLevel.INFO.rank < LogLevel.WARNING.rank
        assert LogLevel.WARNING.rank < LogLevel.ERROR.rank


class TestNodeWeaveLogger:
    """Tests for NodeWeaveLogger."""

    def test_default_creation(self) -> None:
        """Should create with defaults."""
        logger = NodeWeaveLogger()

        assert logger.level == LogLevel.INFO
        assert logger.enabled is True

    def test_level_filtering(self) -> None:
        """Should filter messages below level."""
        logger, output = _capture(LogLevel.WARNING)

        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")

        result = output.getvalue()
        assert "Debug message" not in result
        assert "Info message" not in result
        assert "Warning message" in result

    def test_disabled_logging(self) -> None:
        """Should not log when disabled."""
        output = StringIO()
        console = Console(file=output, force_terminal=True)
        logger = NodeWeaveLogger(enabled=False, console=console)

        logger.info("Should not appear")
        logger.node_error("fetch", "boom")

        assert output.getvalue() == ""

    def test_context_values_are_not_markup(self) -> None:
        """Bracketed user data should be printed literally."""
        logger, output = _capture()

        logger.info("Resolved", value="[bold]raw[/bold]")

        assert "[bold]raw[/bold]" in output.getvalue()

    def test_node_start_logging(self) -> None:
        """Should log node start with its type."""
        logger, output = _capture()

        logger.node_start("Fetch Books", "http")

        result = output.getvalue()
        assert "Fetch Books" in result
        assert "http" in result
        assert "starting" in result

    def test_node_end_logging(self) -> None:
        """Should log node completion with duration."""
        logger, output = _capture()

        logger.node_end("Fetch Books", duration_ms=150)

        result = output.getvalue()
        assert "Fetch Books" in result
        assert "150ms" in result

    def test_node_end_non_success_is_warning(self) -> None:
        """A failed status should still be visible at warning level."""
        logger, output = _capture(LogLevel.WARNING)

        logger.node_end("Fetch Books", duration_ms=5, status="failed")

        assert "failed" in output.getvalue()

    def test_node_error_logging(self) -> None:
        """Should log node failures."""
        logger, output = _capture(LogLevel.ERROR)

        logger.node_error("Check", "Condition is required")

        result = output.getvalue()
        assert "Check" in result
        assert "Condition is required" in result

    def test_http_attempt_logging(self) -> None:
        """Should log HTTP attempts at debug level."""
        logger, output = _capture(LogLevel.DEBUG)

        logger.http_attempt("GET", "https://api.example.com/items", attempt=2, status_code=503)

        result = output.getvalue()
        assert "api.example.com" in result
        assert "503" in result

    def test_loop_iteration_hidden_at_info(self) -> None:
        """Loop iterations are debug output."""
        logger, output = _capture()

        logger.loop_iteration("Each Book", 3, success=True)

        assert output.getvalue() == ""

    def test_security_block_logging(self) -> None:
        """Should log rejected code."""
        logger, output = _capture()

        logger.security_block("Script", "Access to child_process module")

        result = output.getvalue()
        assert "Script" in result
        assert "child_process" in result


class TestLoggingConfig:
    """Tests for logging configuration."""

    def test_get_logger_returns_logger(self) -> None:
        """get_logger should return a NodeWeaveLogger."""
        assert isinstance(get_logger(), NodeWeaveLogger)
        assert get_logger() is get_logger()

    def test_configure_logging(self) -> None:
        """Should configure global logger."""
        logger = configure_logging(level="debug", show_timestamps=False)

        assert logger.level == LogLevel.DEBUG
        assert get_logger() is logger

    def test_disable_enable_logging(self) -> None:
        """Should disable and enable logging."""
        configure_logging()

        disable_logging()
        assert get_logger().enabled is False

        enable_logging()
        assert get_logger().enabled is True
