# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Silent logger implementation for testing."""

from typing import Any

from .logger import Logger


class SilentLogger(Logger):
    """Logger that stores log messages in memory without output.

    Useful for testing to verify logging behavior without cluttering test output.
    Note: SilentLogger does not filter by level - every call is recorded.
    """

    def __init__(self, level: str = "INFO", name: str | None = None):
        """Initialize silent logger.

        Args:
            level: Logging level, kept for parity with StdoutLogger only
            name: Optional logger name for identification
        """
        self.level = level.upper()
        self.name = name or "avalon"
        self.logs: list[dict[str, Any]] = []

    def _log(self, level: str, message: str, **kwargs: Any) -> None:
        """Record a log entry in ``logs``.

        Args:
            level: Record level
            message: The log message
            **kwargs: Structured fields, stored under ``extra``
        """
        log_entry: dict[str, Any] = {
            "level": level,
            "message": message,
        }
        if kwargs:
            log_entry["extra"] = kwargs
        self.logs.append(log_entry)

    def info(self, message: str, **kwargs: Any) -> None:
        """Record an INFO entry.

        Args:
            message: The log message
            **kwargs: Structured fields to attach
        """
        self._log("INFO", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Record a WARNING entry.

        Args:
            message: The log message
            **kwargs: Structured fields to attach
        """
        self._log("WARNING", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Record an ERROR entry.

        Args:
            message: The log message
            **kwargs: Structured fields to attach
        """
        self._log("ERROR", message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Record an ERROR entry. Traceback capture is dropped."""
        kwargs.pop("exc_info", None)
        self._log("ERROR", message, **kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Record a DEBUG entry.

        Args:
            message: The log message
            **kwargs: Structured fields to attach
        """
        self._log("DEBUG", message, **kwargs)

    def clear_logs(self) -> None:
        """Clear all stored log messages."""
        self.logs.clear()

    def get_logs(self, level: str | None = None) -> list[dict[str, Any]]:
        """Get stored log messages, optionally filtered by level.

        Args:
            level: Optional level to filter by (DEBUG, INFO, WARNING, ERROR)

        Returns:
            Matching log entries
        """
        if level is None:
            return self.logs
        return [log for log in self.logs if log["level"] == level]

    def has_log(self, message: str, level: str | None = None) -> bool:
        """Check whether a message was logged.

        Args:
            message: Message to search for (substring match)
            level: Optional log level to filter by

        Returns:
            True if message is found, False otherwise
        """
        return any(message in log["message"] for log in self.get_logs(level))
