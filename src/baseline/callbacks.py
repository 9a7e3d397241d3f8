"""
Callback interface for collection/comparison progress reporting.
"""

from __future__ import annotations

from typing import Protocol

from core.logging import get_logger

LOGGER = get_logger("baseline.progress")


class ProgressCallbacks(Protocol):
    """
    Callback interface for progress reporting.

    The collector and comparator call these methods as they walk; they never
    print or log progress themselves. Implementations can be synchronous (for
    testing) or drive a progress bar.
    """

    def on_progress(self, current: int, total: int, message: str = "") -> None:
        """
        Report progress after each pattern (collector) or record (comparator).

        Args:
            current: Items processed so far (1-based)
            total: Total items
            message: Key pattern or key path just processed

        Example:
            callbacks.on_progress(3, 20, "HKLM\\SOFTWARE\\...\\Run")
        """
        ...

    def on_log(self, message: str, level: str = "info") -> None:
        """
        Log a message.

        Args:
            message: Log message
            level: "debug" | "info" | "warning" | "error"
        """
        ...

    def on_error(self, error: str, details: str = "") -> None:
        """
        Report a non-fatal error (the walk continues).

        Args:
            error: Short error message
            details: Detailed error information
        """
        ...


class NullCallbacks:
    """Callbacks that ignore everything."""

    def on_progress(self, current: int, total: int, message: str = "") -> None:
        pass

    def on_log(self, message: str, level: str = "info") -> None:
        pass

    def on_error(self, error: str, details: str = "") -> None:
        pass


class LoggingCallbacks:
    """Callbacks that forward to the application logger."""

    def __init__(self, logger=LOGGER):
        self._logger = logger

    def on_progress(self, current: int, total: int, message: str = "") -> None:
        self._logger.debug("[%d/%d] %s", current, total, message)

    def on_log(self, message: str, level: str = "info") -> None:
        log_method = getattr(self._logger, level.lower(), self._logger.info)
        log_method(message)

    def on_error(self, error: str, details: str = "") -> None:
        if details:
            self._logger.warning("%s: %s", error, details)
        else:
            self._logger.warning("%s", error)
