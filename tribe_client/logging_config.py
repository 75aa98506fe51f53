"""
Logging setup for applications embedding the Tribe API client.

``LoggerConfigurator`` installs a colorlog console handler. Normalised request
failures are written through ``log_structured_error``, which also keeps a
per-kind count in ``error_aggregator`` for inspection.
"""

from __future__ import annotations

import logging
import os
import sys
import time
from typing import Any

import colorlog


class ErrorAggregator:
    """Counts structured errors per kind and remembers the latest of each."""

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}
        self._last: dict[str, dict[str, Any]] = {}

    def record_error(
        self, error_type: str, message: str, context: dict[str, Any] | None = None
    ) -> None:
        self._counts[error_type] = self._counts.get(error_type, 0) + 1
        self._last[error_type] = {
            "timestamp": time.time(),
            "message": message,
            "context": context or {},
        }

    def get_error_summary(self) -> dict[str, dict[str, Any]]:
        """Map each error kind to its total count and most recent occurrence."""
        return {
            error_type: {"total_count": count, "last_occurrence": self._last[error_type]}
            for error_type, count in self._counts.items()
        }

    def reset(self) -> None:
        self._counts.clear()
        self._last.clear()


error_aggregator = ErrorAggregator()


def log_structured_error(
    error_type: str,
    message: str,
    exception: Exception | None = None,
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log an error as ``[TYPE] message | Exception: ... | Context: k=v``.

    Args:
        error_type: Error kind, e.g. ``timeout`` or ``renewal_failed``.
        message: Descriptive error message.
        exception: The exception that occurred, if any.
        context: Request details such as method, path and status.
        level: Logging level (default: ERROR).
    """
    structured_message = f"[{error_type.upper()}] {message}"

    if exception:
        structured_message += f" | Exception: {type(exception).__name__}: {exception}"

    if context:
        context_str = " | ".join(f"{k}={v}" for k, v in context.items())
        structured_message += f" | Context: {context_str}"

    logging.log(level, structured_message)
    error_aggregator.record_error(error_type, message, context)


class LoggerConfigurator:
    """Configures root logging with colored console output.

    ``config`` may set ``debug`` explicitly; otherwise the ``DEBUG``
    environment variable decides between DEBUG and INFO.
    """

    def __init__(self, config: dict[str, Any] | None = None):
        self.config = config or {}

    def _debug_enabled(self) -> bool:
        if "debug" in self.config:
            return bool(self.config["debug"])
        return os.environ.get("DEBUG", "").lower() in ("true", "1", "yes")

    def configure(self) -> None:
        log_level = logging.DEBUG if self._debug_enabled() else logging.INFO

        formatter = colorlog.ColoredFormatter(
            "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s %(message_log_color)s%(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "magenta",
            },
            secondary_log_colors={"message": {"ERROR": "red", "CRITICAL": "magenta"}},
            reset=True,
        )
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)

        root_logger = logging.getLogger()
        root_logger.handlers = [handler]
        root_logger.setLevel(log_level)

        # aiohttp client debug output duplicates our http events
        logging.getLogger("aiohttp").setLevel(logging.WARNING)


def configure_logging(config: dict[str, Any] | None = None) -> None:
    """Configure logging for an application embedding the client."""
    LoggerConfigurator(config).configure()
