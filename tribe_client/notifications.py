"""User-notification sink.

The request pipeline reports terminal failures to a fire-and-forget sink
accepting a display string. Applications plug their own UI (toast, status
bar, chat reply) in; the default simply logs.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from .logs.logger import logger


@runtime_checkable
class Notifier(Protocol):
    def __call__(self, message: str) -> None: ...


class LogNotifier:
    """Default sink: emits notifications through the client logger."""

    def __init__(self, level: int = logging.WARNING) -> None:
        self.level = level

    def __call__(self, message: str) -> None:
        logger.log_event("notify", "message", level=self.level, message=message)


def notify_safely(notifier: Notifier, message: str) -> None:
    """Deliver ``message`` to ``notifier`` without letting the sink break a request.

    The sink is fire-and-forget: its failures are logged and dropped.
    """
    try:
        notifier(message)
    except Exception as e:  # noqa: BLE001
        logger.log_event(
            "notify", "sink_failed", level=logging.ERROR, exc_info=True, error=str(e)
        )


__all__ = ["Notifier", "LogNotifier", "notify_safely"]
