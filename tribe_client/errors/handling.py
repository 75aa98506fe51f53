from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import aiohttp

from ..constants import MSG_GENERIC
from ..logging_config import log_structured_error
from ..notifications import Notifier, notify_safely
from .internal import (
    ClientRequestError,
    InternalError,
    NetworkUnreachableError,
    RequestError,
    RequestTimeoutError,
    ServerError,
)

if TYPE_CHECKING:
    from ..api.models import ApiResponse, OutgoingRequest


def log_error(
    message: str, error: Exception, context: dict[str, Any] | None = None
) -> None:
    """Logs an error message with the associated exception details.

    Uses structured logging so that failures are aggregated per kind.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.
    """
    error_type = "unknown"
    if isinstance(error, RequestError):
        error_type = error.kind.value
    elif isinstance(error, TimeoutError):
        error_type = "timeout"
    elif isinstance(error, aiohttp.ClientError | OSError):
        error_type = "network"
    elif isinstance(error, InternalError):
        error_type = "internal"

    log_structured_error(
        error_type=error_type,
        message=f"{message}: {str(error)}",
        exception=error,
        context=context,
    )


def extract_message(payload: Any, fallback: str) -> str:
    """Pick the backend's ``message`` field out of an error body."""
    if isinstance(payload, Mapping):
        msg = payload.get("message")
        if isinstance(msg, str) and msg.strip():
            return msg
    return fallback or MSG_GENERIC


def classify_transport_error(
    error: BaseException, request: OutgoingRequest
) -> RequestError:
    """Map a failure that produced no HTTP response to the taxonomy.

    Timeouts (``TimeoutError``, which ``aiohttp.ServerTimeoutError`` also
    derives from) become RequestTimeoutError; every other aiohttp or socket
    failure becomes NetworkUnreachableError.
    """
    if isinstance(error, TimeoutError):
        return RequestTimeoutError(
            f"{request.method} {request.path} timed out",
            cause=error,
            method=request.method,
            path=request.path,
        )
    return NetworkUnreachableError(
        f"{request.method} {request.path} failed without a response: {error}",
        cause=error,
        method=request.method,
        path=request.path,
    )


def classify_http_error(
    response: ApiResponse, request: OutgoingRequest
) -> RequestError:
    """Map an HTTP error status (other than a recoverable 401) to the taxonomy."""
    message = extract_message(
        response.data, f"Request failed with status code {response.status}"
    )
    error_cls = ServerError if response.status >= 500 else ClientRequestError
    return error_cls(
        message,
        status=response.status,
        method=request.method,
        path=request.path,
    )


class ErrorReporter:
    """Single point where terminal failures are logged and shown to the user.

    Each error instance produces at most one notification: ``report`` marks
    the error as notified, so an error shared by several callers (a failed
    renewal fanned out to queued requests) is only announced once.
    """

    def __init__(self, notifier: Notifier) -> None:
        self._notifier = notifier

    def report(self, error: RequestError) -> bool:
        """Log ``error`` and notify the user unless that already happened.

        Returns:
            True if a notification was sent by this call.
        """
        if error.notified:
            return False
        error.notified = True
        log_error("Request failed", error, context=error.context())
        notify_safely(self._notifier, error.user_message)
        return True


__all__ = [
    "ErrorReporter",
    "classify_http_error",
    "classify_transport_error",
    "extract_message",
    "log_error",
]
