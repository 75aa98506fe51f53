"""Centralized internal error hierarchy.

Every failure the request pipeline surfaces is one of the RequestError
subclasses below; raw aiohttp / JSON / session-provider errors never reach
callers directly, they are chained as ``cause``.

Classes:
  InternalError               – Base for all internal errors.
  RequestError                – Normalized request failure (kind, message, cause).
  RequestTimeoutError         – No response within the request timeout.
  NetworkUnreachableError     – Transport failure without a response.
  AuthenticationExpiredError  – 401 on a request already replayed once.
  RenewalFailedError          – The single in-flight token renewal failed.
  ServerError                 – HTTP 5xx.
  ClientRequestError          – HTTP 4xx other than 401.
  RejectedRequestError        – 2xx response whose ``success`` flag is false.
  SessionError                – A session provider could not supply a token.
  ConfigurationError          – Invalid client settings.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum

from ..constants import MSG_NETWORK, MSG_SESSION_EXPIRED, MSG_TIMEOUT


class ErrorKind(str, Enum):
    """Normalized failure categories.

    Attributes:
        TIMEOUT: The request did not complete within its timeout.
        NETWORK_UNREACHABLE: No response was received at all.
        AUTHENTICATION_EXPIRED: Credentials were rejected after a replay.
        SERVER_ERROR: The backend answered with a 5xx status.
        CLIENT_ERROR: The backend rejected the request (4xx other than 401).
        RENEWAL_FAILED: Token renewal failed while requests were waiting on it.
    """

    TIMEOUT = "timeout"
    NETWORK_UNREACHABLE = "network_unreachable"
    AUTHENTICATION_EXPIRED = "authentication_expired"
    SERVER_ERROR = "server_error"
    CLIENT_ERROR = "client_error"
    RENEWAL_FAILED = "renewal_failed"


class InternalError(Exception):
    """Base class for all internal errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.

    Args:
        message: Descriptive error message.
        data: Optional mapping of additional context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class RequestError(InternalError):
    """A request failure normalized into the ErrorKind taxonomy.

    Attributes:
        kind: Category of the failure.
        message: Human readable description.
        cause: Original exception kept for diagnostics, if any.
        status: HTTP status when a response was received.
        method: HTTP method of the failed request.
        path: Request path of the failed request.
        notified: True once the user has been notified about this error.
    """

    kind: ErrorKind = ErrorKind.CLIENT_ERROR
    default_user_message: str | None = None

    def __init__(
        self,
        message: str,
        *,
        cause: BaseException | None = None,
        status: int | None = None,
        method: str | None = None,
        path: str | None = None,
        data: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message, data=data)
        self.message = message
        self.cause = cause
        self.status = status
        self.method = method
        self.path = path
        self.notified = False

    @property
    def user_message(self) -> str:
        """Text shown to the user when this error is reported."""
        return self.default_user_message or self.message

    def context(self) -> dict[str, object]:
        """Structured logging context for this error."""
        ctx: dict[str, object] = {"kind": self.kind.value}
        if self.method:
            ctx["method"] = self.method
        if self.path:
            ctx["path"] = self.path
        if self.status is not None:
            ctx["http_status"] = self.status
        if self.cause is not None:
            ctx["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        ctx.update(self.data)
        return ctx


class RequestTimeoutError(RequestError):
    kind = ErrorKind.TIMEOUT
    default_user_message = MSG_TIMEOUT


class NetworkUnreachableError(RequestError):
    kind = ErrorKind.NETWORK_UNREACHABLE
    default_user_message = MSG_NETWORK


class AuthenticationExpiredError(RequestError):
    """Raised when a replayed request is rejected with 401 again."""

    kind = ErrorKind.AUTHENTICATION_EXPIRED


class RenewalFailedError(AuthenticationExpiredError):
    """Raised to the renewal leader and every queued waiter when renewal fails.

    One instance is shared across the whole refresh cycle, so its
    ``notified`` flag keeps the fan-out to a single user notification.
    """

    kind = ErrorKind.RENEWAL_FAILED
    default_user_message = MSG_SESSION_EXPIRED


class ServerError(RequestError):
    kind = ErrorKind.SERVER_ERROR


class ClientRequestError(RequestError):
    kind = ErrorKind.CLIENT_ERROR


class RejectedRequestError(ClientRequestError):
    """The backend answered successfully but flagged ``success: false``."""


class SessionError(InternalError):
    """Raised by session providers that cannot produce or renew a token."""


class ConfigurationError(InternalError, ValueError):
    """Raised for invalid client configuration values."""


__all__ = [
    "ErrorKind",
    "InternalError",
    "RequestError",
    "RequestTimeoutError",
    "NetworkUnreachableError",
    "AuthenticationExpiredError",
    "RenewalFailedError",
    "ServerError",
    "ClientRequestError",
    "RejectedRequestError",
    "SessionError",
    "ConfigurationError",
]
