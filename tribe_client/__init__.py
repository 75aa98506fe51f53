"""Authenticated asyncio client for the Tribe social backend."""

from .api import ApiResponse, AuthenticatedClient, OutgoingRequest, TribeAPI
from .auth_token import CallbackSessionProvider, SessionProvider, StaticSessionProvider
from .config import ClientConfig
from .errors import (
    AuthenticationExpiredError,
    ClientRequestError,
    ConfigurationError,
    ErrorKind,
    NetworkUnreachableError,
    RejectedRequestError,
    RenewalFailedError,
    RequestError,
    RequestTimeoutError,
    ServerError,
    SessionError,
)
from .notifications import LogNotifier, Notifier

__version__ = "1.0.0"

__all__ = [
    "ApiResponse",
    "AuthenticatedClient",
    "AuthenticationExpiredError",
    "CallbackSessionProvider",
    "ClientConfig",
    "ClientRequestError",
    "ConfigurationError",
    "ErrorKind",
    "LogNotifier",
    "NetworkUnreachableError",
    "Notifier",
    "OutgoingRequest",
    "RejectedRequestError",
    "RenewalFailedError",
    "RequestError",
    "RequestTimeoutError",
    "ServerError",
    "SessionError",
    "SessionProvider",
    "StaticSessionProvider",
    "TribeAPI",
]
