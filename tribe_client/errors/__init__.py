"""Error taxonomy and normalisation helpers."""

from .internal import (
    AuthenticationExpiredError,
    ClientRequestError,
    ConfigurationError,
    ErrorKind,
    InternalError,
    NetworkUnreachableError,
    RejectedRequestError,
    RenewalFailedError,
    RequestError,
    RequestTimeoutError,
    ServerError,
    SessionError,
)

__all__ = [
    "AuthenticationExpiredError",
    "ClientRequestError",
    "ConfigurationError",
    "ErrorKind",
    "InternalError",
    "NetworkUnreachableError",
    "RejectedRequestError",
    "RenewalFailedError",
    "RequestError",
    "RequestTimeoutError",
    "ServerError",
    "SessionError",
]
