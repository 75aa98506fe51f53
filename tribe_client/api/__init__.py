"""HTTP API layer: authenticated client, request models and endpoint helpers."""

from .client import AuthenticatedClient
from .interceptors import RequestInterceptor
from .models import ApiResponse, OutgoingRequest
from .tribe import TribeAPI

__all__ = [
    "ApiResponse",
    "AuthenticatedClient",
    "OutgoingRequest",
    "RequestInterceptor",
    "TribeAPI",
]
