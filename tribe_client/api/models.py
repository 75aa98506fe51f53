"""Request and response value types for the authenticated client."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

import aiohttp

from ..errors.internal import RejectedRequestError

AUTHORIZATION = "Authorization"
CONTENT_TYPE = "Content-Type"


@dataclass
class OutgoingRequest:
    """A logical request as issued by a caller.

    Attributes:
        method: HTTP method, upper-cased on creation.
        path: Path relative to the client's base URL (absolute URLs are kept).
        headers: Per-request headers; override the client defaults.
        body: JSON-serialisable value, raw ``bytes``/``str``, or
            ``aiohttp.FormData`` for multipart uploads.
        params: Query string parameters.
        timeout: Total timeout in seconds, ``None`` for the client default.
        retried: Set once the request has been replayed after a renewal.
    """

    method: str
    path: str
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    params: Mapping[str, Any] | None = None
    timeout: float | None = None
    retried: bool = False

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        self.headers = dict(self.headers)

    @property
    def is_multipart(self) -> bool:
        return isinstance(self.body, aiohttp.FormData)

    def url(self, base_url: str) -> str:
        if self.path.startswith(("http://", "https://")):
            return self.path
        return f"{base_url.rstrip('/')}/{self.path.lstrip('/')}"

    def with_bearer(self, token: str) -> OutgoingRequest:
        """Copy of this request carrying ``token`` as its only bearer credential."""
        headers = merge_headers(self.headers, {AUTHORIZATION: f"Bearer {token}"})
        return replace(self, headers=headers)

    def without_header(self, name: str) -> OutgoingRequest:
        lowered = name.lower()
        headers = {k: v for k, v in self.headers.items() if k.lower() != lowered}
        return replace(self, headers=headers)


def merge_headers(*layers: Mapping[str, str]) -> dict[str, str]:
    """Merge header mappings; later layers replace earlier ones regardless of case.

    The replacing layer's spelling of the header name is kept.
    """
    merged: dict[str, str] = {}
    for layer in layers:
        for name, value in layer.items():
            lowered = name.lower()
            for existing in [k for k in merged if k.lower() == lowered]:
                del merged[existing]
            merged[name] = value
    return merged


@dataclass(frozen=True)
class ApiResponse:
    """A completed HTTP exchange.

    Attributes:
        status: HTTP status code.
        data: Decoded JSON body, raw text for non-JSON bodies, None when empty.
        headers: Response headers.
    """

    status: int
    data: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status < 400

    @property
    def success(self) -> bool:
        """Application-level success flag carried in the JSON body."""
        return isinstance(self.data, Mapping) and self.data.get("success") is True

    @property
    def message(self) -> str | None:
        if isinstance(self.data, Mapping):
            msg = self.data.get("message")
            if isinstance(msg, str) and msg:
                return msg
        return None

    def require_success(self, operation: str) -> Mapping[str, Any]:
        """Return the JSON payload, or raise if the backend flagged a failure.

        Args:
            operation: Short description used in the fallback error message.

        Raises:
            RejectedRequestError: If ``success`` is not true.
        """
        if not self.success:
            raise RejectedRequestError(
                self.message or f"{operation} failed",
                status=self.status,
                data={"operation": operation},
            )
        return self.data


__all__ = ["OutgoingRequest", "ApiResponse", "AUTHORIZATION", "CONTENT_TYPE", "merge_headers"]
