"""Outbound request stage: default headers and bearer token attachment."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from ..auth_token.session import SessionProvider
from ..logs.logger import logger
from .models import CONTENT_TYPE, OutgoingRequest, merge_headers


class RequestInterceptor:
    """Turns a caller's OutgoingRequest into one ready to send."""

    def __init__(
        self, session_provider: SessionProvider, default_headers: Mapping[str, str]
    ) -> None:
        self._session_provider = session_provider
        self._default_headers = dict(default_headers)

    async def prepare(
        self, request: OutgoingRequest, token: str | None = None
    ) -> OutgoingRequest:
        """Merge default headers and attach the bearer token.

        Args:
            request: Request as issued by the caller.
            token: Token to attach. When omitted the session provider's
                current token is looked up; a missing token or a failing
                lookup lets the request go out without a bearer.

        Returns:
            A new OutgoingRequest; ``request`` itself is not modified.
        """
        prepared = OutgoingRequest(
            method=request.method,
            path=request.path,
            headers=merge_headers(self._default_headers, request.headers),
            body=request.body,
            params=request.params,
            timeout=request.timeout,
            retried=request.retried,
        )
        if prepared.is_multipart:
            # aiohttp writes the multipart boundary itself.
            prepared = prepared.without_header(CONTENT_TYPE)

        if token is None:
            token = await self._lookup_token(prepared)
        if token:
            prepared = prepared.with_bearer(token)
        return prepared

    async def _lookup_token(self, request: OutgoingRequest) -> str | None:
        try:
            token = await self._session_provider.get_current_token()
        except Exception as e:  # noqa: BLE001
            # The backend's 401 drives recovery; nothing to surface here.
            logger.log_event(
                "auth",
                "token_lookup_failed",
                level=logging.WARNING,
                method=request.method,
                path=request.path,
                error=f"{type(e).__name__}: {e}",
            )
            return None
        if not token:
            logger.log_event(
                "auth",
                "token_missing",
                level=logging.DEBUG,
                method=request.method,
                path=request.path,
            )
            return None
        return token


__all__ = ["RequestInterceptor"]
