"""Authenticated HTTP client for the Tribe backend.

Every outbound call goes through one pipeline:

1. the outbound stage (RequestInterceptor) merges default headers and
   attaches the current bearer token;
2. the request is sent with a fixed total timeout;
3. the inbound stage classifies the outcome. A 401 on a request that has
   not been replayed yet enters the single-flight refresh protocol and the
   request is resent with the renewed token; transport failures and every
   other error status are surfaced immediately.

Terminal failures are reported (logged and shown to the user) exactly once
through ErrorReporter before being raised to the caller.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable, Mapping
from typing import Any

import aiohttp

from ..auth_token.refresh_coordinator import RefreshCoordinator
from ..auth_token.session import SessionProvider
from ..config import ClientConfig
from ..errors.handling import (
    ErrorReporter,
    classify_http_error,
    classify_transport_error,
    extract_message,
)
from ..errors.internal import (
    AuthenticationExpiredError,
    RenewalFailedError,
    RequestError,
)
from ..logs.logger import logger
from ..notifications import LogNotifier, Notifier
from .interceptors import RequestInterceptor
from .models import ApiResponse, OutgoingRequest

SessionExpiredHook = Callable[[RenewalFailedError], Any]


class AuthenticatedClient:
    """Asynchronous client attaching bearer tokens and recovering from 401s.

    Attributes:
        config: Effective client configuration.
        refresh: Coordinator guaranteeing a single in-flight token renewal.
    """

    def __init__(
        self,
        session_provider: SessionProvider,
        *,
        config: ClientConfig | None = None,
        notifier: Notifier | None = None,
        http_session: aiohttp.ClientSession | None = None,
        on_session_expired: SessionExpiredHook | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            session_provider: Source of current and renewed bearer tokens.
            config: Client settings; defaults to the environment constants.
            notifier: User-notification sink; defaults to LogNotifier.
            http_session: Existing aiohttp session to use. When omitted the
                client creates one lazily and closes it in ``close``.
            on_session_expired: Called once per failed renewal so the
                application can sign the user out.

        Raises:
            ConfigurationError: If ``config`` is invalid.
        """
        self.config = config or ClientConfig()
        self.config.validate()
        self._session_provider = session_provider
        self._interceptor = RequestInterceptor(session_provider, self.config.default_headers)
        self._reporter = ErrorReporter(notifier or LogNotifier())
        self._http_session = http_session
        self._owns_session = http_session is None
        self._on_session_expired = on_session_expired
        self.refresh = RefreshCoordinator()
        logger.log_event(
            "client", "created", level=logging.DEBUG, base_url=self.config.base_url
        )

    async def __aenter__(self) -> AuthenticatedClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session and self._http_session and not self._http_session.closed:
            await self._http_session.close()
            logger.log_event("client", "closed", level=logging.DEBUG)
        if self._owns_session:
            self._http_session = None

    def _get_http_session(self) -> aiohttp.ClientSession:
        if self._http_session is None or (self._owns_session and self._http_session.closed):
            # Timeouts are applied per request.
            self._http_session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=None)
            )
            logger.log_event("client", "session_created", level=logging.DEBUG)
        return self._http_session

    # ---- public entry points ----
    async def request(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        timeout: float | None = None,
    ) -> ApiResponse:
        """Send a request to the backend.

        Args:
            method: HTTP method.
            path: Path relative to ``config.base_url``.
            body: JSON-serialisable body, raw bytes/str, or aiohttp.FormData.
            headers: Header overrides for this request.
            params: Query string parameters.
            timeout: Total timeout override in seconds.

        Returns:
            The ApiResponse of the (possibly replayed) request.

        Raises:
            RequestTimeoutError: No response within the timeout.
            NetworkUnreachableError: Transport failure without a response.
            RenewalFailedError: The token renewal triggered by a 401 failed.
            AuthenticationExpiredError: 401 again after a successful renewal.
            ServerError: HTTP 5xx.
            ClientRequestError: HTTP 4xx other than 401.
        """
        outgoing = OutgoingRequest(
            method=method,
            path=path,
            headers=dict(headers or {}),
            body=body,
            params=params,
            timeout=timeout,
        )
        try:
            return await self._execute(outgoing)
        except RequestError as e:
            self._reporter.report(e)
            raise

    async def get(self, path: str, **kwargs: Any) -> ApiResponse:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, body: Any = None, **kwargs: Any) -> ApiResponse:
        return await self.request("POST", path, body=body, **kwargs)

    async def put(self, path: str, body: Any = None, **kwargs: Any) -> ApiResponse:
        return await self.request("PUT", path, body=body, **kwargs)

    async def patch(self, path: str, body: Any = None, **kwargs: Any) -> ApiResponse:
        return await self.request("PATCH", path, body=body, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> ApiResponse:
        return await self.request("DELETE", path, **kwargs)

    def report(self, error: RequestError) -> bool:
        """Route a failure detected outside the pipeline through the reporter."""
        return self._reporter.report(error)

    # ---- pipeline ----
    async def _execute(
        self, request: OutgoingRequest, token: str | None = None
    ) -> ApiResponse:
        prepared = await self._interceptor.prepare(request, token)
        response = await self._send(prepared)
        if response.ok:
            return response

        if response.status == 401:
            if not request.retried:
                return await self._recover_authentication(request)
            logger.log_event(
                "auth",
                "rejected_after_retry",
                level=logging.WARNING,
                method=request.method,
                path=request.path,
            )
            raise AuthenticationExpiredError(
                extract_message(response.data, "Authentication failed after token renewal"),
                status=response.status,
                method=request.method,
                path=request.path,
            )

        logger.log_event(
            "http",
            "error_status",
            level=logging.DEBUG,
            method=request.method,
            path=request.path,
            status=response.status,
        )
        raise classify_http_error(response, request)

    async def _recover_authentication(self, request: OutgoingRequest) -> ApiResponse:
        logger.log_event(
            "auth", "unauthorized", method=request.method, path=request.path
        )
        ticket = self.refresh.acquire_or_join()
        if ticket.is_leader:
            token = await self.refresh.run_renewal(self._renew_token)
        else:
            token = await ticket.wait()

        request.retried = True
        logger.log_event(
            "refresh", "replay", level=logging.DEBUG, method=request.method, path=request.path
        )
        return await self._execute(request, token)

    async def _renew_token(self) -> str:
        """Explicit renewal through the session provider, bounded by the renewal timeout."""
        try:
            async with asyncio.timeout(self.config.renewal_timeout_seconds):
                token = await self._session_provider.renew_token()
        except Exception as e:
            error = RenewalFailedError(f"Token renewal failed: {e}", cause=e)
            self._session_expired(error)
            raise error from e
        if not token:
            error = RenewalFailedError("Token renewal returned no token")
            self._session_expired(error)
            raise error
        return token

    def _session_expired(self, error: RenewalFailedError) -> None:
        logger.log_event("refresh", "session_expired", level=logging.WARNING)
        if self._on_session_expired is None:
            return
        try:
            self._on_session_expired(error)
        except Exception as e:  # noqa: BLE001
            logger.log_event(
                "notify", "sink_failed", level=logging.ERROR, exc_info=True, error=str(e)
            )

    async def _send(self, request: OutgoingRequest) -> ApiResponse:
        """Perform one HTTP exchange; transport failures are normalized here."""
        timeout = request.timeout or self.config.timeout_seconds
        kwargs: dict[str, Any] = {
            "headers": request.headers,
            "timeout": aiohttp.ClientTimeout(total=timeout),
        }
        if request.params is not None:
            kwargs["params"] = request.params
        if request.body is not None:
            if isinstance(request.body, aiohttp.FormData | bytes | str):
                kwargs["data"] = request.body
            else:
                kwargs["json"] = request.body

        logger.log_event(
            "http",
            "request",
            level=logging.DEBUG,
            method=request.method,
            path=request.path,
            retried=request.retried,
        )
        session = self._get_http_session()
        try:
            async with session.request(
                request.method, request.url(self.config.base_url), **kwargs
            ) as resp:
                data = await self._read_body(resp)
                response = ApiResponse(resp.status, data, dict(resp.headers))
        except (TimeoutError, aiohttp.ClientError, OSError) as e:
            error = classify_transport_error(e, request)
            logger.log_event(
                "http",
                "transport_error",
                level=logging.WARNING,
                method=request.method,
                path=request.path,
                kind=error.kind.value,
                error=str(e) or type(e).__name__,
            )
            raise error from e

        logger.log_event(
            "http",
            "response",
            level=logging.DEBUG,
            method=request.method,
            path=request.path,
            status=response.status,
        )
        return response

    @staticmethod
    async def _read_body(resp: aiohttp.ClientResponse) -> Any:
        if resp.status == 204:
            # 204 No Content has no body
            return None
        # Bodies are not guaranteed to be valid UTF-8.
        text = await resp.text(errors="replace")
        if not text:
            return None
        try:
            return json.loads(text)
        except ValueError:
            return text


__all__ = ["AuthenticatedClient", "SessionExpiredHook"]
