"""Session provider contract and bundled adapters.

The identity provider (sign-in, token issuance) lives outside this package.
The client only needs two suspending operations from it: a lookup of the
current token, which may legitimately come back empty, and an explicit
renewal that must either yield a new token or raise.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Protocol, runtime_checkable

from ..errors.internal import SessionError


@runtime_checkable
class SessionProvider(Protocol):
    """Source of bearer tokens for the authenticated client."""

    async def get_current_token(self) -> str | None:
        """Return the current token, or None when no session is active."""
        ...

    async def renew_token(self) -> str:
        """Obtain a fresh token, bypassing any cache. Raises on failure."""
        ...


class CallbackSessionProvider:
    """Adapt two async callables to the SessionProvider protocol.

    Useful for wiring an identity SDK session object without subclassing::

        provider = CallbackSessionProvider(
            get_token=session.get_token,
            renew_token=lambda: session.get_token(skip_cache=True),
        )
    """

    def __init__(
        self,
        get_token: Callable[[], Awaitable[str | None]],
        renew_token: Callable[[], Awaitable[str | None]],
    ) -> None:
        self._get_token = get_token
        self._renew_token = renew_token

    async def get_current_token(self) -> str | None:
        return await self._get_token() or None

    async def renew_token(self) -> str:
        token = await self._renew_token()
        if not token:
            raise SessionError("Session provider returned an empty token on renewal")
        return token


class StaticSessionProvider:
    """Provider holding a single token, e.g. for scripts and service accounts.

    Renewal is delegated to ``renewer`` when given; the renewed token then
    replaces the stored one. Without a renewer the session cannot be renewed.
    """

    def __init__(
        self,
        token: str | None,
        renewer: Callable[[], Awaitable[str]] | None = None,
    ) -> None:
        self._token = token or None
        self._renewer = renewer

    @property
    def token(self) -> str | None:
        return self._token

    async def get_current_token(self) -> str | None:
        return self._token

    async def renew_token(self) -> str:
        if self._renewer is None:
            raise SessionError("Static session cannot be renewed")
        token = await self._renewer()
        if not token:
            raise SessionError("Renewer returned an empty token")
        self._token = token
        return token


__all__ = ["SessionProvider", "CallbackSessionProvider", "StaticSessionProvider"]
