"""Single-flight coordination of token renewal."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from ..errors.internal import RenewalFailedError
from ..logs.logger import logger
from .types import RefreshRole


@dataclass
class RefreshTicket:
    """Result of RefreshCoordinator.acquire_or_join.

    Attributes:
        role: LEADER ("proceed with renewal") or WAITER ("wait for result").
        cycle: Refresh cycle the ticket belongs to.
    """

    role: RefreshRole
    cycle: int
    _future: asyncio.Future[str] | None = field(default=None, repr=False)

    @property
    def is_leader(self) -> bool:
        return self.role is RefreshRole.LEADER

    async def wait(self) -> str:
        """Suspend until the cycle resolves.

        Returns:
            The renewed token.

        Raises:
            RenewalFailedError: If the in-flight renewal failed.
            RuntimeError: If called on a leader ticket.
        """
        if self._future is None:
            raise RuntimeError("Leader tickets perform the renewal instead of waiting")
        return await self._future


class RefreshCoordinator:
    """Ensures at most one token renewal is in flight per client.

    The first caller to hit an authentication failure becomes the leader of
    a refresh cycle and runs the renewal; callers arriving while the cycle is
    open are queued as waiters and all receive the same outcome. The queue is
    drained exactly once per cycle, either every waiter gets the new token or
    every waiter gets the renewal error.

    State is only touched from the owning event loop without suspension
    between check and update, so no lock is needed. This class is not thread
    safe: a threaded variant must guard ``_in_progress`` and ``_waiters``
    together under one mutex.
    """

    def __init__(self) -> None:
        self._in_progress = False
        self._waiters: list[asyncio.Future[str]] = []
        self._cycles = 0

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    @property
    def waiter_count(self) -> int:
        return len(self._waiters)

    @property
    def cycles(self) -> int:
        """Number of renewals started since creation."""
        return self._cycles

    def acquire_or_join(self) -> RefreshTicket:
        """Become the renewal leader, or join the in-flight cycle as a waiter."""
        if self._in_progress:
            future: asyncio.Future[str] = asyncio.get_running_loop().create_future()
            self._waiters.append(future)
            logger.log_event(
                "refresh",
                "joined",
                level=logging.DEBUG,
                cycle=self._cycles,
                waiters=len(self._waiters),
            )
            return RefreshTicket(RefreshRole.WAITER, self._cycles, future)

        self._in_progress = True
        self._cycles += 1
        logger.log_event("refresh", "start", cycle=self._cycles)
        return RefreshTicket(RefreshRole.LEADER, self._cycles)

    async def run_renewal(self, renew: Callable[[], Awaitable[str]]) -> str:
        """Run the leader's renewal and fan its outcome out to every waiter.

        Args:
            renew: Coroutine factory producing the new token.

        Returns:
            The new token.

        Raises:
            RuntimeError: If no cycle is open (caller does not hold a leader ticket).
            Exception: Whatever ``renew`` raised, after rejecting the waiters.
        """
        if not self._in_progress:
            raise RuntimeError("run_renewal called without an open refresh cycle")
        try:
            token = await renew()
        except Exception as e:
            self.reject(e)
            raise
        else:
            self.resolve(token)
            return token
        finally:
            self.release()

    def resolve(self, token: str) -> int:
        """Hand ``token`` to every queued waiter. Returns the number resolved."""
        waiters = self._drain()
        logger.log_event("refresh", "success", cycle=self._cycles, waiters=len(waiters))
        resolved = 0
        for future in waiters:
            # A cancelled future means the caller abandoned the request.
            if not future.done():
                future.set_result(token)
                resolved += 1
        return resolved

    def reject(self, error: BaseException) -> int:
        """Hand ``error`` to every queued waiter. Returns the number rejected."""
        waiters = self._drain()
        logger.log_event(
            "refresh",
            "failed",
            level=logging.ERROR,
            cycle=self._cycles,
            waiters=len(waiters),
            error=str(error),
        )
        rejected = 0
        for future in waiters:
            if not future.done():
                future.set_exception(error)
                rejected += 1
        return rejected

    def release(self) -> None:
        """Close the current cycle. Always the last step of a renewal.

        Waiters still queued at this point (the leader was cancelled before
        producing an outcome) are rejected so that nobody waits forever.
        """
        if self._waiters:
            logger.log_event(
                "refresh",
                "abandoned",
                level=logging.WARNING,
                cycle=self._cycles,
                waiters=len(self._waiters),
            )
            self.reject(RenewalFailedError("Token renewal was abandoned before completing"))
        self._in_progress = False
        logger.log_event("refresh", "released", level=logging.DEBUG, cycle=self._cycles)

    def _drain(self) -> list[asyncio.Future[str]]:
        waiters, self._waiters = self._waiters, []
        return waiters


__all__ = ["RefreshCoordinator", "RefreshTicket"]
