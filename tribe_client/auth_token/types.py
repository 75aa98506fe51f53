"""Shared types for the auth_token package."""

from enum import Enum


class RefreshRole(Enum):
    """Role handed out by RefreshCoordinator.acquire_or_join.

    Attributes:
        LEADER: Caller must perform the renewal for this cycle.
        WAITER: A renewal is already in flight; caller waits for its result.
    """

    LEADER = "leader"
    WAITER = "waiter"
