"""Session tokens: provider contract and single-flight renewal."""

from .refresh_coordinator import RefreshCoordinator, RefreshTicket
from .session import CallbackSessionProvider, SessionProvider, StaticSessionProvider
from .types import RefreshRole

__all__ = [
    "CallbackSessionProvider",
    "RefreshCoordinator",
    "RefreshRole",
    "RefreshTicket",
    "SessionProvider",
    "StaticSessionProvider",
]
