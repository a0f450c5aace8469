"""Token lifecycle: identity, exchange, refresh coordination and caching."""

from .exchange import CredentialExchange
from .identity import ActionsIdentityProvider, IdentityProvider
from .manager import TokenManager
from .refresh_coordinator import RefreshCoordinator
from .types import RefreshState, TokenRecord, TokenSource

__all__ = [
    "ActionsIdentityProvider",
    "CredentialExchange",
    "IdentityProvider",
    "RefreshCoordinator",
    "RefreshState",
    "TokenManager",
    "TokenRecord",
    "TokenSource",
]
