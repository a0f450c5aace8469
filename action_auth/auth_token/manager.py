"""Token lifecycle manager."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta

import aiohttp

from ..api.factory import ApiClientFactory, ApiClients
from ..config.model import TokenSettings
from ..utils.helpers import format_duration
from .exchange import CredentialExchange
from .identity import ActionsIdentityProvider, IdentityProvider
from .refresh_coordinator import RefreshCoordinator
from .types import RefreshState, TokenRecord


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TokenManager:
    """Holds the current access token and keeps it fresh.

    One instance is created per process by
    :class:`~action_auth.application_context.ApplicationContext` and handed
    to every consumer; nothing here is a module-level global.

    A cached token is served while ``now < expires_at - buffer``. Otherwise
    the refresh coordinator runs (or joins) a credential exchange and the
    resulting record replaces the cached one in a single assignment.
    """

    def __init__(
        self,
        http_session: aiohttp.ClientSession,
        settings: TokenSettings | None = None,
        *,
        identity_provider: IdentityProvider | None = None,
        clock: Callable[[], datetime] = _utcnow,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the token manager.

        Args:
            http_session: HTTP session shared by the exchange and the clients.
            settings: Token settings; read from the environment when omitted.
            identity_provider: Identity token source; defaults to the
                GitHub Actions OIDC issuer.
            clock: Returns the current UTC time.
            sleep: Backoff sleep used by the exchange retries.
        """
        if http_session is None:
            raise TypeError("http_session cannot be None")
        self.http_session = http_session
        self.settings = settings or TokenSettings.from_env()
        self._clock = clock
        self._buffer = timedelta(seconds=self.settings.expiry_buffer_seconds)
        self._record: TokenRecord | None = None
        # Composed components
        self.exchange = CredentialExchange(
            http_session,
            self.settings,
            identity_provider or ActionsIdentityProvider(http_session),
            clock=clock,
            sleep=sleep,
        )
        self.coordinator = RefreshCoordinator(self.exchange.obtain, self._apply)

    @property
    def record(self) -> TokenRecord | None:
        return self._record

    @property
    def refresh_state(self) -> RefreshState:
        return self.coordinator.state

    def is_token_valid(self, now: datetime | None = None) -> bool:
        """Return True if the cached token may still be used at ``now``."""
        record = self._record
        if record is None:
            return False
        return record.is_valid(now or self._clock(), self._buffer)

    async def get_token(self) -> str:
        """Return a valid access token, refreshing when needed.

        Raises:
            RefreshError: If a refresh was needed and failed.
        """
        record = self._record
        if record is not None and self.is_token_valid():
            logging.debug("💾 Using cached GitHub token")
            return record.value
        return await self.coordinator.refresh()

    async def refresh(self) -> str:
        """Force a refresh, joining one already in flight.

        Raises:
            RefreshError: If the refresh failed.
        """
        return await self.coordinator.refresh()

    async def create_clients(self) -> ApiClients:
        """Return REST and GraphQL clients bound to a current token."""
        token = await self.get_token()
        factory = ApiClientFactory(self.http_session, self.settings, self)
        return factory.create(token)

    def reset(self) -> None:
        """Clear the cached token and refresh state. Intended for tests.

        Calling this while a refresh is in flight is unsupported: the running
        exchange is not cancelled and may still store its record.
        """
        self._record = None
        self.coordinator.reset()

    def _apply(self, record: TokenRecord) -> None:
        self._record = record
        remaining = format_duration(record.remaining_seconds(self._clock()))
        logging.info(
            f"🔐 Token adopted source={record.source.value} expires_in={remaining}"
        )
