"""Central application context for shared async resources."""

from __future__ import annotations

import asyncio
import logging

import aiohttp

from .api.factory import ApiClients
from .auth_token.manager import TokenManager
from .config.model import TokenSettings


class ApplicationContext:
    """Holds the HTTP session and the process-wide token manager.

    The context is created once at startup and passed to consumers; every
    consumer therefore shares the same :class:`TokenManager` and with it the
    same cached token and single-flight refresh state.
    """

    session: aiohttp.ClientSession | None
    token_manager: TokenManager | None
    _lock: asyncio.Lock

    def __init__(self) -> None:
        self.session = None
        self.token_manager = None
        self._lock = asyncio.Lock()

    # ------------------------- Construction ------------------------- #
    @classmethod
    async def create(
        cls,
        settings: TokenSettings | None = None,
        **manager_kwargs: object,
    ) -> ApplicationContext:
        """Create and initialize a new ApplicationContext instance.

        Args:
            settings: Token settings; read from the environment when omitted.
            **manager_kwargs: Forwarded to :class:`TokenManager`.

        Returns:
            A fully initialized ApplicationContext instance.
        """
        ctx = cls()
        logging.debug("🧪 Creating application context")
        ctx.session = aiohttp.ClientSession()
        logging.debug("🔗 HTTP session created")
        try:
            ctx.token_manager = TokenManager(
                ctx.session, settings or TokenSettings.from_env(), **manager_kwargs
            )
        except Exception:
            await ctx.session.close()
            raise
        return ctx

    async def __aenter__(self) -> ApplicationContext:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.shutdown()

    # ---------------------------- Access ---------------------------- #
    def _require_manager(self) -> TokenManager:
        if self.token_manager is None:
            raise RuntimeError("ApplicationContext not created; use ApplicationContext.create()")
        return self.token_manager

    async def get_token(self) -> str:
        return await self._require_manager().get_token()

    async def create_clients(self) -> ApiClients:
        return await self._require_manager().create_clients()

    # --------------------------- Lifecycle -------------------------- #
    async def shutdown(self) -> None:
        """Close the HTTP session. Safe to call more than once."""
        async with self._lock:
            await self._close_http_session()
            logging.debug("✅ Application context shutdown complete")

    async def _close_http_session(self) -> None:
        if self.session and not self.session.closed:
            await self.session.close()
            logging.debug("🔌 HTTP session closed")
        self.session = None
