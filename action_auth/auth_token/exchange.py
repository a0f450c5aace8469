"""Credential exchange: identity token in, application access token out."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import aiohttp

from ..config.model import TokenSettings
from ..errors.internal import ExchangeError, IdentityTokenError, NetworkError
from ..utils.helpers import format_duration
from ..utils.retry import retry_async
from .identity import IdentityProvider
from .types import TokenRecord, TokenSource

_TOKEN_FIELDS = ("token", "app_token")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CredentialExchange:
    """Produces a fresh :class:`TokenRecord`.

    Resolution order:

    1. A configured override token is adopted as-is with a long synthetic
       expiry and no network traffic.
    2. Otherwise an identity token is requested for the configured audience
       and traded at the exchange endpoint for an application token.

    The identity request and the exchange call are retried independently.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        settings: TokenSettings,
        identity_provider: IdentityProvider,
        *,
        clock: Callable[[], datetime] = _utcnow,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._session = session
        self._settings = settings
        self._identity_provider = identity_provider
        self._clock = clock
        self._sleep = sleep

    async def obtain(self) -> TokenRecord:
        """Return a new token record.

        Raises:
            IdentityTokenError: Identity token still unavailable after retries.
            ExchangeError: Exchange still failing after retries.
        """
        if self._settings.has_override:
            logging.info("🔑 Using provided GITHUB_TOKEN (no expiry)")
            now = self._clock()
            return TokenRecord(
                value=self._settings.override_token,
                issued_at=now,
                expires_at=now
                + timedelta(seconds=self._settings.override_lifetime_seconds),
                source=TokenSource.OVERRIDE,
            )

        id_token = await retry_async(
            self._get_id_token, self._settings.retry, sleep=self._sleep
        )
        logging.info("🪪 OIDC token obtained")

        app_token = await retry_async(
            lambda: self._exchange(id_token), self._settings.retry, sleep=self._sleep
        )
        now = self._clock()
        lifetime = self._settings.token_lifetime_seconds
        logging.info(f"✅ App token obtained (refresh in {format_duration(lifetime)})")
        return TokenRecord(
            value=app_token,
            issued_at=now,
            expires_at=now + timedelta(seconds=lifetime),
            source=TokenSource.EXCHANGED,
        )

    async def _get_id_token(self) -> str:
        try:
            return await self._identity_provider.get_id_token(self._settings.audience)
        except Exception as e:
            logging.error(f"❌ Failed to get OIDC token: {type(e).__name__}: {e}")
            data = dict(getattr(e, "data", None) or {})
            raise IdentityTokenError(data=data) from e

    async def _exchange(self, id_token: str) -> str:
        headers = {"Authorization": f"Bearer {id_token}"}
        url = self._settings.exchange_url
        try:
            async with self._session.post(url, headers=headers) as resp:
                payload = await self._read_json(resp)
                status = resp.status
                if status < 200 or status >= 300:
                    message = self._error_message(payload)
                    logging.error(
                        f"❌ App token exchange failed: {status} {resp.reason or ''} - {message}"
                    )
                    raise ExchangeError(message, status=status)
        except TimeoutError as e:
            raise NetworkError("Token exchange timeout", data={"url": url}) from e
        except aiohttp.ClientError as e:
            raise NetworkError(
                f"Network error during token exchange: {e}", data={"url": url}
            ) from e

        app_token = self._token_from(payload)
        if not app_token:
            raise ExchangeError("App token not found in response", status=status)
        return app_token

    @staticmethod
    async def _read_json(resp: aiohttp.ClientResponse) -> Any:
        try:
            return await resp.json(content_type=None)
        except ValueError:
            # Includes json.JSONDecodeError; an unparsable body carries no fields.
            return None

    @staticmethod
    def _error_message(payload: Any) -> str:
        if isinstance(payload, dict):
            error = payload.get("error")
            if isinstance(error, dict):
                message = error.get("message")
                if isinstance(message, str) and message:
                    return message
        return "Unknown error"

    @staticmethod
    def _token_from(payload: Any) -> str | None:
        if not isinstance(payload, dict):
            return None
        for name in _TOKEN_FIELDS:
            value = payload.get(name)
            if isinstance(value, str) and value:
                return value
        return None
