"""Tests for the token lifecycle manager.

Covers caching, expiry with the validity buffer, override precedence,
single-flight refresh under concurrency, error wrapping and reset.
"""

import asyncio
import logging
from datetime import UTC, datetime, timedelta

import aiohttp
import pytest

from action_auth.api.factory import ApiClients
from action_auth.auth_token.manager import TokenManager
from action_auth.auth_token.types import RefreshState, TokenSource
from action_auth.config.model import TokenSettings
from action_auth.constants import TOKEN_EXCHANGE_URL
from action_auth.errors.internal import (
    ExchangeError,
    IdentityTokenError,
    NetworkError,
    RefreshError,
)
from tests.fixtures.http_fixtures import (
    FakeClock,
    FakeResponse,
    FakeSession,
    StaticIdentityProvider,
    no_sleep,
)

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)


def _exchange_calls(session: FakeSession) -> int:
    return len(session.calls_to(TOKEN_EXCHANGE_URL))


class TestTokenManager:
    """Test suite for TokenManager."""

    @pytest.mark.asyncio
    async def test_get_token_first_call(self, token_manager, fake_session):
        """Test the first call exchanges once and returns the app token."""
        token = await token_manager.get_token()

        assert token == "mock-app-token"
        assert _exchange_calls(fake_session) == 1

    @pytest.mark.asyncio
    async def test_reuses_cached_token(self, token_manager, fake_session):
        """Test a second call inside the validity window makes no network calls."""
        token1 = await token_manager.get_token()
        token2 = await token_manager.get_token()

        assert token1 == token2 == "mock-app-token"
        assert _exchange_calls(fake_session) == 1

    @pytest.mark.asyncio
    async def test_override_token(self, fake_session, identity_provider):
        """Test override precedence issues no network calls."""
        manager = TokenManager(
            fake_session,
            TokenSettings(override_token="override-token"),
            identity_provider=identity_provider,
            sleep=no_sleep,
        )

        assert await manager.get_token() == "override-token"
        assert fake_session.calls == []
        assert identity_provider.calls == []
        assert manager.record.source == TokenSource.OVERRIDE

    @pytest.mark.asyncio
    async def test_override_from_environment(self, monkeypatch, fake_session, identity_provider):
        """Test OVERRIDE_GITHUB_TOKEN is honoured when settings come from env."""
        monkeypatch.setenv("OVERRIDE_GITHUB_TOKEN", "override-token")
        manager = TokenManager(fake_session, identity_provider=identity_provider)

        assert await manager.get_token() == "override-token"
        assert fake_session.calls == []

    @pytest.mark.asyncio
    async def test_concurrent_refresh_attempts(self, token_manager, fake_session):
        """Test five concurrent calls on a cold cache share one exchange."""
        tokens = await asyncio.gather(*(token_manager.get_token() for _ in range(5)))

        assert tokens == ["mock-app-token"] * 5
        assert _exchange_calls(fake_session) == 1
        assert token_manager.refresh_state == RefreshState.IDLE

    @pytest.mark.asyncio
    async def test_expiry_boundary(self, fake_session, identity_provider):
        """Test validity ends exactly at issue + 55min - 5min buffer."""
        clock = FakeClock(T0)
        manager = TokenManager(
            fake_session,
            TokenSettings(),
            identity_provider=identity_provider,
            clock=clock,
            sleep=no_sleep,
        )
        await manager.get_token()
        assert _exchange_calls(fake_session) == 1

        assert manager.is_token_valid(T0)
        assert manager.is_token_valid(T0 + timedelta(minutes=49, seconds=59))
        assert not manager.is_token_valid(T0 + timedelta(minutes=50))
        assert not manager.is_token_valid(T0 + timedelta(minutes=51))

        clock.advance(timedelta(minutes=49, seconds=59))
        await manager.get_token()
        assert _exchange_calls(fake_session) == 1

        clock.advance(timedelta(seconds=1))
        await manager.get_token()
        assert _exchange_calls(fake_session) == 2

    @pytest.mark.asyncio
    async def test_adoption_logs_remaining_lifetime(self, fake_session, identity_provider, caplog):
        """Test the adopted record reports its remaining lifetime."""
        clock = FakeClock(T0)
        manager = TokenManager(
            fake_session,
            TokenSettings(),
            identity_provider=identity_provider,
            clock=clock,
            sleep=no_sleep,
        )

        with caplog.at_level(logging.INFO):
            await manager.get_token()

        assert manager.record.remaining_seconds(T0) == 55 * 60
        assert "Token adopted source=exchanged expires_in=55m 0s" in caplog.text
        assert "mock-app-token" not in caplog.text

    @pytest.mark.asyncio
    async def test_refreshed_token_replaces_record(self, identity_provider):
        """Test a refresh swaps the whole record."""
        session = FakeSession(
            [FakeResponse(200, {"token": "first"}), FakeResponse(200, {"token": "second"})]
        )
        manager = TokenManager(
            session, TokenSettings(), identity_provider=identity_provider, sleep=no_sleep
        )

        assert await manager.get_token() == "first"
        before = manager.record
        assert await manager.refresh() == "second"

        assert manager.record is not before
        assert manager.record.value == "second"
        assert await manager.get_token() == "second"

    @pytest.mark.asyncio
    async def test_exchange_failure_raises_refresh_error(self, identity_provider):
        """Test exchange errors surface as RefreshError after retries."""
        session = FakeSession(
            responder=lambda call: FakeResponse(500, {"error": {"message": "exchange down"}})
        )
        manager = TokenManager(
            session, TokenSettings(), identity_provider=identity_provider, sleep=no_sleep
        )

        with pytest.raises(RefreshError, match="exchange down") as exc_info:
            await manager.get_token()

        assert isinstance(exc_info.value.__cause__, ExchangeError)
        assert len(session.calls) == 3
        assert manager.record is None
        assert manager.refresh_state == RefreshState.IDLE

    @pytest.mark.asyncio
    async def test_connection_failure_raises_refresh_error(self, identity_provider):
        """Test an unreachable exchange is retried and surfaces as a wrapped NetworkError."""
        sleeps: list[float] = []

        async def record_sleep(seconds: float) -> None:
            sleeps.append(seconds)

        def refuse(call):
            raise aiohttp.ClientConnectionError("connection refused")

        session = FakeSession(responder=refuse)
        manager = TokenManager(
            session, TokenSettings(), identity_provider=identity_provider, sleep=record_sleep
        )

        with pytest.raises(RefreshError, match="connection refused") as exc_info:
            await manager.get_token()

        cause = exc_info.value.__cause__
        assert isinstance(cause, NetworkError)
        assert isinstance(cause.__cause__, aiohttp.ClientConnectionError)
        assert len(session.calls_to(TOKEN_EXCHANGE_URL)) == 3
        assert sleeps == [5.0, 10.0]
        assert manager.record is None

    @pytest.mark.asyncio
    async def test_oidc_failure_raises_refresh_error(self, fake_session):
        """Test identity failures surface as RefreshError with the remediation hint."""
        manager = TokenManager(
            fake_session,
            TokenSettings(),
            identity_provider=StaticIdentityProvider(failures=10),
            sleep=no_sleep,
        )

        with pytest.raises(RefreshError, match="id-token: write") as exc_info:
            await manager.get_token()

        assert isinstance(exc_info.value.__cause__, IdentityTokenError)
        assert fake_session.calls == []

    @pytest.mark.asyncio
    async def test_failure_is_not_cached(self, identity_provider):
        """Test that a failed refresh does not poison the next call."""
        session = FakeSession(
            [FakeResponse(500), FakeResponse(500), FakeResponse(500)],
            responder=lambda call: FakeResponse(200, {"token": "recovered"}),
        )
        manager = TokenManager(
            session, TokenSettings(), identity_provider=identity_provider, sleep=no_sleep
        )

        with pytest.raises(RefreshError):
            await manager.get_token()

        assert await manager.get_token() == "recovered"

    @pytest.mark.asyncio
    async def test_reset_clears_cache(self, token_manager, fake_session):
        """Test reset forces the next call to exchange again."""
        await token_manager.get_token()
        token_manager.reset()

        assert token_manager.record is None
        assert not token_manager.is_token_valid()
        await token_manager.get_token()
        assert _exchange_calls(fake_session) == 2

    @pytest.mark.asyncio
    async def test_create_clients(self, token_manager, fake_session):
        """Test clients are bound to the current token."""
        clients = await token_manager.create_clients()

        assert isinstance(clients, ApiClients)
        assert clients.rest.headers["Authorization"] == "Bearer mock-app-token"
        assert clients.graphql.headers["Authorization"] == "Bearer mock-app-token"
        assert _exchange_calls(fake_session) == 1

    def test_requires_session(self):
        """Test construction rejects a missing session."""
        with pytest.raises(TypeError):
            TokenManager(None)  # type: ignore[arg-type]
