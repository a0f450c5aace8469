"""Shared types for the auth_token package."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum


class TokenSource(Enum):
    """Where the current access token came from.

    Attributes:
        OVERRIDE: Operator-supplied token, no exchange performed.
        EXCHANGED: Obtained by trading an identity token at the exchange endpoint.
    """

    OVERRIDE = "override"
    EXCHANGED = "exchanged"


class RefreshState(Enum):
    """Coordinator state.

    Attributes:
        IDLE: No exchange in flight.
        REFRESHING: One shared exchange is in flight.
    """

    IDLE = "idle"
    REFRESHING = "refreshing"


@dataclass(frozen=True)
class TokenRecord:
    """An access token and its validity window.

    Records are immutable; a refresh replaces the whole record.

    Attributes:
        value: The bearer token.
        issued_at: UTC time the token was adopted.
        expires_at: UTC time after which the token must not be used.
        source: How the token was obtained.
    """

    value: str = field(repr=False)
    issued_at: datetime
    expires_at: datetime
    source: TokenSource = TokenSource.EXCHANGED

    def is_valid(self, now: datetime, buffer: timedelta) -> bool:
        """Return True when ``now`` is strictly before ``expires_at - buffer``."""
        return now < self.expires_at - buffer

    def remaining_seconds(self, now: datetime) -> float:
        return (self.expires_at - now).total_seconds()
