"""Request interceptor that reauthenticates once on 401/403."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Protocol, TypeVar

from ..constants import REAUTH_STATUS_CODES
from ..errors.internal import AuthRetryExhaustedError, HttpStatusError
from .rest import ApiRequest, bearer

T = TypeVar("T")


class TokenRefresher(Protocol):
    """Anything able to produce a current token, joining an in-flight refresh."""

    async def refresh(self) -> str:
        ...


class ReauthInterceptor:
    """Wraps request execution with a single refresh-and-retry on auth errors.

    ``execute`` runs ``send(request)``. If that fails with HTTP 401 or 403,
    a current token is obtained from the refresher, the request's
    ``Authorization`` header is replaced, and the request is sent exactly
    once more. A second 401/403 raises :class:`AuthRetryExhaustedError`;
    any other failure propagates unchanged. ``on_token`` is called with the
    refreshed token so the caller can adopt it for later requests.

    Args:
        refresher: Token source shared with the token manager.
        label: Client name used in log messages.
    """

    def __init__(self, refresher: TokenRefresher, label: str = "API") -> None:
        self._refresher = refresher
        self.label = label

    async def execute(
        self,
        send: Callable[[ApiRequest], Awaitable[T]],
        request: ApiRequest,
        *,
        on_token: Callable[[str], None] | None = None,
    ) -> T:
        try:
            return await send(request)
        except HttpStatusError as e:
            if e.status not in REAUTH_STATUS_CODES:
                raise
            logging.warning(
                f"🔐 {self.label} authentication error ({e.status}), refreshing token..."
            )

        token = await self._refresher.refresh()
        request.headers["Authorization"] = bearer(token)
        if on_token is not None:
            on_token(token)
        try:
            return await send(request)
        except HttpStatusError as e:
            if e.status not in REAUTH_STATUS_CODES:
                raise
            logging.error(
                f"❌ {self.label} request still unauthorized ({e.status}) after token refresh"
            )
            raise AuthRetryExhaustedError(e.status, str(e), body=e.body) from e
