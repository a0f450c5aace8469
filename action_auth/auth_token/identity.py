"""Identity token acquisition from the CI runner's OIDC issuer."""

from __future__ import annotations

import logging
import os
from typing import Protocol

import aiohttp

from ..constants import ID_TOKEN_REQUEST_TOKEN_ENV, ID_TOKEN_REQUEST_URL_ENV
from ..errors.internal import IdentityTokenError, NetworkError, ParsingError
from ..utils.helpers import append_query_param


class IdentityProvider(Protocol):
    """Protocol for anything able to issue an audience-scoped identity token."""

    async def get_id_token(self, audience: str) -> str:
        """Return a signed identity token for ``audience``."""
        ...


class ActionsIdentityProvider:
    """Requests identity tokens from the GitHub Actions OIDC endpoint.

    The runner exposes the request URL and a request token only to jobs that
    were granted ``id-token: write``; their absence is reported the same way
    as a denied request.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        request_url: str | None = None,
        request_token: str | None = None,
    ) -> None:
        self._session = session
        self._request_url = request_url or os.environ.get(ID_TOKEN_REQUEST_URL_ENV)
        self._request_token = request_token or os.environ.get(
            ID_TOKEN_REQUEST_TOKEN_ENV
        )

    async def get_id_token(self, audience: str) -> str:
        """Fetch an identity token for ``audience``.

        Raises:
            IdentityTokenError: If the runner environment is missing the OIDC
                request variables, the issuer rejects the request, or the
                response carries no token.
            NetworkError: Transport failure or timeout.
            ParsingError: The response body is not JSON.
        """
        if not self._request_url or not self._request_token:
            raise IdentityTokenError(
                data={"reason": f"{ID_TOKEN_REQUEST_URL_ENV} / {ID_TOKEN_REQUEST_TOKEN_ENV} not set"}
            )
        url = append_query_param(self._request_url, "audience", audience)
        headers = {
            "Authorization": f"Bearer {self._request_token}",
            "Accept": "application/json",
        }
        try:
            async with self._session.get(url, headers=headers) as resp:
                logging.debug(f"🪪 OIDC token request status={resp.status}")
                if resp.status < 200 or resp.status >= 300:
                    raise IdentityTokenError(data={"status": resp.status})
                payload = await resp.json(content_type=None)
        except ValueError as e:
            raise ParsingError(f"OIDC token response is not JSON: {e}") from e
        except TimeoutError as e:
            raise NetworkError("OIDC token request timeout") from e
        except aiohttp.ClientError as e:
            raise NetworkError(f"Network error during OIDC token request: {e}") from e
        value = payload.get("value") if isinstance(payload, dict) else None
        if not isinstance(value, str) or not value:
            raise IdentityTokenError(data={"reason": "response missing 'value'"})
        return value
