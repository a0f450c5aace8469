"""Minimal asynchronous GraphQL client."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import aiohttp

from ..errors.internal import GraphQLResponseError
from .rest import ApiRequest, HttpTransport

if TYPE_CHECKING:
    from .interceptor import ReauthInterceptor


class GraphQLClient(HttpTransport):
    """Posts GraphQL documents to a single endpoint."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        url: str,
        headers: dict[str, str],
        interceptor: ReauthInterceptor,
    ) -> None:
        super().__init__(session, headers, interceptor)
        self.url = url

    async def query(
        self, query: str, variables: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Run a query or mutation and return its ``data`` member.

        Raises:
            HttpStatusError: Non-success status (after one reauth retry for 401/403).
            GraphQLResponseError: The response listed errors.
            RefreshError: Reauthentication was needed and failed.
        """
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables
        request = ApiRequest("POST", self.url, headers=dict(self.headers), json=payload)
        response = await self.execute(request)
        body = response.data if isinstance(response.data, dict) else {}
        errors = body.get("errors")
        if errors:
            raise GraphQLResponseError(list(errors), body=body)
        return body.get("data") or {}

    __call__ = query
