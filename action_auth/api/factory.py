"""Builds REST and GraphQL clients sharing one reauthentication hook."""

from __future__ import annotations

from dataclasses import dataclass

import aiohttp

from ..config.model import TokenSettings
from .graphql import GraphQLClient
from .interceptor import ReauthInterceptor, TokenRefresher
from .rest import RestClient, bearer


@dataclass
class ApiClients:
    """REST and GraphQL clients bound to the same token source."""

    rest: RestClient
    graphql: GraphQLClient


class ApiClientFactory:
    """Creates authenticated clients.

    Args:
        session: HTTP session the clients issue requests on.
        settings: Provides the REST and GraphQL endpoints.
        refresher: Token source used when a request comes back 401/403.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        settings: TokenSettings,
        refresher: TokenRefresher,
    ) -> None:
        self._session = session
        self._settings = settings
        self._refresher = refresher

    def create(self, token: str) -> ApiClients:
        headers = {
            "Authorization": bearer(token),
            "Accept": "application/vnd.github+json",
        }
        rest = RestClient(
            self._session,
            self._settings.api_url,
            headers,
            ReauthInterceptor(self._refresher, label="REST"),
        )
        graphql = GraphQLClient(
            self._session,
            self._settings.graphql_url or f"{self._settings.api_url}/graphql",
            {**headers, "Accept": "application/json"},
            ReauthInterceptor(self._refresher, label="GraphQL"),
        )
        return ApiClients(rest=rest, graphql=graphql)
