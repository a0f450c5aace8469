"""API clients that stay authenticated across token rotation."""

from .factory import ApiClientFactory, ApiClients
from .graphql import GraphQLClient
from .interceptor import ReauthInterceptor, TokenRefresher
from .rest import ApiRequest, ApiResponse, RestClient

__all__ = [
    "ApiClientFactory",
    "ApiClients",
    "ApiRequest",
    "ApiResponse",
    "GraphQLClient",
    "ReauthInterceptor",
    "RestClient",
    "TokenRefresher",
]
