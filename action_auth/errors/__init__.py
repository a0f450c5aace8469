"""Error hierarchy and handling helpers."""

from .internal import (  # noqa: F401
    AuthRetryExhaustedError,
    CredentialError,
    ExchangeError,
    GraphQLResponseError,
    HttpStatusError,
    IdentityTokenError,
    InternalError,
    NetworkError,
    ParsingError,
    RefreshError,
)

__all__ = [
    "InternalError",
    "NetworkError",
    "ParsingError",
    "CredentialError",
    "IdentityTokenError",
    "ExchangeError",
    "RefreshError",
    "HttpStatusError",
    "AuthRetryExhaustedError",
    "GraphQLResponseError",
]
