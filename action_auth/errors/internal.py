"""Centralized internal error hierarchy.

These exceptions provide semantic categories for the credential lifecycle and
for the API clients built on top of it. Raw aiohttp / JSON errors never leave
a network boundary unwrapped; they are chained as the cause instead.

Classes:
  InternalError            – Base for all internal errors.
  NetworkError             – Transient network/IO issues.
  ParsingError             – Response parsing / schema issues.
  CredentialError          – Base for credential acquisition failures.
  IdentityTokenError       – Identity provider unreachable or denied.
  ExchangeError            – Token exchange endpoint rejected the request.
  RefreshError             – A token refresh failed after retries.
  HttpStatusError          – Non-success response from a produced API client.
  AuthRetryExhaustedError  – Still 401/403 after one post-refresh retry.
  GraphQLResponseError     – GraphQL response carried an ``errors`` member.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

OIDC_REMEDIATION = (
    "Could not fetch an OIDC token. Did you remember to add "
    "`id-token: write` to your workflow permissions?"
)


class InternalError(Exception):
    """Base class for all internal application errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.

    Args:
        message: Descriptive error message.
        data: Optional mapping of additional context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class NetworkError(InternalError):
    """Exception raised for network or transport layer errors."""


class ParsingError(InternalError):
    """Exception raised for response parsing or schema validation errors."""


class CredentialError(InternalError):
    """Base class for failures while acquiring an access token."""


class IdentityTokenError(CredentialError):
    """Raised when the identity provider cannot issue an identity token.

    The message always carries the operator remediation so it can be
    surfaced verbatim by the entry point.
    """

    def __init__(
        self,
        message: str = OIDC_REMEDIATION,
        *,
        data: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message, data=data)


class ExchangeError(CredentialError):
    """Raised when the token exchange endpoint fails or omits the token.

    Args:
        message: Error message parsed from the response body, or a generic one.
        status: HTTP status code of the exchange response, if any.
    """

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message, data={"status": status})
        self.status = status


class RefreshError(CredentialError):
    """Raised by the token manager when a refresh did not produce a token."""


class HttpStatusError(InternalError):
    """Non-success HTTP response returned by a REST or GraphQL client.

    Args:
        status: HTTP status code.
        message: Human readable description.
        body: Decoded response body (JSON object, text, or None).
    """

    def __init__(self, status: int, message: str, *, body: Any = None) -> None:
        super().__init__(message, data={"status": status})
        self.status = status
        self.body = body


class AuthRetryExhaustedError(HttpStatusError):
    """Raised when a request is still unauthorized after reauthentication."""


class GraphQLResponseError(HttpStatusError):
    """Raised when a GraphQL response reports errors alongside HTTP 200."""

    def __init__(self, errors: list[Any], *, body: Any = None) -> None:
        messages = "; ".join(
            str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors
        )
        super().__init__(200, f"GraphQL request failed: {messages}", body=body)
        self.errors = errors


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
    "OIDC_REMEDIATION",
]
