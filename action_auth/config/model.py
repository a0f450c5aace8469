from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..constants import (
    DEFAULT_GITHUB_API_URL,
    GITHUB_API_URL_ENV,
    GITHUB_GRAPHQL_URL_ENV,
    OIDC_AUDIENCE,
    OVERRIDE_TOKEN_ENV,
    OVERRIDE_TOKEN_LIFETIME_SECONDS,
    TOKEN_EXCHANGE_URL,
    TOKEN_EXPIRY_BUFFER_SECONDS,
    TOKEN_LIFETIME_SECONDS,
)
from ..utils.retry import DEFAULT_RETRY_POLICY, RetryPolicy


class TokenSettings(BaseModel):
    """Settings for the token lifecycle manager and the clients it produces.

    Attributes:
        override_token: Operator-supplied token; bypasses the exchange when set.
        audience: Audience requested from the identity provider.
        exchange_url: Endpoint trading an identity token for an app token.
        api_url: Base URL for the REST client.
        graphql_url: GraphQL endpoint; derived from ``api_url`` when omitted.
        token_lifetime_seconds: Lifetime assigned to exchanged tokens.
        expiry_buffer_seconds: Margin subtracted from expiry when testing validity.
        override_lifetime_seconds: Synthetic lifetime for override tokens.
        retry: Backoff policy for the identity and exchange steps.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    override_token: str | None = None
    audience: str = OIDC_AUDIENCE
    exchange_url: str = TOKEN_EXCHANGE_URL
    api_url: str = DEFAULT_GITHUB_API_URL
    graphql_url: str | None = None
    token_lifetime_seconds: int = Field(default=TOKEN_LIFETIME_SECONDS, gt=0)
    expiry_buffer_seconds: int = Field(default=TOKEN_EXPIRY_BUFFER_SECONDS, ge=0)
    override_lifetime_seconds: int = Field(
        default=OVERRIDE_TOKEN_LIFETIME_SECONDS, gt=0
    )
    retry: RetryPolicy = DEFAULT_RETRY_POLICY

    @field_validator("override_token", mode="before")
    @classmethod
    def empty_override_is_unset(cls, v: object) -> object:
        """Treat an empty override as not configured."""
        if v == "":
            return None
        return v

    @field_validator("api_url", "graphql_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        return v.rstrip("/") if v else v

    @model_validator(mode="after")
    def derive_graphql_url(self) -> TokenSettings:
        if not self.graphql_url:
            self.graphql_url = f"{self.api_url}/graphql"
        return self

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, **overrides: object
    ) -> TokenSettings:
        """Build settings from the process environment.

        Args:
            environ: Mapping to read instead of ``os.environ``.
            **overrides: Explicit field values that win over the environment.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {"override_token": env.get(OVERRIDE_TOKEN_ENV)}
        if env.get(GITHUB_API_URL_ENV):
            values["api_url"] = env[GITHUB_API_URL_ENV]
        if env.get(GITHUB_GRAPHQL_URL_ENV):
            values["graphql_url"] = env[GITHUB_GRAPHQL_URL_ENV]
        values.update(overrides)
        return cls(**values)

    @property
    def has_override(self) -> bool:
        return self.override_token is not None
