"""
Configuration constants for the action token broker

This module contains the tunables used by the token lifecycle manager.
Numeric constants can be overridden by setting an environment variable
with the same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Attempts to parse the environment variable as an integer. If the variable
    is not set or cannot be parsed, prints a warning and returns the default value.

    Args:
        name: The name of the environment variable to read.
        default: The default integer value to return if parsing fails.

    Returns:
        The parsed integer value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Attempts to parse the environment variable as a float. If the variable
    is not set or cannot be parsed, prints a warning and returns the default value.

    Args:
        name: The name of the environment variable to read.
        default: The default float value to return if parsing fails.

    Returns:
        The parsed float value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


# Endpoints
OIDC_AUDIENCE = "claude-code-github-action"
TOKEN_EXCHANGE_URL = "https://api.anthropic.com/api/github/github-app-token-exchange"
DEFAULT_GITHUB_API_URL = "https://api.github.com"

# Environment variable names
OVERRIDE_TOKEN_ENV = "OVERRIDE_GITHUB_TOKEN"
GITHUB_API_URL_ENV = "GITHUB_API_URL"
GITHUB_GRAPHQL_URL_ENV = "GITHUB_GRAPHQL_URL"
GITHUB_OUTPUT_ENV = "GITHUB_OUTPUT"
ID_TOKEN_REQUEST_URL_ENV = "ACTIONS_ID_TOKEN_REQUEST_URL"
ID_TOKEN_REQUEST_TOKEN_ENV = "ACTIONS_ID_TOKEN_REQUEST_TOKEN"

# Token lifetime & validity buffer
TOKEN_LIFETIME_SECONDS = _get_env_int(
    "TOKEN_LIFETIME_SECONDS", 55 * 60
)  # Refresh before the provider's 1h expiry
TOKEN_EXPIRY_BUFFER_SECONDS = _get_env_int(
    "TOKEN_EXPIRY_BUFFER_SECONDS", 5 * 60
)  # Subtracted from expires_at when testing validity
OVERRIDE_TOKEN_LIFETIME_SECONDS = 365 * 24 * 60 * 60  # Operator-supplied tokens

# Retry policy for the credential exchange steps
TOKEN_RETRY_MAX_ATTEMPTS = _get_env_int("TOKEN_RETRY_MAX_ATTEMPTS", 3)
TOKEN_RETRY_INITIAL_DELAY = _get_env_float(
    "TOKEN_RETRY_INITIAL_DELAY", 5.0
)  # seconds
TOKEN_RETRY_MAX_DELAY = _get_env_float("TOKEN_RETRY_MAX_DELAY", 20.0)  # seconds
TOKEN_RETRY_BACKOFF_FACTOR = _get_env_float("TOKEN_RETRY_BACKOFF_FACTOR", 2.0)

# Status codes that trigger a token refresh on the produced clients
REAUTH_STATUS_CODES = frozenset({401, 403})
