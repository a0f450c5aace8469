from __future__ import annotations

import logging

from ..logging_config import log_structured_error
from .internal import (
    CredentialError,
    ExchangeError,
    HttpStatusError,
    IdentityTokenError,
    InternalError,
    NetworkError,
    ParsingError,
)


def categorize_error(error: BaseException) -> str:
    """Map an exception to the category label used in structured logs."""
    if isinstance(error, NetworkError | OSError | ConnectionError | TimeoutError):
        return "network"
    if isinstance(error, IdentityTokenError):
        return "oidc"
    if isinstance(error, ExchangeError):
        return "exchange"
    if isinstance(error, CredentialError):
        return "auth"
    if isinstance(error, HttpStatusError):
        return "http"
    if isinstance(error, ParsingError):
        return "parsing"
    if isinstance(error, InternalError):
        return "internal"
    return "unknown"


def log_error(
    message: str,
    error: BaseException,
    context: dict | None = None,
    level: int = logging.ERROR,
) -> None:
    """Logs an error message with the associated exception details.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.
        level: Logging level for the record.
    """
    merged = dict(getattr(error, "data", None) or {})
    if context:
        merged.update(context)
    log_structured_error(
        error_type=categorize_error(error),
        message=f"{message}: {str(error)}",
        exception=error,
        context=merged or None,
        level=level,
    )
