"""Utility functions package for the action token broker.

Exposed names:
    RetryPolicy: Immutable retry/backoff configuration.
    DEFAULT_RETRY_POLICY: The policy used for credential exchange steps.
    retry_async: Runs an async operation under a RetryPolicy.
    format_duration: Formats time durations into human-readable strings.
"""

from .helpers import format_duration
from .retry import DEFAULT_RETRY_POLICY, RetryPolicy, retry_async

__all__ = ["RetryPolicy", "DEFAULT_RETRY_POLICY", "retry_async", "format_duration"]
