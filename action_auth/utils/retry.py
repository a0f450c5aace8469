"""Retry utilities for asynchronous operations using Tenacity."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..constants import (
    TOKEN_RETRY_BACKOFF_FACTOR,
    TOKEN_RETRY_INITIAL_DELAY,
    TOKEN_RETRY_MAX_ATTEMPTS,
    TOKEN_RETRY_MAX_DELAY,
)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with exponential backoff.

    Delays are in seconds. The delay before retry ``n`` (1-based) is
    ``min(initial_delay * backoff_factor ** (n - 1), max_delay)``.

    Attributes:
        max_attempts: Total attempts including the first one.
        initial_delay: Delay after the first failure.
        max_delay: Upper bound for any single delay.
        backoff_factor: Multiplier applied after each failed attempt.
    """

    max_attempts: int = 3
    initial_delay: float = 5.0
    max_delay: float = 20.0
    backoff_factor: float = 2.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.initial_delay <= 0:
            raise ValueError("initial_delay must be > 0")
        if self.max_delay < self.initial_delay:
            raise ValueError("max_delay must be >= initial_delay")
        if self.backoff_factor < 1:
            raise ValueError("backoff_factor must be >= 1")


DEFAULT_RETRY_POLICY = RetryPolicy(
    max_attempts=TOKEN_RETRY_MAX_ATTEMPTS,
    initial_delay=TOKEN_RETRY_INITIAL_DELAY,
    max_delay=TOKEN_RETRY_MAX_DELAY,
    backoff_factor=TOKEN_RETRY_BACKOFF_FACTOR,
)


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy = DEFAULT_RETRY_POLICY,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Retry an asynchronous operation with exponential backoff using Tenacity.

    The operation is attempted up to ``policy.max_attempts`` times. There is
    no sleep after the final failure; the most recent exception is re-raised
    unchanged and earlier ones are discarded.

    Args:
        operation: Zero-argument async callable.
        policy: Retry/backoff configuration.
        sleep: Awaitable sleep function, replaceable in tests.

    Returns:
        The result of the first successful attempt.

    Raises:
        Exception: Whatever the last failed attempt raised.
    """

    def before_attempt(retry_state: RetryCallState) -> None:
        logging.debug(
            f"🔁 Attempt {retry_state.attempt_number} of {policy.max_attempts}..."
        )

    def before_sleep(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0
        logging.warning(
            f"⚠️ Attempt {retry_state.attempt_number} failed: {exc}. Retrying in {delay:g} seconds..."
        )

    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=wait_exponential(
            multiplier=policy.initial_delay,
            exp_base=policy.backoff_factor,
            max=policy.max_delay,
        ),
        retry=retry_if_exception_type(Exception),
        before=before_attempt,
        before_sleep=before_sleep,
        sleep=sleep,
        reraise=True,
    )

    try:
        return await retrying(operation)
    except Exception as e:
        logging.error(
            f"❌ Operation failed after {policy.max_attempts} attempts: {type(e).__name__}: {e}"
        )
        raise
