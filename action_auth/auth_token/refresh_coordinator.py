"""Single-flight coordination of token refreshes."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from ..errors.handling import log_error
from ..errors.internal import RefreshError
from .types import RefreshState, TokenRecord


def _consume_exception(task: asyncio.Task[str]) -> None:
    # Waiters may all have been cancelled; mark the failure as retrieved.
    if not task.cancelled():
        task.exception()


class RefreshCoordinator:
    """Runs at most one credential exchange at a time.

    The first caller starts a shared task; callers arriving while it is in
    flight await that same task and observe the identical outcome. The task
    returns the coordinator to idle itself before its result is delivered,
    so a failure is never replayed to later callers.

    Args:
        obtain: Coroutine factory producing a new token record.
        apply: Callback storing a successful record; invoked before waiters
            are released.
    """

    def __init__(
        self,
        obtain: Callable[[], Awaitable[TokenRecord]],
        apply: Callable[[TokenRecord], None],
    ) -> None:
        self._obtain = obtain
        self._apply = apply
        self._inflight: asyncio.Task[str] | None = None

    @property
    def state(self) -> RefreshState:
        return RefreshState.IDLE if self._inflight is None else RefreshState.REFRESHING

    async def refresh(self) -> str:
        """Return a freshly obtained token, joining an in-flight refresh if any.

        Raises:
            RefreshError: If the underlying exchange failed.
        """
        task = self._inflight
        if task is not None:
            logging.info("⏳ Token refresh already in progress, waiting...")
        else:
            task = asyncio.ensure_future(self._run())
            task.add_done_callback(_consume_exception)
            self._inflight = task
        # Shield: a cancelled caller must not cancel the work others await.
        return await asyncio.shield(task)

    def reset(self) -> None:
        """Forget any in-flight refresh without cancelling it."""
        self._inflight = None

    async def _run(self) -> str:
        logging.info("🔄 Refreshing GitHub token...")
        try:
            record = await self._obtain()
            self._apply(record)
            return record.value
        except Exception as e:
            log_error("Failed to refresh token", e)
            raise RefreshError(f"Token refresh failed: {e}") from e
        finally:
            if self._inflight is asyncio.current_task():
                self._inflight = None
