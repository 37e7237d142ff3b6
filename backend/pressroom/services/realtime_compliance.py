"""Debounced compliance checking for the live editor.

While a user types, content is submitted on every change. The checker waits
for a quiet period (1 second by default) before running a check, so only the
latest content is checked. A new submission cancels both a pending and an
in-flight check; results of superseded content are never delivered.

Check errors are logged and reported through ``on_error`` but never raised,
the editor keeps working without compliance feedback.
"""

import asyncio
import contextlib
from collections.abc import Awaitable, Callable
from typing import Any

from pressroom.core.config import get_settings
from pressroom.core.logging import get_logger

logger = get_logger(__name__)

CheckFn = Callable[[str], Awaitable[Any]]
ResultCallback = Callable[[Any], Awaitable[None]]
ErrorCallback = Callable[[Exception], Awaitable[None]]
CheckingCallback = Callable[[], Awaitable[None]]


class DebouncedComplianceChecker:
    """Runs ``check_fn`` on the latest submitted content after a quiet period."""

    def __init__(
        self,
        check_fn: CheckFn,
        on_result: ResultCallback | None = None,
        debounce_seconds: float | None = None,
        min_length: int | None = None,
        on_error: ErrorCallback | None = None,
        on_checking: CheckingCallback | None = None,
    ) -> None:
        settings = get_settings()
        self._check_fn = check_fn
        self._on_result = on_result
        self._on_error = on_error
        self._on_checking = on_checking
        self._debounce_seconds = (
            debounce_seconds
            if debounce_seconds is not None
            else settings.realtime_debounce_seconds
        )
        self._min_length = (
            min_length if min_length is not None else settings.realtime_min_content_length
        )

        self._last_content: str | None = None
        self._last_result: Any = None
        self._is_checking = False
        self._task: asyncio.Task[None] | None = None

    @property
    def is_checking(self) -> bool:
        return self._is_checking

    @property
    def last_result(self) -> Any:
        return self._last_result

    @property
    def has_pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, content: str) -> bool:
        """Schedule a check of ``content``.

        Returns False (and schedules nothing) for content shorter than
        ``min_length`` or identical to the last submitted content.
        Must be called from a running event loop.
        """
        if len(content) < self._min_length:
            logger.debug(
                "Realtime check skipped - content too short",
                extra={"content_length": len(content), "min_length": self._min_length},
            )
            return False
        if content == self._last_content:
            return False

        self._last_content = content
        self._cancel()
        self._task = asyncio.create_task(self._run(content))
        return True

    def reset(self) -> None:
        """Forget the last content and result, cancel any pending check."""
        self._cancel()
        self._last_content = None
        self._last_result = None

    async def close(self) -> None:
        """Cancel any pending check and wait for it to finish."""
        task = self._task
        self._cancel()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def wait(self) -> None:
        """Wait for the pending check (if any) to complete."""
        if self._task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

    def _cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._is_checking = False

    async def _run(self, content: str) -> None:
        await asyncio.sleep(self._debounce_seconds)

        self._is_checking = True
        try:
            if self._on_checking is not None:
                await self._on_checking()
            result = await self._check_fn(content)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._is_checking = False
            logger.warning(
                "Realtime compliance check failed",
                extra={
                    "content_length": len(content),
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
            )
            if self._on_error is not None:
                await self._on_error(e)
            return

        self._is_checking = False
        self._last_result = result
        if self._on_result is not None:
            await self._on_result(result)
