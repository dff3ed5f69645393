"""
Polling for long-running backend operations.

Some APIs start work asynchronously and expose a status endpoint. The
wait is bounded: every poll loop has a timeout and can be cancelled
through an ``asyncio.Event``.

Usage:
    async def job_status():
        return await client.get_job(job_id)

    job = await poll_until_done(
        job_status,
        until=lambda job: job["state"] == "DONE",
        interval=2.0,
        timeout=120.0,
        cancel_event=stop,
        operation_name="schema_discovery",
    )
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, TypeVar

from restwright.config.settings import get_settings
from restwright.errors import PollCancelledError, PollTimeoutError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _is_not_none(result: object) -> bool:
    return result is not None


async def poll_until_done(
    operation: Callable[[], Awaitable[T]],
    *,
    until: Callable[[T], bool] = _is_not_none,
    interval: float | None = None,
    timeout: float | None = None,
    cancel_event: asyncio.Event | None = None,
    operation_name: str = "operation",
) -> T:
    """
    Call ``operation`` at a fixed interval until ``until(result)`` holds.

    Args:
        operation: Async callable returning the current status
        until: Predicate deciding completion (default: result is not None)
        interval: Seconds between polls (default from settings)
        timeout: Overall limit in seconds (default from settings)
        cancel_event: Setting this event stops the wait
        operation_name: Name for logging and errors

    Returns:
        The first result satisfying ``until``

    Raises:
        PollTimeoutError: ``timeout`` elapsed first
        PollCancelledError: ``cancel_event`` was set first
    """
    settings = get_settings()
    interval = settings.poll_interval if interval is None else interval
    timeout = settings.poll_timeout if timeout is None else timeout

    deadline = time.monotonic() + timeout
    attempt = 0

    while True:
        if cancel_event is not None and cancel_event.is_set():
            raise PollCancelledError(operation_name)

        attempt += 1
        result = await operation()
        if until(result):
            logger.debug(f"{operation_name}: Done after {attempt} poll(s)")
            return result

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            logger.warning(f"{operation_name}: Gave up after {attempt} poll(s)")
            raise PollTimeoutError(operation_name, timeout)

        delay = min(interval, remaining)
        if cancel_event is None:
            await asyncio.sleep(delay)
            continue

        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            continue
        raise PollCancelledError(operation_name)
