"""Debounced, cancellable per-identifier task scheduling.

Each identifier has at most one pending (armed but not yet started) task.
Scheduling again for the same identifier before the delay elapses cancels the
previous timer and discards its work without running it, so a burst of edits
coalesces into one invocation carrying the last submitted work.

Once a timer fires, its work runs as an ``asyncio.Task``. Started tasks are
tracked until they finish but are never cancelled by ``schedule`` or
``cancel_all``: a render that is already running completes and may overlap
with a newer one for the same identifier.

Thread Safety:
    Not thread-safe. All methods must be called from the thread running the
    event loop the timers are armed on.

Example:
    async def main() -> None:
        scheduler = DebounceScheduler()
        scheduler.schedule("d1", lambda: render("v1"), 300)
        scheduler.schedule("d1", lambda: render("v2"), 300)  # v1 discarded
        await scheduler.wait_idle()

"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from mermaidsync.utils.logger import block_logger, get_logger

logger = get_logger(__name__)

Work = Callable[[], Awaitable[Any]]


class DebounceScheduler:
    """Per-identifier debounce timers on an asyncio event loop.

    Args:
        loop: Event loop to arm timers on. Defaults to the running loop at
            the time ``schedule`` is called.

    """

    __slots__ = ("_in_flight", "_loop", "_pending")

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._pending: dict[str, asyncio.TimerHandle] = {}
        self._in_flight: set[asyncio.Task[None]] = set()

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        # Raises RuntimeError when called outside a running loop
        return asyncio.get_running_loop()

    def schedule(self, identifier: str, work: Work, delay_ms: float) -> None:
        """Run ``work`` after ``delay_ms`` of quiescence for ``identifier``.

        Any pending task for ``identifier`` is cancelled first; its work
        never runs.

        Args:
            identifier: Debounce key.
            work: Zero-argument callable returning an awaitable.
            delay_ms: Delay in milliseconds (negative values count as 0).

        Raises:
            RuntimeError: If no loop was given and none is running.

        """
        loop = self._get_loop()
        self.cancel(identifier)
        delay = max(delay_ms, 0) / 1000
        self._pending[identifier] = loop.call_later(delay, self._fire, identifier, work)
        block_logger(logger, identifier).debug("Scheduled in %.0f ms", delay_ms)

    def cancel(self, identifier: str) -> bool:
        """Cancel the pending task for ``identifier``.

        Returns:
            True if a pending task was cancelled.

        """
        handle = self._pending.pop(identifier, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> int:
        """Cancel every pending task. In-flight tasks keep running.

        Returns:
            Number of pending tasks cancelled.

        """
        handles = tuple(self._pending.values())
        self._pending.clear()
        for handle in handles:
            handle.cancel()
        return len(handles)

    def is_pending(self, identifier: str) -> bool:
        return identifier in self._pending

    def pending_identifiers(self) -> frozenset[str]:
        return frozenset(self._pending)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def in_flight_count(self) -> int:
        return len(self._in_flight)

    async def drain(self) -> None:
        """Wait for every started task to finish."""
        while self._in_flight:
            await asyncio.gather(*tuple(self._in_flight), return_exceptions=True)

    async def wait_idle(self) -> None:
        """Wait until nothing is pending or in flight.

        Sleeps until the earliest pending timer is due, then drains started
        tasks, and repeats while new work keeps appearing.
        """
        loop = asyncio.get_running_loop()
        while self._pending or self._in_flight:
            if self._in_flight:
                await self.drain()
                continue
            due = min(handle.when() for handle in self._pending.values())
            await asyncio.sleep(max(due - loop.time(), 0))

    # -- Internal ---------------------------------------------------------------

    def _fire(self, identifier: str, work: Work) -> None:
        self._pending.pop(identifier, None)
        loop = self._get_loop()
        task = loop.create_task(self._run(identifier, work), name=f"mermaidsync:{identifier}")
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _run(self, identifier: str, work: Work) -> None:
        try:
            await work()
        except asyncio.CancelledError:
            raise
        except Exception:
            block_logger(logger, identifier).error("Debounced task failed", exc_info=True)


__all__ = ["DebounceScheduler", "Work"]
