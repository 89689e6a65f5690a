"""Debounced execution of an async action."""

import asyncio
from typing import Awaitable, Callable, Optional, Protocol


class TimerHandle(Protocol):
    """A scheduled callback that can be cancelled."""

    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Schedules a plain callback after a delay in seconds."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class LoopScheduler:
    """Scheduler backed by the running asyncio event loop."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback)


class Debouncer:
    """
    Run an async action once a burst of triggers has gone quiet.

    Every trigger() cancels the pending timer and schedules a new one, so
    the action runs once, `delay` seconds after the last trigger. A run
    already in flight is never cancelled, and runs never overlap: a run
    fired while another is in flight starts after it finishes.
    """

    def __init__(
        self,
        action: Callable[[], Awaitable[None]],
        delay: float = 1.0,
        scheduler: Optional[Scheduler] = None
    ):
        """
        Args:
            action: Coroutine function to run
            delay: Quiet period in seconds
            scheduler: Timer source, defaults to the running event loop
        """
        self.action = action
        self.delay = delay
        self.scheduler = scheduler or LoopScheduler()
        self._handle: Optional[TimerHandle] = None
        self._inflight: Optional[asyncio.Future] = None
        self._lock = asyncio.Lock()

    @property
    def pending(self) -> bool:
        """Whether a run is scheduled but has not started."""
        return self._handle is not None

    def trigger(self) -> None:
        """Reset the quiet period."""
        if self._handle is not None:
            self._handle.cancel()
        self._handle = self.scheduler.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        """Drop the pending run, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    async def _run(self) -> None:
        # Lock waiters are woken in FIFO order, so the newest run writes last.
        async with self._lock:
            await self.action()

    def _fire(self) -> None:
        self._handle = None
        self._inflight = asyncio.ensure_future(self._run())

    async def flush(self) -> None:
        """Run a pending action now and wait for any in-flight one."""
        if self._inflight is not None and not self._inflight.done():
            await self._inflight
        if self._handle is not None:
            self.cancel()
            await self._run()
