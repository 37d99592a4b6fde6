"""Recurring timer driving periodic work on the event loop."""

import asyncio
from typing import Awaitable, Callable

from ..logging_config import get_logger

logger = get_logger(__name__)


TickCallback = Callable[[], Awaitable[None]]


class RecurringTimer:
    """Runs `callback` immediately, then every `interval` seconds.

    The wait between ticks is the only suspension point. stop() cancels the
    pending wait (or the running tick) and no callback runs after it returns.
    A callback that raises is logged; the next tick is still scheduled.
    """

    def __init__(self, interval: float, callback: TickCallback, name: str = "timer"):
        if interval <= 0:
            raise ValueError(f"Timer interval must be positive, got {interval}")
        self._interval = interval
        self._callback = callback
        self._name = name
        self._task: asyncio.Task | None = None
        self._ticks = 0

    @property
    def interval(self) -> float:
        return self._interval

    @interval.setter
    def interval(self, value: float) -> None:
        """Change the interval; takes effect after the current wait."""
        if value <= 0:
            raise ValueError(f"Timer interval must be positive, got {value}")
        self._interval = value

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def ticks(self) -> int:
        """Number of ticks started since creation."""
        return self._ticks

    def start(self) -> None:
        """Schedule the timer task. No-op if already running."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name=self._name)

    async def stop(self) -> None:
        """Cancel the timer task and wait for it to finish.

        A tick may swallow the cancellation (asyncio.wait_for does on older
        interpreters); the loop still exits because the task is no longer the
        timer's current one. Cancelling the caller of stop() propagates.
        """
        task, self._task = self._task, None
        if task is None or task.done():
            return

        if task is asyncio.current_task():
            # Called from inside a tick; the loop exits when the tick returns
            return

        task.cancel()
        await asyncio.wait({task})

    async def _run(self) -> None:
        me = asyncio.current_task()
        while self._task is me:
            self._ticks += 1
            try:
                await self._callback()
            except Exception:
                logger.exception("Timer %s tick failed", self._name)
            if self._task is not me:
                break
            await asyncio.sleep(self._interval)
