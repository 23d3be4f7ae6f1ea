"""Countdown that stops a scan once its time budget runs out"""
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

import lanscanner.constants.constants as constants
from lanscanner.lanscanner_logger.lanscanner_logger import get_logger

logger = get_logger(__name__)


class ScanCountdown:
    """Ticks once per interval and calls *on_expired* after the last tick.

    Once cancelled no further ticks are emitted and *on_expired* is never
    called.
    """

    def __init__(self,
                 on_tick: Callable[[int], None],
                 on_expired: Callable[[], Awaitable[None]],
                 duration: int = constants.SCAN_DURATION_SECS,
                 interval: float = constants.SCAN_TICK_INTERVAL):
        self.on_tick = on_tick
        self.on_expired = on_expired
        self.duration = duration
        self.interval = interval
        self._cancelled = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def cancelled(self) -> bool:
        """True once cancel() was called"""
        return self._cancelled.is_set()

    @property
    def done(self) -> bool:
        """True when the countdown task has finished or was never started"""
        return self._task is None or self._task.done()

    def start(self) -> asyncio.Task:
        """Schedules the countdown on the running loop"""
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name="ScanCountdown")
        return self._task

    def cancel(self) -> None:
        """Stops the countdown.

        When called from the expiry callback itself the task keeps running so
        the stop it triggered can finish.
        """
        self._cancelled.set()
        if self._task is None or self._task.done():
            return
        if self._task is asyncio.current_task():
            return
        self._task.cancel()

    async def _run(self) -> None:
        for i in range(self.duration):
            if self._cancelled.is_set():
                return
            seconds_left = self.duration - i
            logger.debug("Scan stopping in %s seconds...", seconds_left)
            self.on_tick(seconds_left)
            await asyncio.sleep(self.interval)

        if self._cancelled.is_set():
            return
        logger.info("Scan timeout reached. Stopping scan automatically.")
        try:
            await self.on_expired()
        except Exception as exc:
            logger.error("Failed to stop scan automatically: %s", exc)
