"""
One-shot timers used to schedule token renewal.

A scheduler exposes call_later(delay_seconds, callback) and returns a handle
whose cancel() is idempotent. The provider reschedules itself after every
renewal, so only one-shot timers are needed.
"""

import asyncio
import threading
from typing import Callable, Optional, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class ThreadingScheduler:
    """Runs each callback on a daemon threading.Timer thread."""

    def __init__(self, name_prefix: str = "token-renewal"):
        self.name_prefix = name_prefix

    def call_later(
        self, delay_seconds: float, callback: Callable[[], None]
    ) -> threading.Timer:
        timer = threading.Timer(delay_seconds, callback)
        timer.daemon = True
        timer.name = f"{self.name_prefix}-{timer.name}"
        timer.start()
        return timer


class AsyncioScheduler:
    """
    Schedules callbacks on an asyncio event loop.

    call_later() must be invoked from the loop's thread, which is the case
    when the provider is created and read from coroutines on that loop.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(
        self, delay_seconds: float, callback: Callable[[], None]
    ) -> asyncio.TimerHandle:
        return self.loop.call_later(delay_seconds, callback)
