# cartography/services/pin_scheduler.py
import asyncio
import threading
from typing import Any, Callable, Protocol


class PinHandle(Protocol):
    def cancel(self) -> Any: ...


class PinScheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> PinHandle: ...


class AsyncioPinScheduler:
    """
    Defers pin releases on the event loop that handles the interaction.
    Synchronous callers with no running loop get a daemon timer instead.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> PinHandle:
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                timer = threading.Timer(delay, callback)
                timer.daemon = True
                timer.start()
                return timer
        return loop.call_later(delay, callback)
